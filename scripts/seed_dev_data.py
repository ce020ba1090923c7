from __future__ import annotations

import argparse
import uuid
from decimal import Decimal

from sqlalchemy.engine import make_url
from sqlmodel import Session, create_engine, select

from vagas_api.domain.enums import SpotStatus
from vagas_api.infrastructure.auth import JWTIdentityResolver
from vagas_api.infrastructure.db.models import FacilityModel, SpotModel
from vagas_api.infrastructure.db.session import build_database_url
from vagas_api.shared.config.settings import settings


def _sync_database_url() -> str:
    url = make_url(build_database_url(settings))
    drivername = url.drivername.replace("aiomysql", "pymysql")
    return url.set(drivername=drivername).render_as_string(hide_password=False)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a demo facility with spots for local development.")
    parser.add_argument("--owner-id", default="owner-dev")
    parser.add_argument("--name", default="Estacionamento Centro")
    parser.add_argument("--hourly-rate", default="10.00")
    parser.add_argument("--spots", nargs="+", default=["A10", "A11", "A12", "B01", "B02", "B03"])
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    engine = create_engine(_sync_database_url(), pool_pre_ping=True)
    try:
        with Session(engine) as session:
            facility = session.exec(
                select(FacilityModel).where(
                    FacilityModel.owner_id == args.owner_id, FacilityModel.name == args.name
                )
            ).first()
            if facility is None:
                facility = FacilityModel(
                    id=str(uuid.uuid4()),
                    owner_id=args.owner_id,
                    name=args.name,
                    hourly_rate=Decimal(args.hourly_rate),
                )
                session.add(facility)
                session.flush()
            existing = set(
                session.exec(select(SpotModel.spot_number).where(SpotModel.facility_id == facility.id)).all()
            )
            for number in args.spots:
                if number not in existing:
                    session.add(
                        SpotModel(facility_id=facility.id, spot_number=number, status=SpotStatus.DISPONIVEL)
                    )
            session.commit()
            facility_id = facility.id
    finally:
        engine.dispose()

    resolver = JWTIdentityResolver(settings.jwt_secret_key, settings.jwt_algorithm, settings.jwt_audience)
    print(f"Seeded facility {facility_id} with spots {', '.join(args.spots)}")
    print(f"Owner token: {resolver.issue(args.owner_id)}")


if __name__ == "__main__":
    main()
