from dataclasses import dataclass

from vagas_api.domain.enums import SpotStatus


@dataclass(slots=True)
class Spot:
    """Physical parking slot (vaga) within a facility.

    Occupancy fields are only ever written by the spot allocator.
    """

    facility_id: str
    spot_number: str
    status: SpotStatus = SpotStatus.DISPONIVEL
    id: int | None = None
    booking_id: str | None = None
    user_id: str | None = None

    @property
    def is_free(self) -> bool:
        return self.status == SpotStatus.DISPONIVEL and self.booking_id is None

    def is_held_by(self, booking_id: str) -> bool:
        return self.booking_id is not None and self.booking_id == booking_id
