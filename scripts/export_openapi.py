from __future__ import annotations

import json
from pathlib import Path

from vagas_api.api.app import create_app
from vagas_api.infrastructure.repositories import InMemoryLifecycleStore
from vagas_api.shared.config import ApplicationContainer, settings


def main() -> None:
    """Export the OpenAPI document into `docs/openapi.json` without touching MySQL."""
    container = ApplicationContainer(settings, uow_factory=InMemoryLifecycleStore().unit_of_work)
    document = create_app(container).openapi()
    output = Path("docs/openapi.json")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(
        json.dumps(document, indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    print(f"OpenAPI exported to {output}")


if __name__ == "__main__":
    main()
