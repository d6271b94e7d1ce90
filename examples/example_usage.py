"""Example: use the service layer directly, without Flask.

Controllers are thin; the ledger, timetable and projections live in services.
"""

import importlib
import sys

from config import get_settings_module

from attendmate.container import build_container


def main(user_id: str) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    for row in container.subject_service.list_with_projection(user_id=user_id):
        print(f"{row['name']}: {row['percentage']}% ({row['band']}, bunkable={row['bunkable']})")

    print(container.analytics_service.simulate_skip(user_id=user_id, skip=3))


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "demo-user")
