from __future__ import annotations

import importlib
import sys
from pathlib import Path

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dotenv import load_dotenv

from qr_attendance.config import get_settings_module
from qr_attendance.database.bootstrap import ensure_demo_students
from qr_attendance.database.connection import DatabaseConnection, db_config_from_dict


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    added = ensure_demo_students(DatabaseConnection.get_instance(db_config_from_dict(db_config)))
    print(
        f"OK: Seeded {added} demo student(s) -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
