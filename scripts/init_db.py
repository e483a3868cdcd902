from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.crew_attendance.crew_attendance.database.bootstrap import apply_schema, list_tables
from src.crew_attendance.crew_attendance.database.connection import DatabaseConnection, DBConfig
from src.crew_attendance.crew_attendance.main import configure_logging


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    db_config = DBConfig.from_dict(settings.DB_CONFIG)
    conn = DatabaseConnection(db_config)

    count = apply_schema(conn, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(conn)
    print(
        f"OK: Applied {count} statements -> "
        f"{db_config.user}@{db_config.host}:{db_config.port}/{db_config.database} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
