from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.attendance_ledger.attendance_ledger.database.bootstrap import apply_schema, list_tables
from src.attendance_ledger.attendance_ledger.database.connection import DatabaseConnection, DBConfig
from src.attendance_ledger.attendance_ledger.main import load_settings


def main() -> None:
    settings = load_settings()
    config = DBConfig.from_mapping(settings.DB_CONFIG)
    conn = DatabaseConnection(config)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(conn, schema_path=schema_path)
    tables = list_tables(conn)
    print(f"OK: Applied schema.sql -> {config.user}@{config.host}:{config.port}/{config.database} (tables={len(tables)})")


if __name__ == "__main__":
    main()
