from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.internship_tracker.internship_tracker.database.bootstrap import apply_schema
from src.internship_tracker.internship_tracker.logging_config import configure_logging


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    count = apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    print(
        f"OK: applied {count} statements -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
