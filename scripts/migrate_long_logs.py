"""Split stored time logs that exceed their tier cap.

Usage: python scripts/migrate_long_logs.py [--user-id N] [--dry-run]
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.internship_tracker.internship_tracker.container import build_container
from src.internship_tracker.internship_tracker.core.policy import OvertimePolicy
from src.internship_tracker.internship_tracker.logging_config import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--user-id", type=int, default=None)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=dict(settings.DB_CONFIG), policy=OvertimePolicy.from_settings(settings))

    if args.dry_run:
        logs = container.migration.find_long_logs(args.user_id)
        for log in logs:
            print(f"log {log.log_id} user {log.user_id} {log.log_type.value} {log.time_in} -> {log.time_out}")
        print(f"{len(logs)} logs need migration")
        return

    report = container.migration.migrate(args.user_id)
    print(f"processed={report.processed} errors={len(report.errors)}")
    for err in report.errors:
        print(f"  {err}")
    if not report.success:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
