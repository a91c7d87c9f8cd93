"""Daily attendance sync.

Marks today's approved leave in the work logs, then marks yesterday's no-shows
absent. Meant to run once a day from cron:

    python scripts/daily_attendance_sync.py [--tenant-id 1] [--date 2025-03-14]

``--date`` replaces "today"; absences are then marked for the day before it.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from datetime import timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.workforce_engine.workforce_engine.common.clock import parse_tenant_timezones
from src.workforce_engine.workforce_engine.common.dates import parse_iso_date
from src.workforce_engine.workforce_engine.common.logs import configure_logging
from src.workforce_engine.workforce_engine.container import build_container
from src.workforce_engine.workforce_engine.core.exceptions import DomainError

logger = logging.getLogger("daily_attendance_sync")


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync daily attendance with leaves and auto-mark absents")
    parser.add_argument("--tenant-id", type=int, default=None, help="Only process this tenant's employees")
    parser.add_argument("--date", type=parse_iso_date, default=None, help="Run as if today were YYYY-MM-DD")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv(override=False)
    args = _parse_args(argv)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        default_timezone=getattr(settings, "DEFAULT_TIMEZONE", "UTC"),
        tenant_timezones=parse_tenant_timezones(getattr(settings, "TENANT_TIMEZONES", "")),
    )
    today = args.date or container.tenant_clock.today(args.tenant_id)
    attendance = container.attendance_service

    logger.info("Starting daily attendance sync for %s", today)
    try:
        synced = attendance.sync_with_approved_leaves(on_date=today, tenant_id=args.tenant_id)
        marked = attendance.auto_mark_absent(on_date=today - timedelta(days=1), tenant_id=args.tenant_id)
    except DomainError as e:
        logger.error("Failed to sync daily attendance: %s", e)
        return 1

    print(f"OK: {synced} leave days synced for {today}, {marked} absences marked for {today - timedelta(days=1)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
