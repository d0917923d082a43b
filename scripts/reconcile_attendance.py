"""Check and fix attendance on past holidays and weekly rest days.

Usage:
    python scripts/reconcile_attendance.py
    python scripts/reconcile_attendance.py --start 2025-01-01 --end 2025-03-31 --tenant logam-digital-001
    python scripts/reconcile_attendance.py --dry-run
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.attendance_ledger.attendance_ledger.common.datetime_utils import parse_iso_date
from src.attendance_ledger.attendance_ledger.container import build_container_from_settings
from src.attendance_ledger.attendance_ledger.core.exceptions import DomainError
from src.attendance_ledger.attendance_ledger.main import configure_logging, load_settings
from src.attendance_ledger.attendance_ledger.reconciliation.summary import format_report


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--start", type=parse_iso_date, help="first day to check (YYYY-MM-DD)")
    parser.add_argument("--end", type=parse_iso_date, help="last day to check, inclusive (YYYY-MM-DD)")
    parser.add_argument("--tenant", help="only reconcile users of this tenant")
    parser.add_argument("--dry-run", action="store_true", help="plan and report without writing")
    args = parser.parse_args(argv)
    if (args.start is None) != (args.end is None):
        parser.error("--start and --end must be given together")
    if args.start and args.start > args.end:
        parser.error("--start is after --end")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings, stream=sys.stdout)

    print("Starting Holiday Attendance Check & Fix\n")
    try:
        container = build_container_from_settings(settings)
        report = container.reconciliation_service.run(
            start=args.start, end=args.end, tenant_id=args.tenant, dry_run=args.dry_run
        )
    except DomainError as e:
        print(f"ERROR: {type(e).__name__}: {e}")
        return 1

    print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
