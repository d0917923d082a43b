"""Manually mark attendance for one user on one day.

Usage:
    python scripts/mark_attendance.py --username "Ayaz Memon" --tenant logam-digital-001 --clock-in 11:35
    python scripts/mark_attendance.py --username "Ayaz Memon" --tenant logam-digital-001 --clock-in 09:40 \
        --date 2025-11-03 --work-mode wfh
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
from src.attendance_ledger.attendance_ledger.core.enums import WorkMode
from src.attendance_ledger.attendance_ledger.core.exceptions import DomainError
from src.attendance_ledger.attendance_ledger.main import configure_logging, load_settings


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--username", required=True)
    parser.add_argument("--tenant", required=True)
    parser.add_argument("--clock-in", required=True, help="HH:MM")
    parser.add_argument("--date", type=parse_iso_date, help="day to mark (default: today)")
    parser.add_argument("--work-mode", default=WorkMode.OFFICE.value, choices=[m.value for m in WorkMode])
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings, stream=sys.stdout)

    try:
        container = build_container_from_settings(settings)
        result = container.mark_service.mark(
            args.username, args.tenant, clock_in=args.clock_in, day=args.date, work_mode=args.work_mode
        )
    except DomainError as e:
        print(f"ERROR: {e}")
        return 1

    print("=" * 60)
    print("ATTENDANCE MARKED" + (" (new record)" if result.created else " (existing record updated)"))
    print("=" * 60)
    print(f"   User: {args.username}")
    print(f"   Organization: {args.tenant}")
    print(f"   Date: {result.day.isoformat()}")
    print(f"   Clock In: {args.clock_in}")
    print(f"   Work Mode: {args.work_mode}")
    print(f"   Record ID: {result.record_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
