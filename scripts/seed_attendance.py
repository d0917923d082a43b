"""Bulk create attendance records for one user over a day range.

Fixed times:
    python scripts/seed_attendance.py --username "Ayaz Memon" --tenant logam-digital-001 \
        --start 2025-11-01 --end 2025-11-09 --clock-in 10:00 --clock-out 18:00

Random clock-in within a window, left open (no clock-out):
    python scripts/seed_attendance.py --username "Ayaz Memon" --tenant logam-digital-001 \
        --start 2025-11-10 --end 2025-11-15 --random-from 11:15 --random-to 11:30 --seed 7
"""

from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.attendance_ledger.attendance_ledger.common.datetime_utils import parse_iso_date
from src.attendance_ledger.attendance_ledger.container import build_container_from_settings
from src.attendance_ledger.attendance_ledger.core.exceptions import DomainError
from src.attendance_ledger.attendance_ledger.main import configure_logging, load_settings
from src.attendance_ledger.attendance_ledger.manual.seed import FixedTime, RandomTimeWindow, SeedSegment, day_range


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--username", required=True)
    parser.add_argument("--tenant", required=True)
    parser.add_argument("--start", type=parse_iso_date, required=True)
    parser.add_argument("--end", type=parse_iso_date, required=True)
    parser.add_argument("--clock-in", help="fixed clock-in HH:MM")
    parser.add_argument("--clock-out", help="clock-out HH:MM (omit to leave the days open)")
    parser.add_argument("--random-from", help="earliest random clock-in HH:MM")
    parser.add_argument("--random-to", help="latest random clock-in HH:MM")
    parser.add_argument("--seed", type=int, help="random seed for reproducible clock-ins")
    args = parser.parse_args(argv)

    if bool(args.clock_in) == bool(args.random_from or args.random_to):
        parser.error("give either --clock-in or --random-from/--random-to")
    if (args.random_from is None) != (args.random_to is None):
        parser.error("--random-from and --random-to must be given together")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings, stream=sys.stdout)

    try:
        if args.clock_in:
            source = FixedTime(args.clock_in)
        else:
            source = RandomTimeWindow(args.random_from, args.random_to, rng=random.Random(args.seed))
        segment = SeedSegment(days=day_range(args.start, args.end), clock_in=source, clock_out=args.clock_out)

        container = build_container_from_settings(settings)
        print(f"Bulk marking attendance for {args.username} ({args.tenant})\n")
        result = container.seed_service.seed(args.username, args.tenant, [segment])
    except DomainError as e:
        print(f"ERROR: {e}")
        return 1

    print("=" * 80)
    print("SUMMARY")
    print("=" * 80)
    print(f"User: {args.username}")
    print(f"Organization: {args.tenant}")
    print(f"Total records created: {len(result.created)}")
    print(f"Days skipped (already recorded): {len(result.skipped)}")
    print("=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
