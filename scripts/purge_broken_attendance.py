"""Delete a user's attendance records that have no date or no clock-in.

Usage:
    python scripts/purge_broken_attendance.py --username "Ayaz Memon" --tenant logam-digital-001 [--dry-run]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.attendance_ledger.attendance_ledger.container import build_container_from_settings
from src.attendance_ledger.attendance_ledger.core.exceptions import DomainError
from src.attendance_ledger.attendance_ledger.main import configure_logging, load_settings


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--username", required=True)
    parser.add_argument("--tenant", required=True)
    parser.add_argument("--dry-run", action="store_true", help="report what would be deleted")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings, stream=sys.stdout)

    try:
        container = build_container_from_settings(settings)
        result = container.purge_service.purge(args.username, args.tenant, dry_run=args.dry_run)
    except DomainError as e:
        print(f"ERROR: {type(e).__name__}: {e}")
        return 1

    print("=" * 80)
    print("CLEANUP SUMMARY" + (" (dry run)" if result.dry_run else ""))
    print("=" * 80)
    print(f"Total records processed: {result.total}")
    print(f"Deleted broken records: {len(result.deleted)}")
    print(f"Kept valid records: {len(result.kept)}")
    print("=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
