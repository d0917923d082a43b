"""Find attendance records whose tenantId disagrees with the user directory.

Read-only: prints mismatches and orphaned usernames, never writes.

Usage:
    python scripts/audit_tenants.py
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.attendance_ledger.attendance_ledger.audit.summary import format_audit
from src.attendance_ledger.attendance_ledger.container import build_container_from_settings
from src.attendance_ledger.attendance_ledger.core.exceptions import DomainError
from src.attendance_ledger.attendance_ledger.main import configure_logging, load_settings


def main(argv=None) -> int:
    argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter).parse_args(argv)
    settings = load_settings()
    configure_logging(settings, stream=sys.stdout)

    try:
        container = build_container_from_settings(settings)
        report = container.tenant_auditor.audit()
    except DomainError as e:
        print(f"ERROR: {type(e).__name__}: {e}")
        return 1

    print(format_audit(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
