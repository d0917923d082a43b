from __future__ import annotations

import logging
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import get_zone, to_local_date
from ..core.exceptions import LedgerQueryFailed, RecordFieldError
from ..directory.loader import DirectorySnapshotLoader
from ..directory.model import DirectorySnapshot
from ..ledger.repository import LedgerStore
from .model import AuditReport, TenantMismatch

logger = logging.getLogger(__name__)


class TenantConsistencyAuditor:
    """Read-only sweep of the whole ledger against the directory.

    Flags records whose ``tenantId`` differs from the directory's tenant for
    the username, and usernames that have no directory entry at all. Nothing
    is repaired here: moving a record between tenants is a reviewed, separate
    action.
    """

    def __init__(self, store: LedgerStore, directory_loader: DirectorySnapshotLoader, *, tz: ZoneInfo | None = None):
        self._store = store
        self._loader = directory_loader
        self._tz = tz or get_zone()

    def audit(self, snapshot: Optional[DirectorySnapshot] = None) -> AuditReport:
        snapshot = snapshot or self._loader.load()
        report = AuditReport()
        orphans: dict[str, None] = {}

        try:
            for entry in self._store.iter_all():
                report.records_scanned += 1
                username = entry.username
                if not username:
                    report.records_without_username += 1
                    continue

                canonical = snapshot.tenant_of(username)
                if canonical is None:
                    orphans.setdefault(username, None)
                    continue

                if entry.tenant_id != canonical:
                    report.mismatched_records.append(
                        TenantMismatch(
                            record_id=entry.record_id,
                            username=username,
                            stored_tenant_id=entry.tenant_id,
                            canonical_tenant_id=canonical,
                            date=self._date_or_none(entry.stored_date),
                        )
                    )
        except Exception as exc:
            raise LedgerQueryFailed(f"full ledger scan failed: {exc}") from exc

        report.orphaned_usernames = list(orphans)
        logger.info(
            "Audited %d records: %d tenant mismatches, %d orphaned usernames",
            report.records_scanned,
            len(report.mismatched_records),
            len(report.orphaned_usernames),
        )
        return report

    def _date_or_none(self, value):
        try:
            return to_local_date(value, self._tz)
        except RecordFieldError:
            return None
