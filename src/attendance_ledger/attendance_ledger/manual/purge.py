from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import get_zone, to_local_date
from ..core.constants import DEFAULT_BATCH_CAPACITY
from ..core.exceptions import LedgerQueryFailed, RecordFieldError
from ..ledger.model import LedgerEntry, WriteOp
from ..ledger.repository import LedgerStore
from ..ledger.writer import BoundedBatchWriter, check_capacity

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    kept: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def total(self) -> int:
        return len(self.kept) + len(self.deleted)


def broken_reason(entry: LedgerEntry, tz: ZoneInfo) -> Optional[str]:
    """Why a record is unusable, or None when it is fine.

    Broken means: no date, a date that cannot be read as a calendar day, or
    no clock-in.
    """

    try:
        to_local_date(entry.stored_date, tz)
    except RecordFieldError as exc:
        return str(exc)

    clock_in = entry.get("clockIn")
    if clock_in is None or (isinstance(clock_in, str) and not clock_in.strip()):
        return "record has no clockIn"
    return None


class PurgeService:
    def __init__(self, store: LedgerStore, *, tz: ZoneInfo | None = None, batch_capacity: int = DEFAULT_BATCH_CAPACITY):
        self._store = store
        self._tz = tz or get_zone()
        self._batch_capacity = check_capacity(batch_capacity)

    def purge(self, username: str, tenant_id: str, *, dry_run: bool = False) -> PurgeResult:
        """Delete the user's broken records within ``tenant_id`` only."""
        try:
            entries = list(self._store.query_for_user(username, tenant_id))
        except Exception as exc:
            raise LedgerQueryFailed(f"ledger query for {username}/{tenant_id} failed: {exc}") from exc

        result = PurgeResult(dry_run=dry_run)
        doomed: list[WriteOp] = []
        for entry in entries:
            reason = broken_reason(entry, self._tz)
            if reason is None:
                result.kept.append(entry.record_id)
                logger.info("Keeping valid record: %s - %s", entry.record_id, entry.get("clockIn"))
            else:
                result.deleted.append(entry.record_id)
                doomed.append(WriteOp.delete(entry))
                logger.info("Deleting broken record: %s (%s)", entry.record_id, reason)

        if doomed and not dry_run:
            writer = BoundedBatchWriter(self._store, capacity=self._batch_capacity)
            with writer:
                writer.extend(doomed)
        return result
