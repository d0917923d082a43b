from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import day_window, get_zone, to_local_date
from ..core.exceptions import LedgerQueryFailed, RecordFieldError
from .model import LedgerEntry
from .repository import LedgerStore

logger = logging.getLogger(__name__)

Key = tuple[str, str]


@dataclass
class LedgerIndex:
    """Existing records of one window, keyed by ``(username, tenantId)``.

    Within a key, records are grouped per calendar day. When the store holds
    more than one record for the same key and day, the first one returned by
    the query is the one reconciliation sees; the rest are listed by
    ``duplicates()``.
    """

    start: date
    end: date
    tenant_id: Optional[str] = None
    rejected: list[tuple[str, str]] = field(default_factory=list)
    _by_key: dict[Key, dict[date, list[LedgerEntry]]] = field(default_factory=dict)

    def add(self, entry: LedgerEntry, day: date) -> None:
        key = (entry.username, entry.tenant_id)
        self._by_key.setdefault(key, {}).setdefault(day, []).append(entry)

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end

    def lookup(self, username: str, tenant_id: str, day: date) -> Optional[LedgerEntry]:
        if not self.covers(day):
            raise RecordFieldError(f"{day} is outside the indexed window {self.start}..{self.end}")
        found = self._by_key.get((username, tenant_id), {}).get(day)
        return found[0] if found else None

    def days_for(self, username: str, tenant_id: str) -> set[date]:
        return set(self._by_key.get((username, tenant_id), {}))

    def duplicates(self) -> list[tuple[Key, date, list[LedgerEntry]]]:
        out = []
        for key, days in self._by_key.items():
            for day, entries in days.items():
                if len(entries) > 1:
                    out.append((key, day, list(entries)))
        return out

    def __iter__(self) -> Iterator[LedgerEntry]:
        for days in self._by_key.values():
            for entries in days.values():
                yield from entries

    def __len__(self) -> int:
        return sum(len(entries) for days in self._by_key.values() for entries in days.values())


class LedgerIndexBuilder:
    """Builds a ``LedgerIndex`` from a single range query.

    The window is closed in days (``start``..``end`` inclusive) and queried as
    the half-open timestamp range ``[start 00:00, end+1 00:00)`` in the ledger
    timezone. There is no pagination: a window whose records exceed the store's
    single-query ceiling must be split by the caller. Records whose ``date`` is
    stored as a string are not matched by the range query on any backend.
    """

    def __init__(self, store: LedgerStore, *, tz: ZoneInfo | None = None):
        self._store = store
        self._tz = tz or get_zone()

    def build(self, start: date, end: date, *, tenant_id: Optional[str] = None) -> LedgerIndex:
        lower, upper = day_window(start, end, self._tz)
        try:
            entries = list(self._store.query_range(lower, upper, tenant_id=tenant_id))
        except Exception as exc:
            raise LedgerQueryFailed(f"ledger range query {start}..{end} failed: {exc}") from exc

        index = LedgerIndex(start=start, end=end, tenant_id=tenant_id)
        for entry in entries:
            try:
                index.add(entry, self._day_of(entry))
            except RecordFieldError as exc:
                index.rejected.append((entry.record_id, str(exc)))
                logger.warning("Ignoring ledger record %s: %s", entry.record_id, exc)

        logger.debug("Indexed %d records for %s..%s (tenant=%s)", len(index), start, end, tenant_id or "*")
        return index

    def _day_of(self, entry: LedgerEntry) -> date:
        if not entry.username or not entry.tenant_id:
            raise RecordFieldError("record has no username/tenantId")
        return to_local_date(entry.stored_date, self._tz)
