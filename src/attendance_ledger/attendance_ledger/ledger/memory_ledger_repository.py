from __future__ import annotations

import copy
import itertools
from datetime import date, datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import day_start, get_zone, now_local
from ..core.constants import MAX_BATCH_MUTATIONS
from ..core.enums import WriteKind
from .model import LedgerEntry, WriteOp
from .repository import LedgerStore


class InMemoryLedgerStore(LedgerStore):
    """Dict-backed ledger used by the testing settings and the test suite.

    Behaves like the hosted stores where it matters: store-assigned ids, a
    per-submission mutation ceiling and all-or-nothing commits.
    """

    def __init__(
        self,
        records: Iterable[Mapping[str, Any]] = (),
        *,
        tz: ZoneInfo | None = None,
        max_mutations: int = MAX_BATCH_MUTATIONS,
        clock: Callable[[], datetime] | None = None,
    ):
        self._tz = tz or get_zone()
        self._max_mutations = int(max_mutations)
        self._clock = clock or (lambda: now_local(self._tz))
        self._ids = itertools.count(1)
        self._records: dict[str, dict[str, Any]] = {}
        self.submissions: list[int] = []
        self.queries = 0

        for rec in records:
            data = dict(rec)
            record_id = str(data.pop("id", None) or self._next_id())
            self._records[record_id] = data

    def _next_id(self) -> str:
        return f"rec-{next(self._ids):06d}"

    def _as_datetime(self, value: Any) -> Optional[datetime]:
        # Range filters only match timestamps, as in Firestore; string dates
        # are reachable through query_for_user and iter_all only.
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=self._tz)
        if isinstance(value, date):
            return day_start(value, self._tz)
        return None

    def _entry(self, record_id: str) -> LedgerEntry:
        return LedgerEntry(record_id=record_id, data=copy.deepcopy(self._records[record_id]))

    # -- reads -------------------------------------------------------------

    def get(self, record_id: str) -> Optional[LedgerEntry]:
        return self._entry(record_id) if record_id in self._records else None

    def query_range(self, start: datetime, end: datetime, *, tenant_id: Optional[str] = None) -> Sequence[LedgerEntry]:
        self.queries += 1
        out = []
        for record_id, data in self._records.items():
            when = self._as_datetime(data.get("date"))
            if when is None or not (start <= when < end):
                continue
            if tenant_id is not None and data.get("tenantId") != tenant_id:
                continue
            out.append(self._entry(record_id))
        return out

    def query_for_user(self, username: str, tenant_id: str) -> Sequence[LedgerEntry]:
        self.queries += 1
        return [
            self._entry(record_id)
            for record_id, data in self._records.items()
            if data.get("username") == username and data.get("tenantId") == tenant_id
        ]

    def iter_all(self) -> Iterable[LedgerEntry]:
        self.queries += 1
        return [self._entry(record_id) for record_id in list(self._records)]

    # -- writes ------------------------------------------------------------

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        if len(ops) > self._max_mutations:
            raise RuntimeError(f"batch of {len(ops)} exceeds the {self._max_mutations}-mutation limit")
        for op in ops:
            if op.kind != WriteKind.CREATE and op.record_id not in self._records:
                raise KeyError(f"no record {op.record_id!r} to {op.kind.value}")

        staged = copy.deepcopy(self._records)
        now = self._clock()
        ids: list[str] = []
        for op in ops:
            if op.kind == WriteKind.CREATE:
                record_id = self._next_id()
                staged[record_id] = {**op.fields, "createdAt": now, "updatedAt": now}
            elif op.kind == WriteKind.UPDATE:
                record_id = op.record_id
                staged[record_id].update(op.fields)
                staged[record_id]["updatedAt"] = now
            else:
                record_id = op.record_id
                staged.pop(record_id, None)
            ids.append(record_id)

        self._records = staged
        self.submissions.append(len(ops))
        return ids

    def create(self, fields: Mapping[str, Any]) -> str:
        now = self._clock()
        record_id = self._next_id()
        self._records[record_id] = {**fields, "createdAt": now, "updatedAt": now}
        return record_id

    def __len__(self) -> int:
        return len(self._records)
