from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import day_start, get_zone, now_local
from ..common.validators import require_choice, require_hhmm, require_non_empty
from ..core.constants import DEFAULT_BATCH_CAPACITY
from ..core.enums import AttendanceStatus, WorkMode
from ..core.exceptions import ValidationError
from ..directory.loader import DirectorySnapshotLoader
from ..ledger.index import LedgerIndexBuilder
from ..ledger.model import WriteOp
from ..ledger.repository import LedgerStore
from ..ledger.writer import BoundedBatchWriter, check_capacity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkResult:
    record_id: str
    day: date
    created: bool


class MarkService:
    """Marks one user present on one day, or fixes that day's clock-in."""

    def __init__(
        self,
        store: LedgerStore,
        directory_loader: DirectorySnapshotLoader,
        *,
        tz: ZoneInfo | None = None,
        batch_capacity: int = DEFAULT_BATCH_CAPACITY,
        today: Callable[[], date] | None = None,
    ):
        self._store = store
        self._loader = directory_loader
        self._tz = tz or get_zone()
        self._index_builder = LedgerIndexBuilder(store, tz=self._tz)
        self._batch_capacity = check_capacity(batch_capacity)
        self._today = today or (lambda: now_local(self._tz).date())

    def mark(
        self,
        username: str,
        tenant_id: str,
        *,
        clock_in: str,
        day: Optional[date] = None,
        work_mode: str = WorkMode.OFFICE.value,
    ) -> MarkResult:
        username = require_non_empty(username, "username")
        tenant_id = require_non_empty(tenant_id, "tenantId")
        clock_in = require_hhmm(clock_in, "clockIn")
        work_mode = require_choice(work_mode, "workMode", WorkMode)
        day = day or self._today()

        snapshot = self._loader.load()
        if not any(u.username == username and u.tenant_id == tenant_id for u in snapshot.users):
            raise ValidationError(f'User "{username}" not found in organization {tenant_id}')

        index = self._index_builder.build(day, day, tenant_id=tenant_id)
        existing = index.lookup(username, tenant_id, day)

        if existing is not None:
            op = WriteOp.update(existing, {"clockIn": clock_in, "workMode": work_mode}, tag=day)
            logger.info("Attendance already exists for %s; updating clock-in to %s", day, clock_in)
        else:
            op = WriteOp.create(
                {
                    "username": username,
                    "tenantId": tenant_id,
                    "date": day_start(day, self._tz),
                    "clockIn": clock_in,
                    "clockOut": None,
                    "workMode": work_mode,
                    "status": AttendanceStatus.PRESENT.value,
                    "totalHours": None,
                    "notes": "Marked via script",
                },
                tag=day,
            )
            logger.info("Creating attendance for %s on %s at %s", username, day, clock_in)

        writer = BoundedBatchWriter(self._store, capacity=self._batch_capacity)
        with writer:
            writer.add(op)
        return MarkResult(record_id=writer.committed_ids[0], day=day, created=existing is None)
