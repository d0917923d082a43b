from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional, Protocol, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import day_start, format_hhmm, get_zone, hours_between, parse_hhmm
from ..common.validators import require_hhmm, require_non_empty
from ..core.constants import DEFAULT_BATCH_CAPACITY
from ..core.enums import AttendanceStatus, WorkMode
from ..core.exceptions import ValidationError
from ..ledger.index import LedgerIndexBuilder
from ..ledger.model import WriteOp
from ..ledger.repository import LedgerStore
from ..ledger.writer import BoundedBatchWriter, check_capacity

logger = logging.getLogger(__name__)


class ClockInSource(Protocol):
    def __call__(self, day: date) -> str:
        ...


@dataclass(frozen=True)
class FixedTime:
    value: str

    def __call__(self, day: date) -> str:
        return format_hhmm(parse_hhmm(self.value))


def _minute_of(value: str) -> int:
    t = parse_hhmm(value)
    return t.hour * 60 + t.minute


@dataclass
class RandomTimeWindow:
    """Whole-minute clock-in drawn uniformly from ``[earliest, latest]``.

    The random source is injected so seeded runs are reproducible.
    """

    earliest: str
    latest: str
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self):
        require_hhmm(self.earliest, "earliest clock-in")
        require_hhmm(self.latest, "latest clock-in")
        if _minute_of(self.earliest) > _minute_of(self.latest):
            raise ValidationError(f"random window {self.earliest}-{self.latest} is empty")

    def __call__(self, day: date) -> str:
        minute = self.rng.randint(_minute_of(self.earliest), _minute_of(self.latest))
        return f"{minute // 60:02d}:{minute % 60:02d}"


@dataclass(frozen=True)
class SeedSegment:
    """Consecutive days sharing one clock-in rule. No clock-out leaves the day open."""

    days: Sequence[date]
    clock_in: ClockInSource
    clock_out: Optional[str] = None


def _require_clock_out_after(clock_in: str, clock_out: Optional[str], day: date) -> None:
    # Segments never span midnight.
    if clock_out is not None and _minute_of(clock_out) <= _minute_of(clock_in):
        raise ValidationError(f"{day}: clock-out {clock_out} is not after clock-in {clock_in}")


def day_range(start: date, end: date) -> list[date]:
    if start > end:
        raise ValidationError(f"start date {start} is after end date {end}")
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


@dataclass
class SeedResult:
    created: list[tuple[date, str, Optional[str]]] = field(default_factory=list)
    skipped: list[date] = field(default_factory=list)
    submissions: list[int] = field(default_factory=list)


class SeedService:
    """Injects records for one user over an explicit list of days.

    Days that already hold a record for ``(username, tenantId)`` are skipped, so
    re-running a seed never duplicates the composite key.
    """

    def __init__(
        self,
        store: LedgerStore,
        *,
        tz: ZoneInfo | None = None,
        batch_capacity: int = DEFAULT_BATCH_CAPACITY,
        work_mode: str = WorkMode.OFFICE.value,
        notes: str = "Bulk created",
    ):
        self._store = store
        self._tz = tz or get_zone()
        self._index_builder = LedgerIndexBuilder(store, tz=self._tz)
        self._batch_capacity = check_capacity(batch_capacity)
        self._work_mode = work_mode
        self._notes = notes

    def seed(self, username: str, tenant_id: str, segments: Sequence[SeedSegment]) -> SeedResult:
        username = require_non_empty(username, "username")
        tenant_id = require_non_empty(tenant_id, "tenantId")
        days = [d for seg in segments for d in seg.days]
        if not days:
            raise ValidationError("nothing to seed: no days given")
        if len(set(days)) != len(days):
            raise ValidationError("seed segments overlap")
        for seg in segments:
            if seg.clock_out is not None:
                require_hhmm(seg.clock_out, "clockOut")
            if isinstance(seg.clock_in, FixedTime):
                require_hhmm(seg.clock_in.value, "clockIn")

        index = self._index_builder.build(min(days), max(days), tenant_id=tenant_id)
        existing = index.days_for(username, tenant_id)

        # Every record is drawn and checked before the first group is submitted.
        result = SeedResult()
        ops: list[WriteOp] = []
        for seg in segments:
            for day in seg.days:
                if day in existing:
                    result.skipped.append(day)
                    logger.info("  %s: already has a record, skipped", day)
                    continue

                clock_in = require_hhmm(seg.clock_in(day), "clockIn")
                _require_clock_out_after(clock_in, seg.clock_out, day)
                ops.append(WriteOp.create(self._record(username, tenant_id, day, clock_in, seg.clock_out), tag=day))
                result.created.append((day, clock_in, seg.clock_out))
                logger.info("  %s: %s - %s", day, clock_in, seg.clock_out or "Not clocked out")

        writer = BoundedBatchWriter(self._store, capacity=self._batch_capacity)
        with writer:
            writer.extend(ops)
        result.submissions = list(writer.submissions)
        return result

    def _record(self, username: str, tenant_id: str, day: date, clock_in: str, clock_out: Optional[str]) -> dict:
        return {
            "username": username,
            "tenantId": tenant_id,
            "date": day_start(day, self._tz),
            "clockIn": clock_in,
            "clockOut": clock_out,
            "workMode": self._work_mode,
            "status": AttendanceStatus.PRESENT.value,
            "totalHours": hours_between(clock_in, clock_out),
            "notes": self._notes,
        }
