from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Callable, Iterable, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import get_zone, months_before, now_local
from ..core.constants import DEFAULT_BATCH_CAPACITY, DEFAULT_LOOKBACK_MONTHS, WEEKLY_REST_WEEKDAY
from ..core.enums import PolicyKind
from ..core.exceptions import ValidationError
from ..directory.loader import DirectorySnapshotLoader
from ..ledger.index import LedgerIndexBuilder
from ..ledger.repository import LedgerStore
from ..ledger.writer import BoundedBatchWriter, check_capacity
from ..policy.model import Holiday
from ..policy.resolver import resolve_policy_dates
from .engine import ReconciliationEngine
from .model import ReconciliationReport

logger = logging.getLogger(__name__)


class ReconciliationService:
    """One reconciliation run: directory -> policy calendar -> index -> plan -> write.

    Runs must not overlap on the same tenant/window: the index is a snapshot
    taken before planning, so two concurrent runs could both plan a create for
    the same key. Serialising runs is the scheduler's job.
    """

    def __init__(
        self,
        store: LedgerStore,
        directory_loader: DirectorySnapshotLoader,
        *,
        engine: ReconciliationEngine | None = None,
        tz: ZoneInfo | None = None,
        holidays: Iterable[Holiday] | None = None,
        rest_weekday: int = WEEKLY_REST_WEEKDAY,
        batch_capacity: int = DEFAULT_BATCH_CAPACITY,
        lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
        today: Callable[[], date] | None = None,
    ):
        self._store = store
        self._loader = directory_loader
        self._tz = tz or get_zone()
        self._engine = engine or ReconciliationEngine(tz=self._tz)
        self._index_builder = LedgerIndexBuilder(store, tz=self._tz)
        self._holidays = list(holidays) if holidays is not None else None
        self._rest_weekday = int(rest_weekday)
        self._batch_capacity = check_capacity(batch_capacity)
        self._lookback_months = int(lookback_months)
        self._today = today or (lambda: now_local(self._tz).date())

    def default_window(self) -> tuple[date, date]:
        today = self._today()
        return months_before(today, self._lookback_months), today

    def run(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        tenant_id: Optional[str] = None,
        dry_run: bool = False,
    ) -> ReconciliationReport:
        if (start is None) != (end is None):
            raise ValidationError("start and end dates must be given together")
        if start is None:
            start, end = self.default_window()
        if start > end:
            raise ValidationError(f"start date {start} is after end date {end}")

        snapshot = self._loader.load()
        users = snapshot.users_in(tenant_id)
        logger.info("Found %d users%s", len(users), f" in tenant {tenant_id}" if tenant_id else " across all tenants")

        policy_dates = resolve_policy_dates(start, end, holidays=self._holidays, rest_weekday=self._rest_weekday)
        logger.info("Checking %d holiday/rest dates from %s to %s", len(policy_dates), start, end)

        index = self._index_builder.build(start, end, tenant_id=tenant_id)
        duplicates = index.duplicates()
        for (username, record_tenant), day, entries in duplicates:
            logger.warning(
                "Duplicate records for %s/%s on %s: %s",
                username,
                record_tenant,
                day,
                ", ".join(e.record_id for e in entries),
            )

        plan = self._engine.plan(policy_dates, users, index)
        report = ReconciliationReport(
            start=start,
            end=end,
            dates=plan.dates,
            users_checked=plan.users_checked,
            tenant_id=tenant_id,
            dry_run=dry_run,
            duplicates=len(duplicates),
            rejected_records=len(index.rejected),
            weekly_rest_days=sum(1 for p in policy_dates if p.kind == PolicyKind.WEEKLY_REST),
        )

        if dry_run or not plan.intents:
            if dry_run:
                logger.info("Dry run: %d pending operations not submitted", len(plan.intents))
            return report

        writer = BoundedBatchWriter(self._store, capacity=self._batch_capacity)
        with writer:
            writer.extend(intent.to_write_op() for intent in plan.intents)

        fixed = Counter(op.tag for op in writer.committed)
        for date_report in report.dates:
            date_report.issues_fixed = fixed.get(date_report.policy_date.day, 0)
        report.submissions = list(writer.submissions)
        return report
