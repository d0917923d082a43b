from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import day_start, get_zone
from ..core.constants import DEFAULT_CLOCK_IN, DEFAULT_CLOCK_OUT, DEFAULT_LOCATION, DEFAULT_TOTAL_HOURS
from ..core.enums import AttendanceStatus, ReconcileAction, WorkMode, WriteKind
from ..core.exceptions import RecordFieldError
from ..directory.model import User
from ..ledger.index import LedgerIndex
from ..policy.model import PolicyDate
from .model import DateReport, ReconciliationIntent, ReconciliationPlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PresenceDefaults:
    """Field values written for a rest date nobody recorded."""

    clock_in: str = DEFAULT_CLOCK_IN
    clock_out: str = DEFAULT_CLOCK_OUT
    work_mode: str = WorkMode.OFFICE.value
    location: str = DEFAULT_LOCATION
    total_hours: str = DEFAULT_TOTAL_HOURS

    def as_fields(self) -> dict[str, str]:
        return {
            "clockIn": self.clock_in,
            "clockOut": self.clock_out,
            "workMode": self.work_mode,
            "location": self.location,
            "totalHours": self.total_hours,
        }


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ReconciliationEngine:
    """Decides, per (policy date, user), whether the ledger needs a write.

    Rest dates default to ``present``: a missing record is created, an
    ``absent`` one is corrected, and any other explicit status is left alone.
    The engine only plans; it never touches the store.
    """

    def __init__(self, *, tz: ZoneInfo | None = None, defaults: PresenceDefaults | None = None):
        self._tz = tz or get_zone()
        self._defaults = defaults or PresenceDefaults()

    def plan(self, policy_dates: Sequence[PolicyDate], users: Sequence[User], index: LedgerIndex) -> ReconciliationPlan:
        intents: list[ReconciliationIntent] = []
        reports: list[DateReport] = []
        seen_days = set()

        for policy_date in sorted(policy_dates, key=lambda p: p.day):
            if policy_date.day in seen_days:
                continue
            seen_days.add(policy_date.day)

            logger.info("Checking %s (%s):", policy_date.reason, policy_date.iso)
            report = DateReport(policy_date=policy_date)
            seen_keys: set[tuple[str, str]] = set()

            for user in users:
                key = (user.username, user.tenant_id)
                if key in seen_keys:
                    continue
                seen_keys.add(key)
                report.users_checked += 1

                try:
                    action, intent = self.evaluate(policy_date, user, index)
                except RecordFieldError as exc:
                    report.errors += 1
                    logger.warning("  ! %s: skipped (%s)", user.display_name, exc)
                    continue

                if intent is not None:
                    intents.append(intent)
                    report.issues_found += 1
                self._tally(report, action)

            if report.issues_found == 0:
                logger.info("  No issues found for this date")
            else:
                logger.info("  Issues found: %d", report.issues_found)
            reports.append(report)

        user_count = len({(u.username, u.tenant_id) for u in users})
        return ReconciliationPlan(intents=intents, dates=reports, users_checked=user_count)

    def evaluate(
        self, policy_date: PolicyDate, user: User, index: LedgerIndex
    ) -> tuple[ReconcileAction, Optional[ReconciliationIntent]]:
        existing = index.lookup(user.username, user.tenant_id, policy_date.day)

        if existing is None:
            logger.info("  + %s: created present record", user.display_name)
            return ReconcileAction.CREATE, ReconciliationIntent(
                operation=WriteKind.CREATE,
                policy_date=policy_date,
                username=user.username,
                tenant_id=user.tenant_id,
                desired_fields=self._new_record(policy_date, user),
            )

        status = existing.status
        if not isinstance(status, str) or not status.strip():
            raise RecordFieldError(f"record {existing.record_id} has no status")
        status = status.strip().lower()

        if status == AttendanceStatus.ABSENT.value:
            logger.info("  ~ %s: fixed absent -> present", user.display_name)
            return ReconcileAction.CORRECT, ReconciliationIntent(
                operation=WriteKind.UPDATE,
                policy_date=policy_date,
                username=user.username,
                tenant_id=user.tenant_id,
                desired_fields=self._correction(policy_date, existing.data),
                target=existing,
            )

        if status == AttendanceStatus.PRESENT.value:
            logger.info("  = %s: already present", user.display_name)
            return ReconcileAction.ALREADY_PRESENT, None

        logger.info('  ? %s: status "%s" (left as-is)', user.display_name, existing.status)
        return ReconcileAction.LEFT_AS_IS, None

    def _new_record(self, policy_date: PolicyDate, user: User) -> dict[str, Any]:
        return {
            "username": user.username,
            "tenantId": user.tenant_id,
            "date": day_start(policy_date.day, self._tz),
            "status": AttendanceStatus.PRESENT.value,
            **self._defaults.as_fields(),
            "notes": f"{policy_date.reason} - Auto marked present",
        }

    def _correction(self, policy_date: PolicyDate, current) -> dict[str, Any]:
        fields: dict[str, Any] = {"status": AttendanceStatus.PRESENT.value}
        for name, default in self._defaults.as_fields().items():
            if _is_blank(current.get(name)):
                fields[name] = default
        if _is_blank(current.get("notes")):
            fields["notes"] = f"{policy_date.reason} - Fixed from absent to present"
        return fields

    @staticmethod
    def _tally(report: DateReport, action: ReconcileAction) -> None:
        if action == ReconcileAction.CREATE:
            report.created += 1
        elif action == ReconcileAction.CORRECT:
            report.corrected += 1
        elif action == ReconcileAction.ALREADY_PRESENT:
            report.already_present += 1
        elif action == ReconcileAction.LEFT_AS_IS:
            report.left_as_is += 1
