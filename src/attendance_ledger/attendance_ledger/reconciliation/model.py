from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

from ..core.enums import WriteKind
from ..ledger.model import LedgerEntry, WriteOp
from ..policy.model import PolicyDate


@dataclass(frozen=True)
class ReconciliationIntent:
    """Desired state for one ``(username, tenantId, date)`` key."""

    operation: WriteKind
    policy_date: PolicyDate
    username: str
    tenant_id: str
    desired_fields: Mapping[str, Any]
    target: Optional[LedgerEntry] = None

    def to_write_op(self) -> WriteOp:
        tag = self.policy_date.day
        if self.operation == WriteKind.CREATE:
            return WriteOp.create(self.desired_fields, tag=tag)
        if self.target is None:
            raise ValueError("update intent without a target record")
        return WriteOp.update(self.target, self.desired_fields, tag=tag)


@dataclass
class DateReport:
    policy_date: PolicyDate
    users_checked: int = 0
    issues_found: int = 0
    issues_fixed: int = 0
    created: int = 0
    corrected: int = 0
    already_present: int = 0
    left_as_is: int = 0
    errors: int = 0


@dataclass
class ReconciliationPlan:
    intents: list[ReconciliationIntent]
    dates: list[DateReport]
    users_checked: int


@dataclass
class ReconciliationReport:
    start: date
    end: date
    dates: list[DateReport]
    users_checked: int
    tenant_id: Optional[str] = None
    dry_run: bool = False
    submissions: list[int] = field(default_factory=list)
    duplicates: int = 0
    rejected_records: int = 0
    weekly_rest_days: int = 0

    @property
    def dates_checked(self) -> int:
        return len(self.dates)

    @property
    def issues_found(self) -> int:
        return sum(d.issues_found for d in self.dates)

    @property
    def issues_fixed(self) -> int:
        return sum(d.issues_fixed for d in self.dates)

    @property
    def errors(self) -> int:
        return sum(d.errors for d in self.dates)

    def to_dict(self) -> dict:
        return {
            "datesChecked": self.dates_checked,
            "issuesFound": self.issues_found,
            "issuesFixed": self.issues_fixed,
            "errors": self.errors,
            "holidayDates": [
                {
                    "date": d.policy_date.iso,
                    "name": d.policy_date.reason,
                    "type": d.policy_date.kind.value,
                    "issuesFound": d.issues_found,
                    "issuesFixed": d.issues_fixed,
                }
                for d in self.dates
            ],
            "summary": {
                "tenantId": self.tenant_id,
                "usersChecked": self.users_checked,
                "dateRange": {"from": self.start.isoformat(), "to": self.end.isoformat()},
                "weeklyRestDays": self.weekly_rest_days,
                "dryRun": self.dry_run,
                "batches": list(self.submissions),
            },
        }
