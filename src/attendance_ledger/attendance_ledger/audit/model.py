from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class TenantMismatch:
    record_id: str
    username: str
    stored_tenant_id: Optional[str]
    canonical_tenant_id: str
    date: Optional[date]


@dataclass
class AuditReport:
    mismatched_records: list[TenantMismatch] = field(default_factory=list)
    orphaned_usernames: list[str] = field(default_factory=list)
    records_scanned: int = 0
    records_without_username: int = 0

    @property
    def clean(self) -> bool:
        return not self.mismatched_records and not self.orphaned_usernames
