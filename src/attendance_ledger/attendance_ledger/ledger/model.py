from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..core.enums import WriteKind

# Document field names, shared by every store backend.
RECORD_FIELDS = (
    "username",
    "tenantId",
    "date",
    "status",
    "clockIn",
    "clockOut",
    "workMode",
    "location",
    "totalHours",
    "notes",
    "createdAt",
    "updatedAt",
)


@dataclass(frozen=True)
class LedgerEntry:
    """A persisted attendance record as read from the store.

    ``ref`` is the store-native handle (e.g. a Firestore DocumentReference)
    needed to address the record in a later update/delete.
    """

    record_id: str
    data: Mapping[str, Any]
    ref: Any = None

    @property
    def username(self) -> Optional[str]:
        return self.data.get("username")

    @property
    def tenant_id(self) -> Optional[str]:
        return self.data.get("tenantId")

    @property
    def status(self) -> Optional[str]:
        return self.data.get("status")

    @property
    def stored_date(self) -> Any:
        return self.data.get("date")

    def get(self, name: str, default: Any = None) -> Any:
        return self.data.get(name, default)


@dataclass(frozen=True)
class WriteOp:
    """One mutation inside an atomic group.

    ``tag`` is caller bookkeeping (e.g. the policy date an op belongs to); the
    store never sees it.
    """

    kind: WriteKind
    fields: Mapping[str, Any] = field(default_factory=dict)
    record_id: Optional[str] = None
    ref: Any = None
    tag: Any = None

    @classmethod
    def create(cls, fields: Mapping[str, Any], *, tag: Any = None) -> "WriteOp":
        return cls(kind=WriteKind.CREATE, fields=dict(fields), tag=tag)

    @classmethod
    def update(cls, entry: LedgerEntry, fields: Mapping[str, Any], *, tag: Any = None) -> "WriteOp":
        return cls(kind=WriteKind.UPDATE, fields=dict(fields), record_id=entry.record_id, ref=entry.ref, tag=tag)

    @classmethod
    def delete(cls, entry: LedgerEntry, *, tag: Any = None) -> "WriteOp":
        return cls(kind=WriteKind.DELETE, record_id=entry.record_id, ref=entry.ref, tag=tag)
