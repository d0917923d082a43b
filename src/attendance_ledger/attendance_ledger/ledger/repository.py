from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from .model import LedgerEntry, WriteOp


class LedgerStore(Protocol):
    """Interface of the attendance ledger store.

    Note (DIP): components depend on this protocol; the MySQL, Firestore and
    in-memory backends are interchangeable behind it.
    """

    def query_range(self, start: datetime, end: datetime, *, tenant_id: Optional[str] = None) -> Sequence[LedgerEntry]:
        """Records whose ``date`` lies in the half-open window ``[start, end)``."""

        raise NotImplementedError

    def query_for_user(self, username: str, tenant_id: str) -> Sequence[LedgerEntry]:
        raise NotImplementedError

    def iter_all(self) -> Iterable[LedgerEntry]:
        raise NotImplementedError

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        """Apply ``ops`` all-or-nothing and return the affected record ids."""

        raise NotImplementedError

    def create(self, fields: Mapping[str, Any]) -> str:
        raise NotImplementedError
