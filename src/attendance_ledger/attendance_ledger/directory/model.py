from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence


@dataclass(frozen=True)
class User:
    """Directory entry. ``username`` is the natural key across all tenants."""

    username: str
    tenant_id: str
    display_name: str
    role: str = "user"


@dataclass(frozen=True)
class DirectorySnapshot:
    """Point-in-time view of the whole directory for one run."""

    users: Sequence[User]
    tenant_index: Mapping[str, str]
    tenants: frozenset[str]
    skipped: int = 0
    conflicts: Sequence[tuple[str, str, str]] = field(default_factory=tuple)

    def tenant_of(self, username: str) -> Optional[str]:
        return self.tenant_index.get(username)

    def users_in(self, tenant_id: Optional[str]) -> list[User]:
        if tenant_id is None:
            return list(self.users)
        return [u for u in self.users if u.tenant_id == tenant_id]
