from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from .repository import DirectoryRepository


class InMemoryDirectoryRepository(DirectoryRepository):
    def __init__(self, rows: Iterable[Mapping[str, Any]] = ()):
        self._rows = [dict(r) for r in rows]

    def add(self, username: str, tenant_id: str, *, display_name: str | None = None, role: str = "user") -> None:
        self._rows.append({"username": username, "tenantId": tenant_id, "displayName": display_name, "role": role})

    def list_users(self) -> Sequence[Mapping[str, Any]]:
        return [dict(r) for r in self._rows]
