from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence


class DirectoryRepository(Protocol):
    """Read-only access to the user directory.

    Returns raw rows (``username``, ``tenantId``, ``displayName``, ``role``);
    shaping them into ``User`` objects is the loader's job.
    """

    def list_users(self) -> Sequence[Mapping[str, Any]]:
        raise NotImplementedError
