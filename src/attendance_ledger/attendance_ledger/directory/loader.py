from __future__ import annotations

import logging

from ..core.exceptions import DirectoryUnavailable
from .model import DirectorySnapshot, User
from .repository import DirectoryRepository

logger = logging.getLogger(__name__)


class DirectorySnapshotLoader:
    def __init__(self, directory: DirectoryRepository):
        self._directory = directory

    def load(self) -> DirectorySnapshot:
        """Read the entire directory once.

        Any read failure raises ``DirectoryUnavailable``; a partial directory is
        never returned.
        """

        try:
            rows = list(self._directory.list_users())
        except Exception as exc:
            raise DirectoryUnavailable(f"directory read failed: {exc}") from exc

        users: list[User] = []
        tenant_index: dict[str, str] = {}
        conflicts: list[tuple[str, str, str]] = []
        skipped = 0

        for row in rows:
            username = (row.get("username") or "").strip()
            tenant_id = (row.get("tenantId") or "").strip()
            if not username or not tenant_id:
                skipped += 1
                logger.warning("Skipping directory entry without username/tenant: %r", row.get("id", row))
                continue

            known = tenant_index.get(username)
            if known is not None and known != tenant_id:
                conflicts.append((username, known, tenant_id))
                logger.warning("Username %s listed under %s and %s; keeping %s", username, known, tenant_id, known)
            else:
                tenant_index.setdefault(username, tenant_id)

            users.append(
                User(
                    username=username,
                    tenant_id=tenant_id,
                    display_name=row.get("displayName") or username,
                    role=row.get("role") or "user",
                )
            )

        logger.info("Loaded %d users across %d tenants", len(users), len(set(tenant_index.values())))
        return DirectorySnapshot(
            users=tuple(users),
            tenant_index=tenant_index,
            tenants=frozenset(u.tenant_id for u in users),
            skipped=skipped,
            conflicts=tuple(conflicts),
        )
