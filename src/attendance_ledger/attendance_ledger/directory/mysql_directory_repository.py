from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import DirectoryRepository


class MySQLDirectoryRepository(DirectoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_users(self) -> Sequence[Mapping[str, Any]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id AS id, username, tenant_id AS tenantId, display_name AS displayName, role
                FROM users
                ORDER BY user_id
                """
            )
            return fetchall(cur)
