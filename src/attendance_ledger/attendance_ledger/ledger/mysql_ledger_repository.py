from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.constants import MAX_BATCH_MUTATIONS
from ..core.enums import WriteKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, naive_local
from .model import LedgerEntry, WriteOp
from .repository import LedgerStore

COLUMNS = {
    "username": "username",
    "tenantId": "tenant_id",
    "date": "work_date",
    "status": "status",
    "clockIn": "clock_in",
    "clockOut": "clock_out",
    "workMode": "work_mode",
    "location": "location",
    "totalHours": "total_hours",
    "notes": "notes",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

_SELECT = "SELECT record_id, " + ", ".join(f"{col} AS `{name}`" for name, col in COLUMNS.items()) + " FROM attendance_records"


def _column_values(fields: Mapping[str, Any]) -> tuple[list[str], list[Any]]:
    cols: list[str] = []
    values: list[Any] = []
    for name, value in fields.items():
        if name in ("createdAt", "updatedAt"):
            continue
        col = COLUMNS.get(name)
        if col is None:
            raise ValueError(f"Unknown attendance field: {name}")
        cols.append(col)
        values.append(naive_local(value) if isinstance(value, datetime) else value)
    return cols, values


class MySQLLedgerRepository(LedgerStore):
    def __init__(self, conn_factory: DatabaseConnection, *, max_mutations: int = MAX_BATCH_MUTATIONS):
        self._conn_factory = conn_factory
        self._max_mutations = int(max_mutations)

    def _to_entry(self, row: Mapping[str, Any]) -> LedgerEntry:
        data = dict(row)
        record_id = str(data.pop("record_id"))
        return LedgerEntry(record_id=record_id, data=data)

    def query_range(self, start: datetime, end: datetime, *, tenant_id: Optional[str] = None) -> Sequence[LedgerEntry]:
        clauses = ["work_date >= %s", "work_date < %s"]
        params: list[object] = [naive_local(start), naive_local(end)]
        if tenant_id is not None:
            clauses.append("tenant_id=%s")
            params.append(tenant_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY work_date, created_at", tuple(params))
            return [self._to_entry(r) for r in fetchall(cur)]

    def query_for_user(self, username: str, tenant_id: str) -> Sequence[LedgerEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE username=%s AND tenant_id=%s ORDER BY created_at", (username, tenant_id))
            return [self._to_entry(r) for r in fetchall(cur)]

    def iter_all(self) -> Iterable[LedgerEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} ORDER BY created_at")
            return [self._to_entry(r) for r in fetchall(cur)]

    def _insert(self, cur, fields: Mapping[str, Any]) -> str:
        record_id = uuid.uuid4().hex
        cols, values = _column_values(fields)
        placeholders = ",".join(["%s"] * (len(cols) + 1))
        cur.execute(
            f"INSERT INTO attendance_records(record_id, {', '.join(cols)}) VALUES({placeholders})",
            (record_id, *values),
        )
        return record_id

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        if len(ops) > self._max_mutations:
            raise ValueError(f"batch of {len(ops)} exceeds the {self._max_mutations}-mutation limit")

        ids: list[str] = []
        # One db_cursor block == one transaction: any failure rolls back the group.
        with db_cursor(self._conn_factory) as (_, cur):
            for op in ops:
                if op.kind == WriteKind.CREATE:
                    ids.append(self._insert(cur, op.fields))
                    continue

                if op.kind == WriteKind.UPDATE:
                    cols, values = _column_values(op.fields)
                    assignments = ", ".join(f"{c}=%s" for c in cols + ["updated_at"])
                    cur.execute(
                        f"UPDATE attendance_records SET {assignments} WHERE record_id=%s",
                        (*values, datetime.now(), op.record_id),
                    )
                else:
                    cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (op.record_id,))

                if cur.rowcount == 0:
                    raise LookupError(f"no record {op.record_id!r} to {op.kind.value}")
                ids.append(str(op.record_id))
        return ids

    def create(self, fields: Mapping[str, Any]) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._insert(cur, fields)
