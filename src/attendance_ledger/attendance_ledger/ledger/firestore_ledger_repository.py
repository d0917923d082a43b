from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ..core.constants import ATTENDANCE_COLLECTION, MAX_BATCH_MUTATIONS
from ..core.enums import WriteKind
from .model import LedgerEntry, WriteOp
from .repository import LedgerStore


class FirestoreLedgerRepository(LedgerStore):
    """Ledger backed by the ``attendance`` collection.

    An atomic group is one ``WriteBatch``; Firestore rejects batches above 500
    writes, which is what ``MAX_BATCH_MUTATIONS`` mirrors.
    """

    def __init__(self, client, *, collection: str = ATTENDANCE_COLLECTION, max_mutations: int = MAX_BATCH_MUTATIONS):
        self._client = client
        self._col = client.collection(collection)
        self._max_mutations = int(max_mutations)

    @staticmethod
    def _to_entry(doc) -> LedgerEntry:
        return LedgerEntry(record_id=doc.id, data=doc.to_dict() or {}, ref=doc.reference)

    def query_range(self, start: datetime, end: datetime, *, tenant_id: Optional[str] = None) -> Sequence[LedgerEntry]:
        query = self._col.where(filter=FieldFilter("date", ">=", start)).where(filter=FieldFilter("date", "<", end))
        if tenant_id is not None:
            query = query.where(filter=FieldFilter("tenantId", "==", tenant_id))
        return [self._to_entry(doc) for doc in query.stream()]

    def query_for_user(self, username: str, tenant_id: str) -> Sequence[LedgerEntry]:
        query = self._col.where(filter=FieldFilter("username", "==", username)).where(
            filter=FieldFilter("tenantId", "==", tenant_id)
        )
        return [self._to_entry(doc) for doc in query.stream()]

    def iter_all(self) -> Iterable[LedgerEntry]:
        for doc in self._col.stream():
            yield self._to_entry(doc)

    def _ref(self, op: WriteOp):
        return op.ref if op.ref is not None else self._col.document(op.record_id)

    def commit(self, ops: Sequence[WriteOp]) -> list[str]:
        if len(ops) > self._max_mutations:
            raise ValueError(f"batch of {len(ops)} exceeds the {self._max_mutations}-mutation limit")

        batch = self._client.batch()
        ids: list[str] = []
        for op in ops:
            if op.kind == WriteKind.CREATE:
                ref = self._col.document()
                batch.set(ref, {**op.fields, "createdAt": firestore.SERVER_TIMESTAMP, "updatedAt": firestore.SERVER_TIMESTAMP})
            elif op.kind == WriteKind.UPDATE:
                ref = self._ref(op)
                batch.update(ref, {**op.fields, "updatedAt": firestore.SERVER_TIMESTAMP})
            else:
                ref = self._ref(op)
                batch.delete(ref)
            ids.append(ref.id)

        batch.commit()
        return ids

    def create(self, fields: Mapping[str, Any]) -> str:
        _, ref = self._col.add({**fields, "createdAt": firestore.SERVER_TIMESTAMP, "updatedAt": firestore.SERVER_TIMESTAMP})
        return ref.id
