from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..core.constants import USERS_COLLECTION
from .repository import DirectoryRepository


class FirestoreDirectoryRepository(DirectoryRepository):
    def __init__(self, client, *, collection: str = USERS_COLLECTION):
        self._col = client.collection(collection)

    def list_users(self) -> Sequence[Mapping[str, Any]]:
        return [{"id": doc.id, **(doc.to_dict() or {})} for doc in self._col.stream()]
