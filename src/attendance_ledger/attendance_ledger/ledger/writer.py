from __future__ import annotations

import logging
from typing import Iterable

from ..core.constants import DEFAULT_BATCH_CAPACITY, MAX_BATCH_MUTATIONS
from ..core.exceptions import BatchCommitFailed, ValidationError
from .model import WriteOp
from .repository import LedgerStore

logger = logging.getLogger(__name__)


def check_capacity(capacity: int, ceiling: int = MAX_BATCH_MUTATIONS) -> int:
    """Return ``capacity`` as an int, or raise when it is not in ``[1, ceiling)``."""
    capacity = int(capacity)
    if capacity < 1 or capacity >= int(ceiling):
        raise ValidationError(f"batch capacity must be between 1 and {int(ceiling) - 1}, got {capacity}")
    return capacity


class BoundedBatchWriter:
    """The only write path into the ledger.

    Operations are queued with ``add()`` and submitted in order as atomic
    groups of at most ``capacity``; ``flush()`` submits the trailing partial
    group. A failed group raises ``BatchCommitFailed`` and the writer refuses
    further work, so ``committed`` only ever lists operations the store
    accepted.

    Use as a context manager to flush automatically on a clean exit::

        with BoundedBatchWriter(store) as writer:
            for op in ops:
                writer.add(op)
    """

    def __init__(
        self,
        store: LedgerStore,
        *,
        capacity: int = DEFAULT_BATCH_CAPACITY,
        ceiling: int = MAX_BATCH_MUTATIONS,
    ):
        self._store = store
        self._capacity = check_capacity(capacity, ceiling)
        self._pending: list[WriteOp] = []
        self._failed = False
        self.committed: list[WriteOp] = []
        self.committed_ids: list[str] = []
        self.submissions: list[int] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def pending(self) -> int:
        return len(self._pending)

    def add(self, op: WriteOp) -> None:
        if self._failed:
            raise BatchCommitFailed(
                "writer stopped after a failed group", group_index=len(self.submissions), committed=len(self.committed)
            )
        self._pending.append(op)
        if len(self._pending) >= self._capacity:
            self._submit()

    def extend(self, ops: Iterable[WriteOp]) -> None:
        for op in ops:
            self.add(op)

    def flush(self) -> int:
        """Submit whatever is queued; returns the total committed so far."""
        while self._pending and not self._failed:
            self._submit()
        return len(self.committed)

    def _submit(self) -> None:
        group = self._pending[: self._capacity]
        group_index = len(self.submissions)
        logger.info("Committing batch #%d (%d operations)...", group_index + 1, len(group))
        try:
            ids = self._store.commit(group)
        except Exception as exc:
            self._failed = True
            raise BatchCommitFailed(
                f"batch #{group_index + 1} of {len(group)} operations failed: {exc}",
                group_index=group_index,
                committed=len(self.committed),
            ) from exc

        del self._pending[: len(group)]
        self.committed.extend(group)
        self.committed_ids.extend(ids or [])
        self.submissions.append(len(group))

    def __enter__(self) -> "BoundedBatchWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.flush()


def write_all(store: LedgerStore, ops: Iterable[WriteOp], *, capacity: int = DEFAULT_BATCH_CAPACITY) -> BoundedBatchWriter:
    with BoundedBatchWriter(store, capacity=capacity) as writer:
        writer.extend(ops)
    return writer
