class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class DirectoryUnavailable(DomainError):
    """The user directory could not be read completely. Aborts the run."""


class LedgerQueryFailed(DomainError):
    """A ledger range/point query failed. Aborts the run."""


class BatchCommitFailed(DomainError):
    """An atomic write group was rejected.

    Groups committed before ``group_index`` stand; nothing after it was sent.
    """

    def __init__(self, message: str, *, group_index: int, committed: int):
        super().__init__(message)
        self.group_index = group_index
        self.committed = committed


class RecordFieldError(DomainError):
    """A single stored record (or user/date pairing) could not be evaluated."""
