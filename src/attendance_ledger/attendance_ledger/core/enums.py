from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role as stored in the directory."""

    ADMIN = "admin"
    USER = "user"


class AttendanceStatus(str, Enum):
    """Known ledger statuses. Stored records may carry other values."""

    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"
    HALF_DAY = "half-day"


class WorkMode(str, Enum):
    OFFICE = "office"
    WFH = "wfh"


class PolicyKind(str, Enum):
    """Why a date is a rest date."""

    NAMED_HOLIDAY = "holiday"
    WEEKLY_REST = "weekly_rest"


class WriteKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class StoreBackend(str, Enum):
    MYSQL = "mysql"
    FIRESTORE = "firestore"
    MEMORY = "memory"


class ReconcileAction(str, Enum):
    """Outcome of evaluating one (policy date, user) pair."""

    CREATE = "create"
    CORRECT = "correct"
    ALREADY_PRESENT = "already_present"
    LEFT_AS_IS = "left_as_is"
    ERROR = "error"
