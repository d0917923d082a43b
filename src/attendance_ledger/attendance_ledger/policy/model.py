from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import PolicyKind


@dataclass(frozen=True)
class Holiday:
    day: date
    name: str


@dataclass(frozen=True)
class PolicyDate:
    """A rest date on which everybody is expected present without penalty."""

    day: date
    reason: str
    kind: PolicyKind

    @property
    def iso(self) -> str:
        return self.day.isoformat()
