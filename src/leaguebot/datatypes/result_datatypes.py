"""
Outcome types returned by the league services.

Expected failures (a missing record, a forbidden transition, an unreachable
channel) travel back to the caller as a :class:`ReconcileResult` instead of an
exception. The cogs turn the error into an ephemeral reply.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from leaguebot.datatypes.discord_datatypes import UserID

T = TypeVar("T")


class ReconcileErrorKind(Enum):
    """Failure taxonomy shared by the free-agent, verification and role services."""

    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    CHANNEL_UNAVAILABLE = "channel_unavailable"
    EXTERNAL_LOOKUP_FAILURE = "external_lookup_failure"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True, frozen=True)
class ReconcileError:
    kind: ReconcileErrorKind
    detail: str

    def __str__(self) -> str:
        return f"{self.kind}: {self.detail}"


@dataclass(slots=True)
class ReconcileResult(Generic[T]):
    """Either a value or a :class:`ReconcileError`, never both."""
    value: Optional[T] = None
    error: Optional[ReconcileError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ReconcileResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ReconcileErrorKind, detail: str) -> "ReconcileResult[T]":
        return cls(error=ReconcileError(kind, detail))


@dataclass(slots=True)
class SweepFailure:
    """A record the sweep could not process."""
    identity: UserID
    reason: str


@dataclass(slots=True)
class SweepReport:
    """Per-branch counters for one sweep pass."""
    scanned: int = 0
    withdrawn: int = 0
    repaired: int = 0
    expired: int = 0
    refreshed: int = 0
    republished: int = 0
    notifications_failed: int = 0
    failures: List[SweepFailure] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.withdrawn + self.expired + self.refreshed + self.republished


@dataclass(slots=True)
class RoleSyncFailure:
    """A roster member whose ping role could not be granted."""
    user_id: UserID
    team_name: str
    reason: str


@dataclass(slots=True)
class RoleSyncReport:
    teams_scanned: int = 0
    teams_skipped: int = 0
    granted: int = 0
    already_present: int = 0
    failures: List[RoleSyncFailure] = field(default_factory=list)
