"""Domain models for passive point awards."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


class StartOutcome(StrEnum):
    """Result of asking for a passive award session."""

    STARTED = "started"
    ALREADY_RUNNING = "already_running"
    USER_NOT_FOUND = "user_not_found"
    CANCELLED = "cancelled"


class TickOutcome(StrEnum):
    """Result of one award loop tick."""

    AWARDED = "awarded"
    SKIPPED_MISSING_USER = "skipped_missing_user"
    OVERLAPPED = "overlapped"
    FAILED = "failed"


@dataclass(frozen=True)
class AwardPolicy:
    """Cadence and bounds of passive awards."""

    interval_seconds: float = 15.0
    min_points: int = 40
    max_points: int = 79


@dataclass(frozen=True)
class StartResult:
    """Outcome of a start request for a normalized username."""

    username: str
    outcome: StartOutcome

    @property
    def started(self) -> bool:
        return self.outcome is StartOutcome.STARTED


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick; an award event when points were applied."""

    username: str
    outcome: TickOutcome
    points: int | None = None
    error: str | None = None
    at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
