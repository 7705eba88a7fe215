"""Domain models for the Brain Gym leaderboard."""

from dataclasses import dataclass
from datetime import datetime

from brain_gym.errors import InvalidUsername


@dataclass(frozen=True)
class LeaderboardEntry:
    """Represents a user's standing on the leaderboard."""

    username: str
    total_points: int
    exercises_completed: int
    updated_at: datetime


def normalize_username(raw: str) -> str:
    """Return the identity key for a username (trimmed, case-folded)."""
    cleaned = raw.strip().casefold() if isinstance(raw, str) else ""
    if not cleaned:
        raise InvalidUsername("Username must not be empty")
    return cleaned


def ranked(entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """Sort entries by points descending, breaking ties by username."""
    return sorted(entries, key=lambda entry: (-entry.total_points, entry.username))
