"""Leaderboard business logic."""

import logging
import random
from dataclasses import dataclass, field
from typing import Protocol

from brain_gym.domain.models import LeaderboardEntry, normalize_username, ranked
from brain_gym.errors import UserNotFound
from brain_gym.services.points import random_points

_logger = logging.getLogger(__name__)


class LeaderboardRepository(Protocol):
    """Persistence interface for leaderboard entries.

    Implementations key entries by normalized username and wrap backend
    failures in ``StorageError``.
    """

    async def user_exists(self, username: str) -> bool:
        """Return True if an entry exists for the username."""

    async def get_entry(self, username: str) -> LeaderboardEntry | None:
        """Return the entry for a username, if present."""

    async def list_entries(self) -> list[LeaderboardEntry]:
        """Return all entries."""

    async def create_entry(self, username: str) -> LeaderboardEntry:
        """Create an entry with zero points and return it."""

    async def add_points(self, username: str, delta: int) -> LeaderboardEntry:
        """Add points to an entry and return the updated entry."""

    async def set_points(self, username: str, points: int) -> LeaderboardEntry:
        """Overwrite an entry's points and return the updated entry."""

    async def record_exercise(self, username: str, points: int) -> LeaderboardEntry:
        """Add points and count one completed exercise."""

    async def delete_entry(self, username: str) -> bool:
        """Delete an entry; return False if it did not exist."""

    async def reset_points(self) -> None:
        """Set every entry's points to zero."""


@dataclass
class LeaderboardService:
    """Application service for leaderboard reads and admin edits."""

    repository: LeaderboardRepository
    exercise_min_points: int = 10
    exercise_max_points: int = 79
    rng: random.Random | None = field(default=None, repr=False)

    async def register(self, username: str) -> LeaderboardEntry:
        """Ensure an entry exists for the username and return it."""
        key = normalize_username(username)
        existing = await self.repository.get_entry(key)
        if existing:
            return existing
        _logger.info("Registering leaderboard user %s", key)
        return await self.repository.create_entry(key)

    async def get_entry(self, username: str) -> LeaderboardEntry:
        """Return the entry for a username."""
        key = normalize_username(username)
        entry = await self.repository.get_entry(key)
        if entry is None:
            raise UserNotFound(key)
        return entry

    async def leaderboard(self) -> list[LeaderboardEntry]:
        """Return entries ranked by points."""
        return ranked(await self.repository.list_entries())

    async def set_points(self, username: str, points: int) -> LeaderboardEntry:
        """Overwrite a user's points."""
        if points < 0:
            raise ValueError("Points must not be negative")
        key = await self._existing_key(username)
        _logger.info("Admin set points: username=%s points=%s", key, points)
        return await self.repository.set_points(key, points)

    async def add_points(self, username: str, points: int) -> LeaderboardEntry:
        """Add a positive number of points to a user."""
        if points <= 0:
            raise ValueError("Points must be positive")
        key = await self._existing_key(username)
        _logger.info("Admin added points: username=%s points=%s", key, points)
        return await self.repository.add_points(key, points)

    async def complete_exercise(self, username: str) -> tuple[LeaderboardEntry, int]:
        """Award random points for a finished exercise."""
        key = await self._existing_key(username)
        points = random_points(
            self.exercise_min_points, self.exercise_max_points, self.rng
        )
        entry = await self.repository.record_exercise(key, points)
        _logger.info("Exercise completed: username=%s points=%s", key, points)
        return entry, points

    async def delete_user(self, username: str) -> None:
        """Remove a user from the leaderboard."""
        key = normalize_username(username)
        if not await self.repository.delete_entry(key):
            raise UserNotFound(key)
        _logger.info("Deleted leaderboard user %s", key)

    async def reset(self) -> None:
        """Zero every user's points."""
        await self.repository.reset_points()
        _logger.info("Leaderboard reset")

    async def _existing_key(self, username: str) -> str:
        key = normalize_username(username)
        if not await self.repository.user_exists(key):
            raise UserNotFound(key)
        return key
