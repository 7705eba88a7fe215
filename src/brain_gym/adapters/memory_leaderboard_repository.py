"""In-process leaderboard repository."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from brain_gym.domain.models import LeaderboardEntry
from brain_gym.errors import UserNotFound
from brain_gym.services.leaderboard import LeaderboardRepository


@dataclass
class InMemoryLeaderboardRepository(LeaderboardRepository):
    """Leaderboard kept in a dict; contents are lost on restart."""

    entries: dict[str, LeaderboardEntry] = field(default_factory=dict)

    async def user_exists(self, username: str) -> bool:
        return username in self.entries

    async def get_entry(self, username: str) -> LeaderboardEntry | None:
        return self.entries.get(username)

    async def list_entries(self) -> list[LeaderboardEntry]:
        return list(self.entries.values())

    async def create_entry(self, username: str) -> LeaderboardEntry:
        entry = LeaderboardEntry(
            username=username,
            total_points=0,
            exercises_completed=0,
            updated_at=datetime.now(tz=UTC),
        )
        self.entries[username] = entry
        return entry

    async def add_points(self, username: str, delta: int) -> LeaderboardEntry:
        entry = self._require(username)
        return self._save(replace(entry, total_points=entry.total_points + delta))

    async def set_points(self, username: str, points: int) -> LeaderboardEntry:
        return self._save(replace(self._require(username), total_points=points))

    async def record_exercise(self, username: str, points: int) -> LeaderboardEntry:
        entry = self._require(username)
        return self._save(
            replace(
                entry,
                total_points=entry.total_points + points,
                exercises_completed=entry.exercises_completed + 1,
            )
        )

    async def delete_entry(self, username: str) -> bool:
        return self.entries.pop(username, None) is not None

    async def reset_points(self) -> None:
        for entry in list(self.entries.values()):
            self._save(replace(entry, total_points=0))

    def _require(self, username: str) -> LeaderboardEntry:
        entry = self.entries.get(username)
        if entry is None:
            raise UserNotFound(username)
        return entry

    def _save(self, entry: LeaderboardEntry) -> LeaderboardEntry:
        updated = replace(entry, updated_at=datetime.now(tz=UTC))
        self.entries[updated.username] = updated
        return updated
