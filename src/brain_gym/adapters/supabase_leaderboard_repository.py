"""Supabase-backed leaderboard repository."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from supabase import Client

from brain_gym.domain.models import LeaderboardEntry
from brain_gym.errors import StorageError, UserNotFound
from brain_gym.services.leaderboard import LeaderboardRepository

_COLUMNS = "username, total_points, exercises_completed, updated_at"


@dataclass
class SupabaseLeaderboardRepository(LeaderboardRepository):
    """Supabase implementation for leaderboard persistence.

    The Supabase client is synchronous, so each query runs in a worker
    thread to keep the event loop (and the award loops on it) responsive.
    """

    client: Client
    table: str = "leaderboard_entries"
    increment_function: str = "add_leaderboard_points"

    async def user_exists(self, username: str) -> bool:
        """Return True if a row exists for the username."""
        rows = await self._execute(
            self.client.table(self.table)
            .select("username")
            .eq("username", username)
            .limit(1)
        )
        return bool(rows)

    async def get_entry(self, username: str) -> LeaderboardEntry | None:
        """Return the row for a username, if present."""
        rows = await self._execute(
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("username", username)
            .limit(1)
        )
        return _parse_row(rows[0]) if rows else None

    async def list_entries(self) -> list[LeaderboardEntry]:
        """Return all rows, highest points first."""
        rows = await self._execute(
            self.client.table(self.table)
            .select(_COLUMNS)
            .order("total_points", desc=True)
        )
        return [_parse_row(row) for row in rows]

    async def create_entry(self, username: str) -> LeaderboardEntry:
        """Insert a zero-point row and return it."""
        rows = await self._execute(
            self.client.table(self.table).insert(
                {
                    "username": username,
                    "total_points": 0,
                    "exercises_completed": 0,
                    "updated_at": _now(),
                }
            )
        )
        if not rows:
            raise StorageError(f"Failed to create leaderboard entry for {username}")
        return _parse_row(rows[0])

    async def add_points(self, username: str, delta: int) -> LeaderboardEntry:
        """Atomically add points to a row and return the updated entry."""
        return await self._increment(username, delta, exercises=0)

    async def set_points(self, username: str, points: int) -> LeaderboardEntry:
        """Overwrite a row's points."""
        rows = await self._execute(
            self.client.table(self.table)
            .update({"total_points": points, "updated_at": _now()})
            .eq("username", username)
        )
        if not rows:
            raise UserNotFound(username)
        return _parse_row(rows[0])

    async def record_exercise(self, username: str, points: int) -> LeaderboardEntry:
        """Atomically add exercise points and bump the completed counter."""
        return await self._increment(username, points, exercises=1)

    async def delete_entry(self, username: str) -> bool:
        """Delete a row; return False if nothing matched."""
        rows = await self._execute(
            self.client.table(self.table).delete().eq("username", username)
        )
        return bool(rows)

    async def reset_points(self) -> None:
        """Zero points on every row."""
        await self._execute(
            self.client.table(self.table)
            .update({"total_points": 0, "updated_at": _now()})
            .neq("username", "")
        )

    async def _increment(
        self, username: str, delta: int, exercises: int
    ) -> LeaderboardEntry:
        # The increment runs in Postgres (see sql/leaderboard.sql) so
        # concurrent writers for the same user cannot overwrite each other.
        rows = await self._execute(
            self.client.rpc(
                self.increment_function,
                {
                    "p_username": username,
                    "p_delta": delta,
                    "p_exercises": exercises,
                },
            )
        )
        if not rows:
            raise UserNotFound(username)
        return _parse_row(rows[0])

    async def _execute(self, query: Any) -> list[dict[str, object]]:
        try:
            response = await asyncio.to_thread(query.execute)
        except Exception as exc:
            raise StorageError(f"Supabase request failed: {exc}") from exc
        return response.data or []


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


def _parse_row(row: dict[str, object]) -> LeaderboardEntry:
    updated_at_raw = row.get("updated_at")
    updated_at = (
        datetime.fromisoformat(updated_at_raw)
        if isinstance(updated_at_raw, str) and updated_at_raw
        else datetime.min.replace(tzinfo=UTC)
    )
    return LeaderboardEntry(
        username=str(row["username"]),
        total_points=int(row.get("total_points") or 0),
        exercises_completed=int(row.get("exercises_completed") or 0),
        updated_at=updated_at,
    )
