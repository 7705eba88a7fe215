"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from brain_gym.adapters.memory_leaderboard_repository import (
    InMemoryLeaderboardRepository,
)
from brain_gym.config import Settings
from brain_gym.containers import AppContainer
from brain_gym.domain.awards import AwardPolicy, TickResult
from brain_gym.domain.models import LeaderboardEntry
from brain_gym.errors import StorageError
from brain_gym.services.awards import PointsStore, SessionManager
from brain_gym.services.leaderboard import LeaderboardService
from brain_gym.services.observers import AwardObserver


async def settle(rounds: int = 20) -> None:
    """Let ready tasks run until they block again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class ManualClock:
    """Virtual clock whose ``sleep`` only returns when time is advanced."""

    def __init__(self) -> None:
        self.now = 0.0
        self._waiters: list[tuple[float, asyncio.Future[None]]] = []

    async def sleep(self, seconds: float) -> None:
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append((self.now + seconds, future))
        await future

    async def run_until(self, target: float) -> None:
        """Advance to ``target`` seconds, waking sleepers in deadline order."""
        await settle()
        while True:
            self._waiters = [w for w in self._waiters if not w[1].done()]
            due = [w for w in self._waiters if w[0] <= target]
            if not due:
                break
            waiter = min(due, key=lambda w: w[0])
            self._waiters.remove(waiter)
            self.now = waiter[0]
            waiter[1].set_result(None)
            await settle()
        self.now = target
        await settle()

    @property
    def pending_sleepers(self) -> int:
        return sum(1 for _, future in self._waiters if not future.done())


@dataclass
class FakePointsStore(PointsStore):
    """Points store that records calls and can fail or block on demand."""

    users: set[str] = field(default_factory=set)
    added: list[tuple[str, int]] = field(default_factory=list)
    exists_checks: list[str] = field(default_factory=list)
    fail_exists: bool = False
    fail_add: bool = False
    yield_on_exists: bool = False
    gate: asyncio.Event | None = None

    async def user_exists(self, username: str) -> bool:
        self.exists_checks.append(username)
        if self.yield_on_exists:
            await asyncio.sleep(0)
        if self.fail_exists:
            raise StorageError("exists check failed")
        return username in self.users

    async def add_points(self, username: str, delta: int) -> LeaderboardEntry:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_add:
            raise StorageError("write failed")
        self.added.append((username, delta))
        return LeaderboardEntry(
            username=username,
            total_points=sum(p for u, p in self.added if u == username),
            exercises_completed=0,
            updated_at=datetime.now(tz=UTC),
        )


@dataclass
class RecordingObserver(AwardObserver):
    """Observer that keeps every tick result."""

    results: list[TickResult] = field(default_factory=list)

    def record(self, result: TickResult) -> None:
        self.results.append(result)

    def outcomes(self) -> list[str]:
        return [result.outcome.value for result in self.results]


@pytest.fixture
def settings() -> Settings:
    return Settings(admin_token="admin-token")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def store() -> FakePointsStore:
    return FakePointsStore(users={"alice", "bob", "carol"})


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def policy() -> AwardPolicy:
    return AwardPolicy(interval_seconds=15.0, min_points=40, max_points=79)


@pytest.fixture
def manager(
    store: FakePointsStore,
    policy: AwardPolicy,
    observer: RecordingObserver,
    clock: ManualClock,
) -> SessionManager:
    return SessionManager(
        store=store, policy=policy, observer=observer, sleep=clock.sleep
    )


@pytest.fixture
def repository() -> InMemoryLeaderboardRepository:
    return InMemoryLeaderboardRepository()


@pytest.fixture
def container(
    settings: Settings, repository: InMemoryLeaderboardRepository
) -> AppContainer:
    leaderboard_service = LeaderboardService(repository)
    observer = RecordingObserver()
    session_manager = SessionManager(store=repository, observer=observer)

    async def close_resources() -> None:
        await session_manager.shutdown()

    return AppContainer(
        settings=settings,
        leaderboard_service=leaderboard_service,
        award_observer=observer,
        session_manager=session_manager,
        close_resources=close_resources,
    )
