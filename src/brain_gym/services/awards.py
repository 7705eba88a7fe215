"""Passive point awards: one background loop per active user.

All registry mutations happen on the event loop thread. ``start`` reserves
the username before its first await so two concurrent calls for the same
user cannot both create a loop.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from brain_gym.domain.awards import (
    AwardPolicy,
    StartOutcome,
    StartResult,
    TickOutcome,
    TickResult,
)
from brain_gym.domain.models import LeaderboardEntry, normalize_username
from brain_gym.services.observers import AwardObserver, LoggingAwardObserver
from brain_gym.services.points import random_points

_logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PointsStore(Protocol):
    """Storage capabilities needed by the award loop."""

    async def user_exists(self, username: str) -> bool:
        """Return True if the user is on the leaderboard."""

    async def add_points(self, username: str, delta: int) -> LeaderboardEntry:
        """Add points to the user's balance."""


class AwardLoop:
    """Periodically awards random points to a single user."""

    def __init__(  # noqa: PLR0913
        self,
        username: str,
        store: PointsStore,
        policy: AwardPolicy,
        observer: AwardObserver,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.username = username
        self.store = store
        self.policy = policy
        self.observer = observer
        self._sleep = sleep
        self._rng = rng
        self._task: asyncio.Task[None] | None = None
        self._tick_task: asyncio.Task[TickResult] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def tick_in_flight(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def pending_tasks(self) -> list[asyncio.Task]:
        """Return the loop and tick tasks that have not finished yet."""
        return [
            task
            for task in (self._task, self._tick_task)
            if task is not None and not task.done()
        ]

    def start(self) -> None:
        """Schedule the loop on the running event loop."""
        if self._task is not None:
            raise RuntimeError(f"Award loop for {self.username} already started")
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"award-loop:{self.username}"
        )

    def cancel(self) -> None:
        """Cancel the loop; an in-flight tick is left to finish."""
        if self._task is not None:
            self._task.cancel()

    async def tick(self) -> TickResult:
        """Attempt one award and report the result to the observer."""
        try:
            if not await self.store.user_exists(self.username):
                result = TickResult(self.username, TickOutcome.SKIPPED_MISSING_USER)
            else:
                points = random_points(
                    self.policy.min_points, self.policy.max_points, self._rng
                )
                await self.store.add_points(self.username, points)
                result = TickResult(self.username, TickOutcome.AWARDED, points=points)
        except Exception as exc:
            _logger.exception("Error adding passive points for %s", self.username)
            result = TickResult(self.username, TickOutcome.FAILED, error=str(exc))
        self.observer.record(result)
        return result

    async def _run(self) -> None:
        while True:
            await self._sleep(self.policy.interval_seconds)
            self._fire()

    def _fire(self) -> None:
        if self.tick_in_flight:
            self.observer.record(TickResult(self.username, TickOutcome.OVERLAPPED))
            return
        self._tick_task = asyncio.get_running_loop().create_task(
            self.tick(), name=f"award-tick:{self.username}"
        )


@dataclass
class SessionManager:
    """Registry of passive award loops, at most one per user."""

    store: PointsStore
    policy: AwardPolicy = field(default_factory=AwardPolicy)
    observer: AwardObserver = field(default_factory=LoggingAwardObserver)
    sleep: Sleep = asyncio.sleep
    rng: random.Random | None = field(default=None, repr=False)
    _sessions: dict[str, AwardLoop] = field(default_factory=dict, init=False)
    _pending: set[str] = field(default_factory=set, init=False)
    _retired: list[AwardLoop] = field(default_factory=list, init=False)

    async def start(self, username: str) -> StartResult:
        """Start a passive award loop for a user if none is running.

        Raises ``InvalidUsername`` for blank input and propagates
        ``StorageError`` from the existence check.
        """
        key = normalize_username(username)
        if key in self._sessions or key in self._pending:
            return StartResult(key, StartOutcome.ALREADY_RUNNING)

        self._pending.add(key)
        try:
            exists = await self.store.user_exists(key)
        except Exception:
            self._pending.discard(key)
            raise
        if key not in self._pending:
            # stop() or stop_all() ran while the existence check was pending.
            return StartResult(key, StartOutcome.CANCELLED)
        self._pending.discard(key)
        if not exists:
            return StartResult(key, StartOutcome.USER_NOT_FOUND)

        loop = AwardLoop(
            username=key,
            store=self.store,
            policy=self.policy,
            observer=self.observer,
            sleep=self.sleep,
            rng=self.rng,
        )
        loop.start()
        self._sessions[key] = loop
        _logger.info("Passive award session started for %s", key)
        return StartResult(key, StartOutcome.STARTED)

    def stop(self, username: str) -> None:
        """Stop a user's loop; unknown or blank usernames are a no-op."""
        key = username.strip().casefold()
        self._pending.discard(key)
        loop = self._sessions.pop(key, None)
        if loop is None:
            return
        self._retire(loop)
        _logger.info("Passive award session stopped for %s", key)

    def stop_all(self) -> None:
        """Cancel every loop and clear the registry; never raises."""
        self._pending.clear()
        sessions, self._sessions = self._sessions, {}
        for key, loop in sessions.items():
            try:
                self._retire(loop)
            except Exception:
                _logger.exception("Failed to stop passive award session for %s", key)
        if sessions:
            _logger.info("Stopped %s passive award sessions", len(sessions))

    async def shutdown(self, timeout: float | None = 5.0) -> None:
        """Stop every loop and wait for their tasks, in-flight ticks included.

        Ticks still running after ``timeout`` seconds are cancelled.
        """
        self.stop_all()
        retired, self._retired = self._retired, []
        tasks = [task for loop in retired for task in loop.pending_tasks()]
        if not tasks:
            return
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            _logger.warning("Cancelling unfinished award task %s", task.get_name())
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def is_running(self, username: str) -> bool:
        """Return True if a loop is registered for the username."""
        return username.strip().casefold() in self._sessions

    def active_usernames(self) -> list[str]:
        """Return registered usernames in sorted order."""
        return sorted(self._sessions)

    def _retire(self, loop: AwardLoop) -> None:
        loop.cancel()
        self._retired = [old for old in self._retired if old.pending_tasks()]
        self._retired.append(loop)
