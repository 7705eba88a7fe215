"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from brain_gym.adapters.memory_leaderboard_repository import (
    InMemoryLeaderboardRepository,
)
from brain_gym.adapters.supabase_leaderboard_repository import (
    SupabaseLeaderboardRepository,
)
from brain_gym.config import Settings
from brain_gym.domain.awards import AwardPolicy
from brain_gym.services.awards import SessionManager
from brain_gym.services.leaderboard import LeaderboardRepository, LeaderboardService
from brain_gym.services.observers import AwardObserver, LoggingAwardObserver


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    leaderboard_service: LeaderboardService
    award_observer: AwardObserver
    session_manager: SessionManager
    close_resources: Callable[[], Awaitable[None]]


def build_leaderboard_repository(settings: Settings) -> LeaderboardRepository:
    """Return the Supabase repository when configured, else an in-memory one."""
    if settings.uses_supabase:
        supabase_client = create_client(
            settings.supabase_url, settings.supabase_service_key
        )
        return SupabaseLeaderboardRepository(
            supabase_client, table=settings.leaderboard_table
        )
    return InMemoryLeaderboardRepository()


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    repository = build_leaderboard_repository(resolved_settings)
    leaderboard_service = LeaderboardService(
        repository=repository,
        exercise_min_points=resolved_settings.exercise_min_points,
        exercise_max_points=resolved_settings.exercise_max_points,
    )
    award_observer = LoggingAwardObserver()
    session_manager = SessionManager(
        store=repository,
        policy=AwardPolicy(
            interval_seconds=resolved_settings.award_interval_seconds,
            min_points=resolved_settings.award_min_points,
            max_points=resolved_settings.award_max_points,
        ),
        observer=award_observer,
    )

    async def close_resources() -> None:
        await session_manager.shutdown()

    return AppContainer(
        settings=resolved_settings,
        leaderboard_service=leaderboard_service,
        award_observer=award_observer,
        session_manager=session_manager,
        close_resources=close_resources,
    )
