"""Tests for the leaderboard service."""

import asyncio
import random

import pytest

from brain_gym.errors import InvalidUsername, UserNotFound
from brain_gym.services.leaderboard import LeaderboardService


def test_register_normalizes_and_is_idempotent(repository) -> None:
    service = LeaderboardService(repository)

    created = asyncio.run(service.register("  Alice "))
    again = asyncio.run(service.register("ALICE"))

    assert created.username == "alice"
    assert created.total_points == 0
    assert again == created
    assert list(repository.entries) == ["alice"]


def test_register_rejects_blank_username(repository) -> None:
    service = LeaderboardService(repository)

    with pytest.raises(InvalidUsername):
        asyncio.run(service.register("   "))


def test_leaderboard_ranks_by_points_then_name(repository) -> None:
    service = LeaderboardService(repository)

    async def scenario() -> list[tuple[str, int]]:
        for name in ("carol", "bob", "alice"):
            await service.register(name)
        await service.set_points("bob", 120)
        await service.set_points("alice", 50)
        await service.set_points("carol", 120)
        return [(e.username, e.total_points) for e in await service.leaderboard()]

    assert asyncio.run(scenario()) == [("bob", 120), ("carol", 120), ("alice", 50)]


def test_set_points_validates_input(repository) -> None:
    service = LeaderboardService(repository)
    asyncio.run(service.register("alice"))

    with pytest.raises(ValueError):
        asyncio.run(service.set_points("alice", -1))
    with pytest.raises(UserNotFound):
        asyncio.run(service.set_points("ghost", 10))


def test_add_points_requires_positive_value(repository) -> None:
    service = LeaderboardService(repository)
    asyncio.run(service.register("alice"))

    with pytest.raises(ValueError):
        asyncio.run(service.add_points("alice", 0))

    entry = asyncio.run(service.add_points("Alice", 25))
    entry = asyncio.run(service.add_points("alice", 5))
    assert entry.total_points == 30


def test_complete_exercise_awards_bounded_points(repository) -> None:
    service = LeaderboardService(
        repository,
        exercise_min_points=10,
        exercise_max_points=79,
        rng=random.Random(7),
    )
    asyncio.run(service.register("alice"))

    entry, points = asyncio.run(service.complete_exercise("alice"))

    assert 10 <= points <= 79
    assert entry.total_points == points
    assert entry.exercises_completed == 1


def test_complete_exercise_unknown_user(repository) -> None:
    service = LeaderboardService(repository)

    with pytest.raises(UserNotFound):
        asyncio.run(service.complete_exercise("ghost"))


def test_delete_and_reset(repository) -> None:
    service = LeaderboardService(repository)

    async def scenario() -> None:
        await service.register("alice")
        await service.register("bob")
        await service.add_points("alice", 40)
        await service.add_points("bob", 60)

        await service.delete_user("bob")
        with pytest.raises(UserNotFound):
            await service.delete_user("bob")

        await service.reset()
        entry = await service.get_entry("alice")
        assert entry.total_points == 0

    asyncio.run(scenario())


def test_get_entry_unknown_user(repository) -> None:
    service = LeaderboardService(repository)

    with pytest.raises(UserNotFound):
        asyncio.run(service.get_entry("nobody"))
