"""Tests for random point draws and award ticks."""

import asyncio
import random

import pytest

from brain_gym.domain.awards import AwardPolicy, TickOutcome
from brain_gym.services.awards import AwardLoop
from brain_gym.services.points import random_points


def test_random_points_covers_inclusive_bounds() -> None:
    rng = random.Random(1234)
    samples = [random_points(40, 79, rng) for _ in range(2000)]

    assert min(samples) == 40
    assert max(samples) == 79


def test_random_points_single_value_range() -> None:
    assert random_points(50, 50) == 50


def test_random_points_rejects_inverted_range() -> None:
    with pytest.raises(ValueError):
        random_points(80, 40)


def test_award_ticks_stay_within_bounds(store, observer) -> None:
    loop = AwardLoop(
        username="alice",
        store=store,
        policy=AwardPolicy(),
        observer=observer,
        rng=random.Random(99),
    )

    async def run_ticks() -> None:
        for _ in range(1000):
            await loop.tick()

    asyncio.run(run_ticks())

    points = [delta for _, delta in store.added]
    assert len(points) == 1000
    assert min(points) == 40
    assert max(points) == 79
    assert {result.outcome for result in observer.results} == {TickOutcome.AWARDED}


def test_award_loop_cannot_start_twice(store, observer) -> None:
    loop = AwardLoop("alice", store, AwardPolicy(), observer)

    async def scenario() -> None:
        loop.start()
        assert loop.running
        with pytest.raises(RuntimeError):
            loop.start()
        loop.cancel()
        await asyncio.sleep(0)
        assert not loop.running

    asyncio.run(scenario())
