"""Observers for award loop outcomes."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Protocol

from brain_gym.domain.awards import TickOutcome, TickResult

_logger = logging.getLogger(__name__)


class AwardObserver(Protocol):
    """Receives the result of every award loop tick."""

    def record(self, result: TickResult) -> None:
        """Record a tick result."""


@dataclass
class LoggingAwardObserver(AwardObserver):
    """Logs tick results and keeps per-outcome counters."""

    _counts: Counter[TickOutcome] = field(default_factory=Counter)

    def record(self, result: TickResult) -> None:
        """Log a tick result and count it."""
        self._counts[result.outcome] += 1
        if result.outcome is TickOutcome.AWARDED:
            _logger.info("+%s passive points to %s", result.points, result.username)
        elif result.outcome is TickOutcome.SKIPPED_MISSING_USER:
            _logger.warning(
                "Skipping passive points: user %s not found", result.username
            )
        elif result.outcome is TickOutcome.OVERLAPPED:
            _logger.warning(
                "Skipping passive points for %s: previous tick still running",
                result.username,
            )
        else:
            _logger.error(
                "Passive points failed for %s: %s", result.username, result.error
            )

    def counts(self) -> dict[TickOutcome, int]:
        """Return a snapshot of outcome counts."""
        return dict(self._counts)
