"""Error types shared across services and adapters."""


class BrainGymError(Exception):
    """Base class for application errors."""


class InvalidUsername(BrainGymError, ValueError):
    """Raised when a username is empty or whitespace only."""


class UserNotFound(BrainGymError):
    """Raised when a leaderboard operation targets an unknown user."""

    def __init__(self, username: str) -> None:
        super().__init__(f"User {username!r} not found")
        self.username = username


class StorageError(BrainGymError):
    """Raised when the leaderboard backend fails."""
