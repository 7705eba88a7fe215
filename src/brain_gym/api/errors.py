"""Translate application errors into HTTP errors."""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status

from brain_gym.errors import StorageError, UserNotFound


@contextmanager
def http_errors() -> Iterator[None]:
    """Re-raise application errors as ``HTTPException``."""
    try:
        yield
    except UserNotFound as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, detail="Leaderboard unavailable"
        ) from exc
    except ValueError as exc:
        # Covers InvalidUsername as well as bad point values.
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
