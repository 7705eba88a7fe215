"""Request and response bodies for the HTTP API."""

from datetime import datetime

from pydantic import BaseModel

from brain_gym.domain.models import LeaderboardEntry


class RegisterUserRequest(BaseModel):
    username: str


class UpdatePointsRequest(BaseModel):
    username: str
    points: int


class AddPointsRequest(BaseModel):
    points: int


class LeaderboardEntryPayload(BaseModel):
    username: str
    total_points: int
    exercises_completed: int
    updated_at: datetime

    @classmethod
    def from_entry(cls, entry: LeaderboardEntry) -> "LeaderboardEntryPayload":
        return cls(
            username=entry.username,
            total_points=entry.total_points,
            exercises_completed=entry.exercises_completed,
            updated_at=entry.updated_at,
        )
