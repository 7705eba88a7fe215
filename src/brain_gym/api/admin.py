"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from brain_gym.api.errors import http_errors
from brain_gym.api.models import (
    AddPointsRequest,
    LeaderboardEntryPayload,
    UpdatePointsRequest,
)

if TYPE_CHECKING:
    from brain_gym.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/leaderboard", dependencies=[Depends(require_admin)])
async def admin_leaderboard(request: Request) -> dict[str, object]:
    """Return every user with points and session state."""
    container: AppContainer = request.app.state.container
    with http_errors():
        entries = await container.leaderboard_service.leaderboard()
    return {
        "users": [
            {
                **LeaderboardEntryPayload.from_entry(entry).model_dump(mode="json"),
                "session_active": container.session_manager.is_running(
                    entry.username
                ),
            }
            for entry in entries
        ]
    }


@router.post("/reset-leaderboard", dependencies=[Depends(require_admin)])
async def reset_leaderboard(request: Request) -> dict[str, bool]:
    """Zero every user's points."""
    container: AppContainer = request.app.state.container
    with http_errors():
        await container.leaderboard_service.reset()
    return {"success": True}


@router.post("/update-points", dependencies=[Depends(require_admin)])
async def update_points(
    body: UpdatePointsRequest, request: Request
) -> LeaderboardEntryPayload:
    """Overwrite a user's points."""
    container: AppContainer = request.app.state.container
    with http_errors():
        entry = await container.leaderboard_service.set_points(
            body.username, body.points
        )
    return LeaderboardEntryPayload.from_entry(entry)


@router.post("/users/{username}/add-points", dependencies=[Depends(require_admin)])
async def add_points(
    username: str, body: AddPointsRequest, request: Request
) -> LeaderboardEntryPayload:
    """Add points to a user."""
    container: AppContainer = request.app.state.container
    with http_errors():
        entry = await container.leaderboard_service.add_points(username, body.points)
    return LeaderboardEntryPayload.from_entry(entry)


@router.delete("/users/{username}", dependencies=[Depends(require_admin)])
async def delete_user(username: str, request: Request) -> dict[str, str]:
    """Delete a user and stop their passive award session."""
    container: AppContainer = request.app.state.container
    container.session_manager.stop(username)
    with http_errors():
        await container.leaderboard_service.delete_user(username)
    return {"message": f"Deleted {username.strip()}"}
