"""FastAPI application factory."""

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status

from brain_gym.api.admin import router as admin_router
from brain_gym.api.errors import http_errors
from brain_gym.api.models import LeaderboardEntryPayload, RegisterUserRequest
from brain_gym.app_logging import configure_logging
from brain_gym.containers import AppContainer
from brain_gym.domain.awards import StartOutcome


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        # The ASGI server turns SIGINT/SIGTERM into this shutdown phase.
        state_container: AppContainer = app.state.container
        logger.info(
            "Shutting down; stopping %s passive award sessions",
            len(state_container.session_manager.active_usernames()),
        )
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.middleware("http")
    async def log_api_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            logger.info(
                "%s %s %s in %.0fms",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
        return response

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/users", status_code=status.HTTP_201_CREATED)
    async def register_user(
        body: RegisterUserRequest, request: Request
    ) -> LeaderboardEntryPayload:
        """Add a user to the leaderboard, or return the existing entry."""
        state_container: AppContainer = request.app.state.container
        with http_errors():
            entry = await state_container.leaderboard_service.register(body.username)
        return LeaderboardEntryPayload.from_entry(entry)

    @app.get("/api/leaderboard")
    async def leaderboard(request: Request) -> list[LeaderboardEntryPayload]:
        """Return the ranked leaderboard."""
        state_container: AppContainer = request.app.state.container
        with http_errors():
            entries = await state_container.leaderboard_service.leaderboard()
        return [LeaderboardEntryPayload.from_entry(entry) for entry in entries]

    @app.get("/api/users/{username}")
    async def user_entry(username: str, request: Request) -> LeaderboardEntryPayload:
        """Return one user's leaderboard entry."""
        state_container: AppContainer = request.app.state.container
        with http_errors():
            entry = await state_container.leaderboard_service.get_entry(username)
        return LeaderboardEntryPayload.from_entry(entry)

    @app.post("/api/users/{username}/exercises")
    async def complete_exercise(username: str, request: Request) -> dict[str, object]:
        """Award points for a completed exercise."""
        state_container: AppContainer = request.app.state.container
        with http_errors():
            entry, points = await state_container.leaderboard_service.complete_exercise(
                username
            )
        return {
            "awarded": points,
            "entry": LeaderboardEntryPayload.from_entry(entry).model_dump(mode="json"),
        }

    @app.get("/api/sessions")
    async def list_sessions(request: Request) -> dict[str, list[str]]:
        """Return usernames with an active passive award session."""
        state_container: AppContainer = request.app.state.container
        return {"sessions": state_container.session_manager.active_usernames()}

    @app.post("/api/sessions/{username}", status_code=status.HTTP_201_CREATED)
    async def start_session(username: str, request: Request) -> dict[str, str]:
        """Start earning passive points for a user."""
        state_container: AppContainer = request.app.state.container
        with http_errors():
            result = await state_container.session_manager.start(username)
        if result.outcome is StartOutcome.ALREADY_RUNNING:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Session already running for {result.username}",
            )
        if result.outcome is StartOutcome.USER_NOT_FOUND:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User {result.username!r} not found",
            )
        if result.outcome is StartOutcome.CANCELLED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Session for {result.username} was stopped while starting",
            )
        return {"username": result.username, "status": result.outcome.value}

    @app.delete(
        "/api/sessions/{username}", status_code=status.HTTP_204_NO_CONTENT
    )
    async def stop_session(username: str, request: Request) -> Response:
        """Stop earning passive points; stopping an idle user is a no-op."""
        state_container: AppContainer = request.app.state.container
        state_container.session_manager.stop(username)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app
