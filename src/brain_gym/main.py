"""Command-line entrypoint that serves the API with uvicorn."""

import uvicorn
from fastapi import FastAPI

from brain_gym.api.app import create_app
from brain_gym.containers import build_container


def app_factory() -> FastAPI:
    """Build the app from environment settings.

    Usable directly with ``uvicorn --factory brain_gym.main:app_factory``.
    """
    return create_app(build_container())


def main() -> None:
    """Serve the API; SIGINT/SIGTERM trigger the app's shutdown hook."""
    app = app_factory()
    settings = app.state.container.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
