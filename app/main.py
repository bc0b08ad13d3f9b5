"""Entry point for the FastAPI-powered game category service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import timedelta
from typing import Any

import httpx
from fastapi import FastAPI

from . import __version__
from .config import settings
from .models import CategoryRequest, PresenceUpdate
from .services.category_updates import CategoryUpdateCoordinator
from .services.credentials import CredentialCache
from .services.presence import PresenceWatcher
from .services.twitch import TwitchClient
from .services.viewer_monitor import ViewerCountMonitor

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout_seconds, connect=5.0),
        )
    )
    twitch = TwitchClient(settings, http_client)
    credentials = CredentialCache(
        twitch,
        settings.refresh_credentials,
        safety_margin=timedelta(seconds=settings.credential_safety_margin_seconds),
    )
    coordinator = CategoryUpdateCoordinator(settings, twitch, credentials)
    viewer_monitor = ViewerCountMonitor(settings, twitch, credentials)

    fastapi_app.state.coordinator = coordinator
    fastapi_app.state.presence_watcher = PresenceWatcher(settings, coordinator)
    fastapi_app.state.viewer_monitor = viewer_monitor

    if not settings.game_updates_configured:
        logger.warning(
            "Game updates are not fully configured; set TWITCH_CHANNEL, "
            "DISCORD_GAME_UPDATE_USER_ID and the Twitch refresh credentials"
        )
    await viewer_monitor.start()

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await viewer_monitor.stop()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Mirrors the streamer's current game onto the Twitch channel category",
        version=__version__,
        lifespan=lifespan,
    )
    register_routes(fastapi_app)
    return fastapi_app


def get_coordinator(fastapi_app: FastAPI) -> CategoryUpdateCoordinator:
    coordinator = getattr(fastapi_app.state, "coordinator", None)
    if not isinstance(coordinator, CategoryUpdateCoordinator):
        raise RuntimeError("Category update coordinator not initialised")
    return coordinator


def get_presence_watcher(fastapi_app: FastAPI) -> PresenceWatcher:
    watcher = getattr(fastapi_app.state, "presence_watcher", None)
    if not isinstance(watcher, PresenceWatcher):
        raise RuntimeError("Presence watcher not initialised")
    return watcher


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.post("/api/presence")
    async def presence_update(update: PresenceUpdate) -> dict[str, Any]:
        watcher = get_presence_watcher(fastapi_app)
        result = await watcher.handle_update(update)
        if result is None:
            return {"handled": False}
        return {
            "handled": True,
            "message": watcher.announcement_for(result),
            **result.to_dict(),
        }

    @fastapi_app.post("/api/category")
    async def apply_category(payload: CategoryRequest) -> dict[str, Any]:
        coordinator = get_coordinator(fastapi_app)
        result = await coordinator.apply_game(payload.title)
        return result.to_dict()


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
