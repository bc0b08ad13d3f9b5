"""Tests for the HTTP routes exposed by the service."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import __version__
from app.config import Settings
from app.main import create_app, register_routes
from app.models import CatalogCandidate
from app.services.category_matching import MatchKind
from app.services.category_updates import (
    CategoryUpdateCoordinator,
    CategoryUpdateResult,
    UpdateOutcome,
    UpdateState,
)
from app.services.presence import PresenceWatcher


class DummyCoordinator(CategoryUpdateCoordinator):
    """Minimal coordinator stub for route testing."""

    def __init__(self) -> None:
        # Deliberately skip super().__init__ to avoid touching external systems.
        self.applied: list[str | None] = []

    async def apply_game(self, title: str | None) -> CategoryUpdateResult:  # type: ignore[override]
        self.applied.append(title)
        return CategoryUpdateResult(
            outcome=UpdateOutcome.APPLIED,
            game=title or "Just Chatting",
            query=title or "Just Chatting",
            state=UpdateState.DONE,
            category=CatalogCandidate(id="27284", name="Minecraft"),
            match_kind=MatchKind.EXACT,
            broadcaster_id="4242",
        )

    async def handle_game_change(  # type: ignore[override]
        self, old_title: str | None, new_title: str | None
    ) -> CategoryUpdateResult:
        return await self.apply_game(new_title)


def _build_app() -> tuple[FastAPI, DummyCoordinator]:
    settings = Settings(_env_file=None, DISCORD_GAME_UPDATE_USER_ID="1001")
    coordinator = DummyCoordinator()
    app = FastAPI()
    register_routes(app)
    app.state.coordinator = coordinator
    app.state.presence_watcher = PresenceWatcher(settings, coordinator)
    return app, coordinator


def test_healthcheck() -> None:
    app, _ = _build_app()

    with TestClient(app) as client:
        response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_category_route_applies_title() -> None:
    app, coordinator = _build_app()

    with TestClient(app) as client:
        response = client.post("/api/category", json={"title": "Minecraft"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["outcome"] == "applied"
    assert payload["category"] == {"id": "27284", "name": "Minecraft"}
    assert payload["match_kind"] == "exact"
    assert coordinator.applied == ["Minecraft"]


def test_presence_route_returns_announcement() -> None:
    app, coordinator = _build_app()

    with TestClient(app) as client:
        response = client.post(
            "/api/presence",
            json={
                "userId": "1001",
                "oldActivities": [],
                "newActivities": [{"type": 0, "name": "Minecraft"}],
            },
        )

    assert response.status_code == 200
    payload = response.json()
    assert payload["handled"] is True
    assert payload["message"] == "Now playing Minecraft!"
    assert payload["game"] == "Minecraft"
    assert coordinator.applied == ["Minecraft"]


def test_presence_route_ignores_other_users() -> None:
    app, coordinator = _build_app()

    with TestClient(app) as client:
        response = client.post("/api/presence", json={"user_id": "9999"})

    assert response.status_code == 200
    assert response.json() == {"handled": False}
    assert coordinator.applied == []


def test_create_app_reports_package_version() -> None:
    assert create_app().version == __version__
