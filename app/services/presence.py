"""Turn presence updates for the tracked user into category changes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Sequence

from ..config import Settings
from ..models import Activity, PresenceUpdate
from .category_updates import (
    JUST_CHATTING,
    CategoryUpdateCoordinator,
    CategoryUpdateResult,
)

logger = logging.getLogger(__name__)

PLAYING_ACTIVITY_TYPE = 0


def game_from_activities(activities: Sequence[Activity | Mapping[str, Any]] | None) -> str | None:
    """Return the name of the first "Playing" activity, if any."""

    if not isinstance(activities, (list, tuple)):
        return None
    for activity in activities:
        if isinstance(activity, Activity):
            kind, name = activity.type, activity.name
        elif isinstance(activity, Mapping):
            kind, name = activity.get("type"), activity.get("name")
        else:
            continue
        if kind == PLAYING_ACTIVITY_TYPE:
            return name or None
    return None


def render_game_update_message(template: str, game: str | None) -> str:
    return template.replace("{game}", game or JUST_CHATTING)


class PresenceWatcher:
    """Filters presence updates down to the configured user's game changes."""

    def __init__(self, settings: Settings, coordinator: CategoryUpdateCoordinator):
        self._settings = settings
        self._coordinator = coordinator

    @property
    def tracked_user_id(self) -> str | None:
        return self._settings.discord_game_update_user_id

    async def handle_update(self, update: PresenceUpdate) -> CategoryUpdateResult | None:
        """Return the category update result, or ``None`` for untracked users."""

        if not self.tracked_user_id or update.user_id != self.tracked_user_id:
            return None

        old_game = game_from_activities(update.old_activities)
        new_game = game_from_activities(update.new_activities)
        result = await self._coordinator.handle_game_change(old_game, new_game)
        logger.info(
            "Presence update for user %s finished outcome=%s game=%s",
            update.user_id,
            result.outcome.value,
            result.game or "none",
        )
        return result

    def announcement_for(self, result: CategoryUpdateResult) -> str:
        """Chat message announcing the game a result switched to."""

        return render_game_update_message(self._settings.game_update_message, result.game)
