"""Mirror the streamer's current game onto the Twitch channel category."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from ..category_overrides import OverrideEntry, find_override
from ..config import Settings
from ..errors import InvalidArgumentError, NotFoundError, TwitchError
from ..models import CatalogCandidate
from ..utils import mask_identifier
from .category_matching import MatchKind, resolve_match
from .credentials import CredentialCache
from .twitch import TwitchClient

logger = logging.getLogger(__name__)

JUST_CHATTING = "Just Chatting"


class UpdateState(str, Enum):
    IDLE = "idle"
    RESOLVING_CREDENTIAL = "resolving_credential"
    RESOLVING_IDENTITY = "resolving_identity"
    SEARCHING = "searching"
    APPLYING = "applying"
    DONE = "done"
    NO_MATCH_FOUND = "no_match_found"
    FAILED = "failed"


class UpdateOutcome(str, Enum):
    APPLIED = "applied"
    NO_MATCH_FOUND = "no_match_found"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(slots=True)
class CategoryUpdateResult:
    """What a single category update did, for logging and API responses."""

    outcome: UpdateOutcome
    game: str | None
    query: str | None = None
    state: UpdateState = UpdateState.IDLE
    category: CatalogCandidate | None = None
    match_kind: MatchKind | None = None
    broadcaster_id: str | None = None
    error: str | None = None

    @property
    def applied(self) -> bool:
        return self.outcome is UpdateOutcome.APPLIED

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "game": self.game,
            "query": self.query,
            "state": self.state.value,
            "category": self.category.to_dict() if self.category else None,
            "match_kind": self.match_kind.value if self.match_kind else None,
            "broadcaster_id": self.broadcaster_id,
            "error": self.error,
        }


def _clean_title(title: str | None) -> str | None:
    if title is None:
        return None
    stripped = title.strip()
    return stripped or None


class CategoryUpdateCoordinator:
    """Runs credential, lookup, search and apply for one title.

    Environmental failures never escape :meth:`apply_game`; they end the run in
    the ``FAILED`` state and are logged. Runs share nothing but the credential
    cache, so overlapping runs proceed independently and the last apply wins.
    """

    def __init__(
        self,
        settings: Settings,
        twitch_client: TwitchClient,
        credentials: CredentialCache,
        overrides: Sequence[OverrideEntry] | None = None,
    ):
        self._settings = settings
        self._twitch = twitch_client
        self._credentials = credentials
        self._overrides = tuple(
            overrides if overrides is not None else settings.override_entries
        )

    async def handle_game_change(
        self, old_title: str | None, new_title: str | None
    ) -> CategoryUpdateResult:
        """Apply the new title when the game actually changed."""

        old_game = _clean_title(old_title)
        new_game = _clean_title(new_title)
        if old_game == new_game:
            logger.debug("Ignoring presence update without a game change (%s)", new_game)
            return CategoryUpdateResult(outcome=UpdateOutcome.SKIPPED, game=new_game)

        logger.info(
            "Game change detected old=%s new=%s",
            old_game or "none",
            new_game or "none",
        )
        return await self.apply_game(new_game)

    async def apply_game(self, title: str | None) -> CategoryUpdateResult:
        """Put the configured channel into the category that best matches the title."""

        display_name = _clean_title(title) or JUST_CHATTING
        query = display_name
        channel = self._settings.twitch_channel
        result = CategoryUpdateResult(
            outcome=UpdateOutcome.FAILED, game=display_name, query=query
        )

        try:
            if not channel:
                raise NotFoundError("No Twitch channel configured (TWITCH_CHANNEL)")

            logger.info(
                "Updating Twitch channel game game=%s channel=%s client_id=%s",
                display_name,
                channel,
                mask_identifier(self._settings.twitch_client_id),
            )

            result.state = UpdateState.RESOLVING_CREDENTIAL
            credential = await self._credentials.get_valid_credential()
            token = credential.access_token

            result.state = UpdateState.RESOLVING_IDENTITY
            broadcaster_id = await self._twitch.resolve_channel_identity(
                channel, access_token=token
            )
            result.broadcaster_id = broadcaster_id

            override = find_override(display_name, self._overrides)
            if override is not None:
                query = override.category_name
                result.query = query
                logger.info(
                    "Using category override game=%s query=%s", display_name, query
                )

            result.state = UpdateState.SEARCHING
            candidates = await self._twitch.search_categories(query, access_token=token)
            match = resolve_match(query, candidates)
            if match is None or (
                match.is_fallback and not self._settings.accept_fallback_match
            ):
                result.state = UpdateState.NO_MATCH_FOUND
                result.outcome = UpdateOutcome.NO_MATCH_FOUND
                if match is not None:
                    result.match_kind = match.kind
                logger.warning(
                    "Game category not found on Twitch game=%s query=%s candidates=%d",
                    display_name,
                    query,
                    len(candidates),
                )
                return result

            result.category = match.candidate
            result.match_kind = match.kind
            logger.info(
                'Game search for "%s" matched "%s" (id=%s, rule=%s)',
                query,
                match.candidate.name,
                match.candidate.id,
                match.kind.value,
            )

            result.state = UpdateState.APPLYING
            await self._twitch.apply_category(
                broadcaster_id, match.candidate.id, access_token=token
            )
        except InvalidArgumentError:
            raise
        except TwitchError as exc:
            return self._fail(result, exc, channel)
        except Exception as exc:  # pragma: no cover - keeps the bot alive on bugs
            logger.exception("Unexpected error while updating Twitch category")
            return self._fail(result, exc, channel)

        result.state = UpdateState.DONE
        result.outcome = UpdateOutcome.APPLIED
        logger.info(
            "Successfully updated Twitch channel game game=%s category_id=%s "
            "broadcaster_id=%s channel=%s",
            display_name,
            result.category.id if result.category else None,
            result.broadcaster_id,
            channel,
        )
        return result

    def _fail(
        self, result: CategoryUpdateResult, exc: BaseException, channel: str | None
    ) -> CategoryUpdateResult:
        failed_in = result.state
        result.outcome = UpdateOutcome.FAILED
        result.error = str(exc)
        logger.error(
            "Error updating Twitch channel game game=%s channel=%s client_id=%s "
            "stage=%s error=%s",
            result.game,
            channel,
            mask_identifier(self._settings.twitch_client_id),
            failed_in.value,
            exc,
        )
        result.state = UpdateState.FAILED
        return result
