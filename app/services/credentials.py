"""Process-wide cache for the Twitch user access token."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from ..errors import AuthConfigurationError, AuthRefreshError
from ..models import Credential, RefreshCredentials
from ..utils import mask_identifier
from .twitch import TwitchClient

logger = logging.getLogger(__name__)

DEFAULT_SAFETY_MARGIN = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _consume_refresh_error(task: asyncio.Future[Credential]) -> None:
    # Mark the failure as retrieved even when every waiter was cancelled.
    if not task.cancelled():
        task.exception()


class CredentialCache:
    """Hands out a valid access token, refreshing it at most once at a time.

    A warm cache is read without any locking. When a refresh is needed the
    first caller starts it and every caller arriving before it settles awaits
    the same task, so the token endpoint sees one request per expiry.
    """

    def __init__(
        self,
        twitch_client: TwitchClient,
        credentials: RefreshCredentials,
        *,
        safety_margin: timedelta = DEFAULT_SAFETY_MARGIN,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._twitch = twitch_client
        self._credentials = credentials
        self._safety_margin = safety_margin
        self._clock = clock
        self._credential: Credential | None = None
        self._refresh_task: asyncio.Task[Credential] | None = None

    @property
    def current(self) -> Credential | None:
        """The cached credential, whether or not it is still usable."""

        return self._credential

    async def get_valid_credential(self) -> Credential:
        """Return a credential that stays valid past the safety margin."""

        if not self._credentials.is_complete:
            missing = ", ".join(self._credentials.missing_fields())
            raise AuthConfigurationError(
                f"Twitch refresh credentials are incomplete (missing: {missing})"
            )

        credential = self._credential
        if credential is not None and credential.is_usable(
            self._clock(), self._safety_margin
        ):
            return credential

        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._refresh())
            self._refresh_task.add_done_callback(_consume_refresh_error)
        # Shield so a cancelled waiter does not abort the refresh for the others.
        return await asyncio.shield(self._refresh_task)

    async def _refresh(self) -> Credential:
        try:
            logger.info(
                "Refreshing Twitch access token for client %s",
                mask_identifier(self._credentials.client_id),
            )
            grant = await self._twitch.refresh_token(
                self._credentials.client_id,
                self._credentials.client_secret,
                self._credentials.refresh_token,
            )
            credential = Credential(
                access_token=grant.access_token,
                expires_at=self._clock() + timedelta(seconds=grant.expires_in),
            )
            self._credential = credential
            logger.info(
                "Twitch access token refreshed, expires at %s",
                credential.expires_at.isoformat(),
            )
            return credential
        except AuthRefreshError as exc:
            logger.warning("Twitch token refresh failed: %s", exc)
            raise
        finally:
            self._refresh_task = None
