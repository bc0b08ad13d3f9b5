"""Periodic logging of the channel's live viewer count."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from ..config import Settings
from ..errors import TwitchError
from ..models import StreamInfo
from .credentials import CredentialCache
from .twitch import TwitchClient

logger = logging.getLogger(__name__)


class ViewerCountMonitor:
    """Logs stream status on start and then every configured interval."""

    def __init__(
        self,
        settings: Settings,
        twitch_client: TwitchClient,
        credentials: CredentialCache,
    ):
        self._settings = settings
        self._twitch = twitch_client
        self._credentials = credentials
        self._interval_seconds = settings.viewer_count_interval_minutes * 60
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Launch the monitoring loop unless it is disabled or already running."""

        if self._interval_seconds <= 0 or not self._settings.twitch_channel:
            logger.info("Viewer count monitoring disabled")
            return
        if self._task is not None:
            return
        logger.info(
            "Starting viewer count monitoring channel=%s interval_minutes=%s",
            self._settings.twitch_channel,
            self._settings.viewer_count_interval_minutes,
        )
        self._task = asyncio.create_task(self._monitor_loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Stopped viewer count monitoring")

    async def log_viewer_count(self) -> StreamInfo | None:
        """Fetch and log the stream status; errors are logged, not raised."""

        channel = self._settings.twitch_channel or ""
        try:
            credential = await self._credentials.get_valid_credential()
            stream = await self._twitch.get_stream(
                channel, access_token=credential.access_token
            )
        except TwitchError as exc:
            logger.error("Error getting viewer count channel=%s error=%s", channel, exc)
            return None

        if stream is None:
            logger.info("Stream status channel=%s status=offline", channel)
            return None
        logger.info(
            "Stream viewer count channel=%s viewers=%d game=%s title=%s "
            "language=%s started_at=%s",
            channel,
            stream.viewer_count,
            stream.game_name,
            stream.title,
            stream.language,
            stream.started_at,
        )
        return stream

    async def _monitor_loop(self) -> None:
        while True:
            try:
                await self.log_viewer_count()
            except Exception as exc:  # pragma: no cover - background safety net
                logger.exception("Viewer count check failed: %s", exc)
            await asyncio.sleep(self._interval_seconds)
