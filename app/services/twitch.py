"""Utilities for communicating with the Twitch Helix and OAuth APIs."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..errors import AuthRefreshError, NotFoundError, TransportError
from ..models import CatalogCandidate, StreamInfo, TokenGrant
from ..utils import truncate_text

logger = logging.getLogger(__name__)


class TwitchClient:
    """Thin wrapper around the Twitch Helix API.

    Every method performs exactly one round trip. Failures are raised as
    :class:`TransportError` (Helix) or :class:`AuthRefreshError` (token
    endpoint); nothing is retried here.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client
        self._api_url = str(settings.twitch_api_url).rstrip("/")
        self._token_url = str(settings.twitch_token_url)

    def _headers(self, access_token: str) -> dict[str, str]:
        return {
            "Client-ID": self._settings.twitch_client_id or "",
            "Authorization": f"Bearer {access_token}",
            "User-Agent": f"{self._settings.app_name} (extralife-helper)",
        }

    async def resolve_channel_identity(
        self, channel_name: str, *, access_token: str
    ) -> str:
        """Return the broadcaster id for a channel login."""

        payload = await self._request(
            "GET",
            "/users",
            access_token=access_token,
            params={"login": channel_name},
        )
        users = payload.get("data") or []
        if not users or not isinstance(users[0], dict) or not users[0].get("id"):
            raise NotFoundError(f'Channel "{channel_name}" not found')
        return str(users[0]["id"])

    async def search_categories(
        self, query: str, *, access_token: str
    ) -> list[CatalogCandidate]:
        """Search Twitch categories by a free-text query."""

        payload = await self._request(
            "GET",
            "/search/categories",
            access_token=access_token,
            params={"query": query},
        )
        candidates: list[CatalogCandidate] = []
        for entry in payload.get("data") or []:
            if isinstance(entry, dict) and entry.get("id"):
                candidates.append(CatalogCandidate.from_payload(entry))
        return candidates

    async def apply_category(
        self, broadcaster_id: str, category_id: str, *, access_token: str
    ) -> None:
        """Set the channel's game category."""

        await self._request(
            "PATCH",
            "/channels",
            access_token=access_token,
            params={"broadcaster_id": broadcaster_id},
            json={"game_id": category_id},
        )

    async def get_stream(
        self, channel_name: str, *, access_token: str
    ) -> StreamInfo | None:
        """Return live stream details, or ``None`` when the channel is offline."""

        payload = await self._request(
            "GET",
            "/streams",
            access_token=access_token,
            params={"user_login": channel_name},
        )
        streams = payload.get("data") or []
        if not streams or not isinstance(streams[0], dict):
            return None
        return StreamInfo.from_payload(streams[0])

    async def refresh_token(
        self, client_id: str, client_secret: str, refresh_token: str
    ) -> TokenGrant:
        """Exchange a refresh token for a fresh user access token."""

        form = {
            "client_id": client_id,
            "client_secret": client_secret,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        try:
            response = await self._client.post(self._token_url, data=form)
        except httpx.HTTPError as exc:
            raise AuthRefreshError(
                f"Token refresh failed: {exc.__class__.__name__}: {exc}"
            ) from exc

        if not response.is_success:
            data = _safe_json(response)
            message = data.get("message") or truncate_text(response.text)
            raise AuthRefreshError(
                f"Token refresh failed with HTTP {response.status_code}: {message}"
            )

        data = _safe_json(response)
        access_token = data.get("access_token")
        try:
            expires_in = int(data.get("expires_in"))
        except (TypeError, ValueError):
            expires_in = None
        if not access_token or expires_in is None:
            raise AuthRefreshError(
                "Token refresh returned an unexpected payload: "
                f"{truncate_text(response.text)!r}"
            )
        return TokenGrant(access_token=str(access_token), expires_in=expires_in)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._api_url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                headers=self._headers(access_token),
                params=params,
                json=json,
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Twitch request {method} {path} failed: "
                f"{exc.__class__.__name__}: {exc}"
            ) from exc

        body = response.text
        if response.is_success and not body.strip():
            # PATCH /channels answers 204 with no payload.
            return {}

        preview = truncate_text(body)
        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(
                f"Failed to parse Twitch response for {method} {path} "
                f"(HTTP {response.status_code}, {len(body)} chars): {preview!r}",
                status_code=response.status_code,
                body=preview,
            ) from exc

        if not response.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            raise TransportError(
                f"Twitch API error {response.status_code} for {method} {path}: "
                f"{message or preview}",
                status_code=response.status_code,
                body=preview,
            )
        # Helix wraps every result set in a "data" list.
        if not isinstance(data, dict) or not isinstance(data.get("data") or [], list):
            raise TransportError(
                f"Unexpected Twitch response structure for {method} {path}: {preview!r}",
                status_code=response.status_code,
                body=preview,
            )
        logger.debug("Twitch %s %s -> HTTP %s", method, path, response.status_code)
        return data


def _safe_json(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    if isinstance(data, dict):
        return data
    return {}
