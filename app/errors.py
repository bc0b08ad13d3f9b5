"""Exceptions raised while talking to Twitch or resolving categories."""

from __future__ import annotations


class TwitchError(Exception):
    """Base error for Twitch interactions."""


class AuthConfigurationError(TwitchError):
    """Raised when the static client credentials are incomplete."""


class AuthRefreshError(TwitchError):
    """Raised when the OAuth token endpoint rejects or cannot serve a refresh."""


class TransportError(TwitchError):
    """Raised when a Helix request fails or returns an unusable response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NotFoundError(TwitchError):
    """Raised when a channel lookup returns no users."""


class InvalidArgumentError(TwitchError, ValueError):
    """Raised when a caller violates a function contract."""
