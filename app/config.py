"""Application configuration models."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .category_overrides import DEFAULT_CATEGORY_OVERRIDES, OverrideEntry
from .models import RefreshCredentials


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="ExtraLife Helper", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    twitch_channel: str | None = Field(default=None, alias="TWITCH_CHANNEL")
    twitch_client_id: str | None = Field(default=None, alias="TWITCH_CLIENT_ID")
    twitch_client_secret: str | None = Field(
        default=None, alias="TWITCH_CLIENT_SECRET"
    )
    twitch_refresh_token: str | None = Field(
        default=None, alias="TWITCH_REFRESH_TOKEN"
    )

    twitch_api_url: HttpUrl = Field(
        default="https://api.twitch.tv/helix", alias="TWITCH_API_URL"
    )
    twitch_token_url: HttpUrl = Field(
        default="https://id.twitch.tv/oauth2/token", alias="TWITCH_TOKEN_URL"
    )
    http_timeout_seconds: float = Field(
        default=10.0, alias="HTTP_TIMEOUT", gt=0, le=120
    )
    credential_safety_margin_seconds: int = Field(
        default=300, alias="TOKEN_SAFETY_MARGIN", ge=0
    )

    category_overrides: dict[str, str] = Field(
        default_factory=dict, alias="CATEGORY_OVERRIDES"
    )
    accept_fallback_match: bool = Field(default=True, alias="ACCEPT_FALLBACK_MATCH")

    discord_game_update_user_id: str | None = Field(
        default=None, alias="DISCORD_GAME_UPDATE_USER_ID"
    )
    game_update_message: str = Field(
        default="Now playing {game}!", alias="DISCORD_GAME_UPDATE_MESSAGE"
    )
    viewer_count_interval_minutes: float = Field(
        default=5, alias="VIEWER_COUNT_INTERVAL", ge=0
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("twitch_refresh_token", mode="before")
    @classmethod
    def _strip_oauth_prefix(cls, value: object) -> object:
        """Accept tokens pasted in the ``oauth:`` chat-token format."""

        if isinstance(value, str):
            value = value.strip()
            if value.startswith("oauth:"):
                value = value[len("oauth:"):]
        return value

    @field_validator("category_overrides", mode="before")
    @classmethod
    def _clean_overrides(cls, value: object) -> object:
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError("CATEGORY_OVERRIDES must be a JSON object") from exc
        if isinstance(value, dict):
            cleaned: dict[str, str] = {}
            for pattern, category in value.items():
                pattern_text = str(pattern).strip()
                category_text = str(category).strip()
                if pattern_text and category_text:
                    cleaned[pattern_text] = category_text
            return cleaned
        return value

    @property
    def refresh_credentials(self) -> RefreshCredentials:
        """Return the static credentials used to mint access tokens."""

        return RefreshCredentials(
            client_id=self.twitch_client_id or "",
            client_secret=self.twitch_client_secret or "",
            refresh_token=self.twitch_refresh_token or "",
        )

    @property
    def override_entries(self) -> tuple[OverrideEntry, ...]:
        """Configured overrides take precedence over the built-in table."""

        configured = tuple(
            OverrideEntry(title_pattern=pattern, category_name=category)
            for pattern, category in self.category_overrides.items()
        )
        return configured + DEFAULT_CATEGORY_OVERRIDES

    @property
    def game_updates_configured(self) -> bool:
        return bool(
            self.twitch_channel
            and self.discord_game_update_user_id
            and self.refresh_credentials.is_complete
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
