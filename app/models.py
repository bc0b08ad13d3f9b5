"""Value objects shared by the Twitch services and the HTTP surface."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


@dataclass(frozen=True, slots=True)
class RefreshCredentials:
    """Static client credentials used to mint user access tokens."""

    client_id: str
    client_secret: str
    refresh_token: str

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)

    def missing_fields(self) -> list[str]:
        """Return the names of the credential fields that are blank."""

        return [
            name
            for name, value in (
                ("client_id", self.client_id),
                ("client_secret", self.client_secret),
                ("refresh_token", self.refresh_token),
            )
            if not value
        ]


@dataclass(frozen=True, slots=True)
class Credential:
    """A bearer token and the instant it stops being accepted."""

    access_token: str
    expires_at: datetime

    def is_usable(self, now: datetime, safety_margin: timedelta) -> bool:
        return now < self.expires_at - safety_margin


@dataclass(frozen=True, slots=True)
class TokenGrant:
    """Successful response from the OAuth token endpoint."""

    access_token: str
    expires_in: int


@dataclass(frozen=True, slots=True)
class CatalogCandidate:
    """A single entry returned by a category search."""

    id: str
    name: str

    @classmethod
    def from_payload(cls, entry: dict[str, Any]) -> "CatalogCandidate":
        return cls(id=str(entry.get("id", "")), name=str(entry.get("name") or ""))

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True, slots=True)
class StreamInfo:
    """Live stream details for a channel."""

    viewer_count: int
    game_name: str | None
    title: str | None
    language: str | None
    started_at: str | None

    @classmethod
    def from_payload(cls, entry: dict[str, Any]) -> "StreamInfo":
        try:
            viewers = int(entry.get("viewer_count") or 0)
        except (TypeError, ValueError):
            viewers = 0
        return cls(
            viewer_count=viewers,
            game_name=entry.get("game_name") or None,
            title=entry.get("title") or None,
            language=entry.get("language") or None,
            started_at=entry.get("started_at") or None,
        )


class Activity(BaseModel):
    """A presence activity as reported by the chat gateway."""

    model_config = ConfigDict(populate_by_name=True)

    type: int
    name: str = ""


class PresenceUpdate(BaseModel):
    """Old and new activities for a single tracked user."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(validation_alias=AliasChoices("user_id", "userId"))
    old_activities: list[Activity] | None = Field(
        default=None,
        validation_alias=AliasChoices("old_activities", "oldActivities"),
    )
    new_activities: list[Activity] | None = Field(
        default=None,
        validation_alias=AliasChoices("new_activities", "newActivities"),
    )


class CategoryRequest(BaseModel):
    """Manual request to put the channel in the category for a title."""

    title: str | None = None
