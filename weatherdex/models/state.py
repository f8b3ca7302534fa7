"""Observable state published by the search coordinator."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from weatherdex.models.city import City


class SearchState(BaseModel):
    """Snapshot of the search screen state."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    is_searching: bool = False
    results: tuple[City, ...] = ()
    favorites: tuple[City, ...] = ()


class NotificationDuration(str, Enum):
    """How long a notification stays visible."""

    short = "short"
    long = "long"


class Notification(BaseModel):
    """Transient, dismissible user-facing message."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(min_length=1)
    action_label: str = "Close"
    duration: NotificationDuration = NotificationDuration.short
