"""Data model for the custom_commands table."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class CustomCommand:
    """Moderator-defined command owned by a channel."""

    command_name: str
    channel_id: str
    response: str
    created_by: str | None = None  # user id of the chatter who defined it
    updated_at: datetime | None = None
