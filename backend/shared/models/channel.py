"""Data models for the tokens and channels tables."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Token:
    """OAuth token record."""

    user_id: str
    token: str
    refresh: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Channel:
    """Twitch channel the bot listens to."""

    channel_id: str
    channel_name: str
    created_at: datetime | None = None
