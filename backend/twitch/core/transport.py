"""Chat transport seam between the command router and twitchio."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from twitchio import HTTPException

if TYPE_CHECKING:
    from core.bot import Bot

LOGGER = logging.getLogger("Transport")

CLIP_URL = "https://clips.twitch.tv/{clip_id}"


@dataclass(frozen=True)
class ClipCreated:
    clip_id: str

    @property
    def url(self) -> str:
        return CLIP_URL.format(clip_id=self.clip_id)


@dataclass(frozen=True)
class ChannelOffline:
    """Twitch refuses to clip a channel that is not live."""


@dataclass(frozen=True)
class ClipFailed:
    detail: str


ClipResult = ClipCreated | ChannelOffline | ClipFailed


class Transport(Protocol):
    async def join(self, channel_id: str, channel_name: str) -> None: ...

    async def part(self, channel_id: str) -> None: ...

    async def say(self, channel_id: str, text: str) -> None: ...

    async def create_clip(self, channel_id: str) -> ClipResult: ...


class TwitchTransport:
    """Transport backed by the twitchio bot.

    Joining a channel means subscribing to its chat over EventSub; every
    message and clip is sent with the bot's own token.
    """

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def join(self, channel_id: str, channel_name: str) -> None:
        await self.bot.subscribe_channel_events(channel_id)
        LOGGER.info(f"Joined channel {channel_name} ({channel_id})")

    async def part(self, channel_id: str) -> None:
        await self.bot.unsubscribe_channel_events(channel_id)
        LOGGER.info(f"Left channel {channel_id}")

    async def say(self, channel_id: str, text: str) -> None:
        broadcaster = self.bot.create_partialuser(user_id=channel_id)
        await broadcaster.send_message(
            message=text,
            sender=self.bot.bot_id,
            token_for=self.bot.bot_id,
        )

    async def create_clip(self, channel_id: str) -> ClipResult:
        broadcaster = self.bot.create_partialuser(user_id=channel_id)
        try:
            clip = await broadcaster.create_clip(token_for=self.bot.bot_id)
        except HTTPException as e:
            # Helix answers 404 when the broadcaster is offline
            if e.status == 404:
                return ChannelOffline()
            return ClipFailed(f"HTTP {e.status}: {e}")
        except Exception as e:
            return ClipFailed(f"{type(e).__name__}: {e}")
        return ClipCreated(clip.id)
