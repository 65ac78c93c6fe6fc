"""Shared command guards: role check, per-channel cooldown tracking."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from typing import Protocol

from cachetools import TTLCache  # type: ignore[import-untyped]

LOGGER = logging.getLogger("CommandGuard")


class _HasRoles(Protocol):
    moderator: bool
    broadcaster: bool


def is_moderator(sender: _HasRoles) -> bool:
    """Moderators and the broadcaster may manage custom commands."""
    return bool(sender.moderator or sender.broadcaster)


class CooldownTracker:
    """Per-channel READY/COOLING state (reset on bot restart).

    A channel present in the cache is cooling; the entry expires on its own
    once ``cooldown`` seconds have passed. Arming a channel that is already
    cooling leaves its original deadline untouched. The cache is unbounded so
    no entry is ever evicted before expiry; expired entries are purged on
    every write.
    """

    def __init__(
        self,
        cooldown: float,
        *,
        maxsize: float = math.inf,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cooldown = cooldown
        self._cooling: TTLCache = TTLCache(maxsize=maxsize, ttl=cooldown, timer=timer)

    def is_cooling(self, channel_id: str) -> bool:
        return channel_id in self._cooling

    def arm(self, channel_id: str) -> None:
        if channel_id in self._cooling:
            return
        self._cooling[channel_id] = True
        LOGGER.debug(f"Cooldown armed for channel {channel_id} ({self.cooldown}s)")
