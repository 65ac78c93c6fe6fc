"""Core modules for Twitch bot."""

from .config import (
    BOT_SCOPES,
    BROADCASTER_SCOPES,
    BUILTIN_COMMANDS,
    DATA_DIR,
    TWITCH_DIR,
    get_settings,
)
from .exceptions import BotError, ClipError
from .guards import CooldownTracker, is_moderator
from .logging import setup_logging
from .router import CommandRouter, IncomingMessage, RouterContext
from .transport import ChannelOffline, ClipCreated, ClipFailed, ClipResult, TwitchTransport

__all__ = [
    # Settings
    "get_settings",
    # Path Constants
    "TWITCH_DIR",
    "DATA_DIR",
    # Scope Constants
    "BOT_SCOPES",
    "BROADCASTER_SCOPES",
    "BUILTIN_COMMANDS",
    # Setup functions
    "setup_logging",
    # Errors
    "BotError",
    "ClipError",
    # Guards
    "CooldownTracker",
    "is_moderator",
    # Routing
    "CommandRouter",
    "IncomingMessage",
    "RouterContext",
    # Transport
    "ClipResult",
    "ClipCreated",
    "ChannelOffline",
    "ClipFailed",
    "TwitchTransport",
]
