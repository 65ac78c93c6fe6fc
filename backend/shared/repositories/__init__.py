"""Shared repository layer for the bot."""

from .channel import ChannelRepository
from .custom_command import CustomCommandRepository

__all__ = [
    "ChannelRepository",
    "CustomCommandRepository",
]
