"""Shared data models for the bot."""

from .channel import Channel, Token
from .custom_command import CustomCommand

__all__ = [
    "Channel",
    "CustomCommand",
    "Token",
]
