"""Exceptions raised inside a message flow."""


class BotError(Exception):
    """Base class for bot errors."""


class ClipError(BotError):
    """Clip creation failed for a reason other than the channel being offline."""

    def __init__(self, channel_id: str, detail: str) -> None:
        super().__init__(f"Failed to create clip for channel {channel_id}: {detail}")
        self.channel_id = channel_id
        self.detail = detail
