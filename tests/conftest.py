"""Shared fixtures: in-memory stores, a recording transport and a fake clock."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from core.guards import CooldownTracker
from core.router import CommandRouter, IncomingMessage, RouterContext
from core.transport import ClipCreated
from shared.models.channel import Channel
from shared.models.custom_command import CustomCommand

BOT_CHANNEL_ID = "1"
CHANNEL_ID = "100"
COOLDOWN = 5


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    def __init__(self) -> None:
        self.said: list[tuple[str, str]] = []
        self.joined: list[tuple[str, str]] = []
        self.parted: list[str] = []
        self.clip_result = ClipCreated("FunnyClip123")

    async def join(self, channel_id: str, channel_name: str) -> None:
        self.joined.append((channel_id, channel_name))

    async def part(self, channel_id: str) -> None:
        self.parted.append(channel_id)

    async def say(self, channel_id: str, text: str) -> None:
        self.said.append((channel_id, text))

    async def create_clip(self, channel_id: str):
        return self.clip_result

    @property
    def replies(self) -> list[str]:
        return [text for _, text in self.said]


class InMemoryChannelRepository:
    def __init__(self) -> None:
        self.rows: dict[str, Channel] = {}

    async def upsert_channel(self, channel_id: str, channel_name: str) -> Channel:
        channel = Channel(channel_id=channel_id, channel_name=channel_name.lower())
        self.rows[channel_id] = channel
        return channel

    async def remove_channel(self, channel_id: str) -> int:
        return 1 if self.rows.pop(channel_id, None) else 0

    async def list_all_channels(self) -> list[Channel]:
        return list(self.rows.values())


class InMemoryCustomCommandRepository:
    def __init__(self) -> None:
        self.rows: dict[tuple[str, str], CustomCommand] = {}

    async def add_or_edit(self, command_name, channel_id, response, created_by=None):
        cmd = CustomCommand(command_name, channel_id, response, created_by)
        self.rows[(command_name, channel_id)] = cmd
        return cmd

    async def delete(self, command_name, channel_id) -> bool:
        return self.rows.pop((command_name, channel_id), None) is not None

    async def list_for_owners(self, channel_ids):
        owners = set(channel_ids)
        return [cmd for (_, owner), cmd in self.rows.items() if owner in owners]

    async def lookup_response(self, command_name, channel_ids):
        for owner in channel_ids:
            cmd = self.rows.get((command_name, owner))
            if cmd:
                return cmd.response
        return None


class StaticQuotes:
    def __init__(self, quote: str = "Hoy no es el día, pero mañana tampoco.") -> None:
        self.quote = quote

    async def get_quote(self) -> str:
        return self.quote


def make_message(
    text: str,
    *,
    channel_id: str = CHANNEL_ID,
    channel_name: str = "canal",
    sender_id: str = "200",
    sender_name: str = "espectador",
    moderator: bool = False,
    broadcaster: bool = False,
) -> IncomingMessage:
    return IncomingMessage(
        channel_id=channel_id,
        channel_name=channel_name,
        sender_id=sender_id,
        sender_name=sender_name,
        sender_display_name=sender_name.capitalize(),
        text=text,
        moderator=moderator,
        broadcaster=broadcaster,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def channel_repo() -> InMemoryChannelRepository:
    return InMemoryChannelRepository()


@pytest.fixture
def command_repo() -> InMemoryCustomCommandRepository:
    return InMemoryCustomCommandRepository()


@pytest.fixture
def router(clock, transport, channel_repo, command_repo) -> CommandRouter:
    context = RouterContext(
        bot_channel_id=BOT_CHANNEL_ID,
        cooldowns=CooldownTracker(COOLDOWN, timer=clock),
        prefix="!",
    )
    return CommandRouter(
        context,
        transport=transport,
        channels=channel_repo,
        commands=command_repo,
        quotes=StaticQuotes(),
    )


def make_pool(conn: MagicMock) -> MagicMock:
    """Build an asyncpg-like pool whose acquire() yields ``conn``."""
    pool = MagicMock()
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=conn)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    conn.transaction.return_value.__aenter__ = AsyncMock(return_value=None)
    conn.transaction.return_value.__aexit__ = AsyncMock(return_value=False)
    return pool


@pytest.fixture
def conn() -> MagicMock:
    connection = MagicMock()
    connection.execute = AsyncMock()
    connection.fetch = AsyncMock(return_value=[])
    connection.fetchrow = AsyncMock()
    return connection


@pytest.fixture
def pool(conn) -> MagicMock:
    return make_pool(conn)
