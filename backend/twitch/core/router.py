"""Command router: prefix/cooldown gate, built-in dispatch, custom command fallthrough.

Built-ins are matched in a fixed order and always win over custom commands:

    !hola           register the sender's channel (bot channel only)
    !adios          unregister the sender's channel (bot channel only)
    !clip           clip the current stream
    !fernando...    random Fernando quote (any token starting with "fernando")
    !comando <nombre> <respuesta>   add or edit a custom command (mods)
    !borracomando <nombre>          delete a custom command (mods)
    !comandos       list custom commands visible in this channel

Anything else is looked up as a custom command of this channel, then of the
bot's own channel.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from core.config import (
    BUILTIN_COMMANDS,
    CMD_CLIP,
    CMD_DEFINE,
    CMD_DELETE,
    CMD_JOIN,
    CMD_LEAVE,
    CMD_LIST,
    CMD_QUOTE,
)
from core.exceptions import ClipError
from core.guards import CooldownTracker, is_moderator
from core.transport import ChannelOffline, ClipCreated, ClipFailed, Transport
from shared.models.channel import Channel
from shared.models.custom_command import CustomCommand

LOGGER = logging.getLogger("CommandRouter")

MSG_JOIN = "¡Hola, {user}! Desde ahora estaré en tu canal."
MSG_LEAVE = "¡Adiós, {user}! Ya no estaré en tu canal."
MSG_CLIP_CREATED = "Clip creado: {url}"
MSG_CLIP_OFFLINE = "No se puede crear un clip de un canal que no está en directo."
MSG_CLIP_ERROR = "Ha ocurrido un error al crear el clip."
MSG_NO_PERMISSION = "Solo los moderadores y el dueño del canal pueden gestionar comandos."
MSG_DEFINE_USAGE = "Uso: {prefix}comando <nombre> <respuesta>"
MSG_DEFINE_RESERVED = "No se puede usar {prefix}{name}: es un comando del bot."
MSG_DEFINE_OK = "Comando {prefix}{name} guardado."
MSG_DELETE_USAGE = "Uso: {prefix}borracomando <nombre>"
MSG_DELETE_OK = "Comando {prefix}{name} eliminado."
MSG_DELETE_MISSING = "El comando {prefix}{name} no existe."
MSG_LIST = "Comandos: {commands}"
MSG_LIST_EMPTY = "No hay comandos personalizados en este canal."


class ChannelStore(Protocol):
    async def upsert_channel(self, channel_id: str, channel_name: str) -> Channel: ...

    async def remove_channel(self, channel_id: str) -> int: ...


class CommandStore(Protocol):
    async def add_or_edit(
        self, command_name: str, channel_id: str, response: str, created_by: str | None = None
    ) -> CustomCommand: ...

    async def delete(self, command_name: str, channel_id: str) -> bool: ...

    async def list_for_owners(self, channel_ids: Iterable[str]) -> list[CustomCommand]: ...

    async def lookup_response(
        self, command_name: str, channel_ids: Sequence[str]
    ) -> str | None: ...


class QuoteSource(Protocol):
    async def get_quote(self) -> str: ...


@dataclass
class IncomingMessage:
    """A chat line as seen by the router, independent of the transport."""

    channel_id: str
    channel_name: str
    sender_id: str
    sender_name: str
    sender_display_name: str
    text: str
    moderator: bool = False
    broadcaster: bool = False


@dataclass
class RouterContext:
    """Per-process state shared by every message flow."""

    bot_channel_id: str
    cooldowns: CooldownTracker
    prefix: str = "!"
    builtin_commands: frozenset[str] = BUILTIN_COMMANDS


Handler = Callable[[IncomingMessage, list[str]], Awaitable[None]]


class CommandRouter:
    def __init__(
        self,
        context: RouterContext,
        *,
        transport: Transport,
        channels: ChannelStore,
        commands: CommandStore,
        quotes: QuoteSource,
    ) -> None:
        self.context = context
        self.transport = transport
        self.channels = channels
        self.commands = commands
        self.quotes = quotes

    async def handle(self, message: IncomingMessage) -> bool:
        """Run at most one command for a chat line.

        Returns True if a command ran and the channel's cooldown was armed.
        Errors raised by storage or the transport are logged and end the flow
        without a reply.
        """
        ctx = self.context
        if not message.text.startswith(ctx.prefix):
            return False
        if ctx.cooldowns.is_cooling(message.channel_id):
            return False

        args = message.text[len(ctx.prefix) :].strip().lower().split()
        if not args:
            return False

        try:
            await self._dispatch(message, args)
        except ClipError as e:
            # The chat already got an error reply, so the command counts as run
            LOGGER.error(str(e))
            ctx.cooldowns.arm(message.channel_id)
            return True
        except Exception as e:
            LOGGER.exception(
                f"Command '{args[0]}' failed in channel {message.channel_name}: "
                f"{type(e).__name__}: {e}"
            )
            return False

        ctx.cooldowns.arm(message.channel_id)
        return True

    async def _dispatch(self, message: IncomingMessage, args: list[str]) -> None:
        handler = self._match_builtin(message, args)
        if handler is not None:
            await handler(message, args)
            return
        await self._custom_command(message, args)

    def _match_builtin(self, message: IncomingMessage, args: list[str]) -> Handler | None:
        token = args[0]
        in_bot_channel = message.channel_id == self.context.bot_channel_id

        if token == CMD_JOIN and in_bot_channel and len(args) == 1:
            return self._join
        if token == CMD_LEAVE and in_bot_channel and len(args) == 1:
            return self._leave
        if token == CMD_CLIP and len(args) == 1:
            return self._clip
        if token.startswith(CMD_QUOTE):
            return self._quote
        if token == CMD_DEFINE:
            return self._define
        if token == CMD_DELETE:
            return self._delete
        if token == CMD_LIST and len(args) == 1:
            return self._list
        return None

    def _owners(self, message: IncomingMessage) -> list[str]:
        """Owners whose custom commands are visible here, in lookup order."""
        return [message.channel_id, self.context.bot_channel_id]

    # ------------------------------------------------------------------
    # Built-ins
    # ------------------------------------------------------------------

    async def _join(self, message: IncomingMessage, args: list[str]) -> None:
        channel = await self.channels.upsert_channel(message.sender_id, message.sender_name)
        await self.transport.join(channel.channel_id, channel.channel_name)
        await self._reply(message, MSG_JOIN.format(user=message.sender_display_name))
        LOGGER.info(f"Channel registered: {channel.channel_name} ({channel.channel_id})")

    async def _leave(self, message: IncomingMessage, args: list[str]) -> None:
        removed = await self.channels.remove_channel(message.sender_id)
        await self.transport.part(message.sender_id)
        await self._reply(message, MSG_LEAVE.format(user=message.sender_display_name))
        LOGGER.info(f"Channel unregistered: {message.sender_name} (rows removed: {removed})")

    async def _clip(self, message: IncomingMessage, args: list[str]) -> None:
        result = await self.transport.create_clip(message.channel_id)
        if isinstance(result, ClipCreated):
            await self._reply(message, MSG_CLIP_CREATED.format(url=result.url))
        elif isinstance(result, ChannelOffline):
            await self._reply(message, MSG_CLIP_OFFLINE)
        elif isinstance(result, ClipFailed):
            await self._reply(message, MSG_CLIP_ERROR)
            raise ClipError(message.channel_id, result.detail)

    async def _quote(self, message: IncomingMessage, args: list[str]) -> None:
        quote = await self.quotes.get_quote()
        await self._reply(message, quote)

    async def _define(self, message: IncomingMessage, args: list[str]) -> None:
        prefix = self.context.prefix
        if not is_moderator(message):
            await self._reply(message, MSG_NO_PERMISSION)
            return
        if len(args) < 3:
            await self._reply(message, MSG_DEFINE_USAGE.format(prefix=prefix))
            return

        name = args[1]
        if name in self.context.builtin_commands:
            await self._reply(message, MSG_DEFINE_RESERVED.format(prefix=prefix, name=name))
            return

        response = " ".join(args[2:])
        await self.commands.add_or_edit(name, message.channel_id, response, message.sender_id)
        await self._reply(message, MSG_DEFINE_OK.format(prefix=prefix, name=name))
        LOGGER.info(f"Custom command saved: {prefix}{name} in {message.channel_name}")

    async def _delete(self, message: IncomingMessage, args: list[str]) -> None:
        prefix = self.context.prefix
        if not is_moderator(message):
            await self._reply(message, MSG_NO_PERMISSION)
            return
        if len(args) != 2:
            await self._reply(message, MSG_DELETE_USAGE.format(prefix=prefix))
            return

        name = args[1]
        if await self.commands.delete(name, message.channel_id):
            await self._reply(message, MSG_DELETE_OK.format(prefix=prefix, name=name))
            LOGGER.info(f"Custom command deleted: {prefix}{name} in {message.channel_name}")
        else:
            await self._reply(message, MSG_DELETE_MISSING.format(prefix=prefix, name=name))

    async def _list(self, message: IncomingMessage, args: list[str]) -> None:
        found = await self.commands.list_for_owners(self._owners(message))
        names = sorted({cmd.command_name for cmd in found})
        if not names:
            await self._reply(message, MSG_LIST_EMPTY)
            return
        prefix = self.context.prefix
        await self._reply(message, MSG_LIST.format(commands=", ".join(prefix + n for n in names)))

    # ------------------------------------------------------------------
    # Custom commands
    # ------------------------------------------------------------------

    async def _custom_command(self, message: IncomingMessage, args: list[str]) -> None:
        # A miss still costs the channel a cooldown cycle
        response = await self.commands.lookup_response(args[0], self._owners(message))
        if response is not None:
            await self._reply(message, response)

    async def _reply(self, message: IncomingMessage, text: str) -> None:
        await self.transport.say(message.channel_id, text)
