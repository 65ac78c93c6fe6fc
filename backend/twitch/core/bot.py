"""Twitch Bot class — lifecycle, token storage, channel subscriptions, chat routing."""

from __future__ import annotations

import asyncio
import logging

import asyncpg
import twitchio
from twitchio import eventsub
from twitchio.ext import commands

from components.quotes import QuoteProvider
from core.config import TwitchBotSettings
from core.guards import CooldownTracker
from core.router import CommandRouter, IncomingMessage, RouterContext
from core.transport import TwitchTransport
from shared.repositories.channel import ChannelRepository
from shared.repositories.custom_command import CustomCommandRepository

LOGGER: logging.Logger = logging.getLogger("Bot")


class Bot(commands.AutoBot):
    token_database: asyncpg.Pool

    def __init__(
        self,
        *,
        settings: TwitchBotSettings,
        token_database: asyncpg.Pool,
    ) -> None:
        self.token_database = token_database
        self._settings = settings
        self._subscribed_channels: set[str] = set()
        self._subscription_ids: dict[str, list[str]] = {}
        self._bot_id = settings.bot_id

        self.channels = ChannelRepository(token_database)
        self.custom_commands = CustomCommandRepository(token_database)
        self.router = CommandRouter(
            RouterContext(
                bot_channel_id=settings.bot_id,
                cooldowns=CooldownTracker(settings.command_cooldown),
                prefix=settings.command_prefix,
            ),
            transport=TwitchTransport(self),
            channels=self.channels,
            commands=self.custom_commands,
            quotes=QuoteProvider(settings.quotes_file),
        )

        init_kwargs: dict = dict(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            bot_id=settings.bot_id,
            prefix=settings.command_prefix,
            subscriptions=[],
            force_subscribe=True,
        )
        if settings.conduit_id:
            init_kwargs["conduit_id"] = settings.conduit_id

        super().__init__(**init_kwargs)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    async def setup_hook(self) -> None:
        await self.register_bot_channel()

        # Storage errors here abort startup
        channels = await self.channels.list_all_channels()
        LOGGER.info(f"Loaded {len(channels)} channels from database")

        asyncio.create_task(self._subscribe_initial_channels([ch.channel_id for ch in channels]))

    async def register_bot_channel(self) -> None:
        """Make sure the bot's own channel is registered so it can receive !hola."""
        bot_name = self._settings.bot_name
        if not bot_name:
            users = await self.fetch_users(ids=[self._bot_id])
            bot_name = users[0].name if users and users[0].name else self._bot_id

        channel = await self.channels.upsert_channel(self._bot_id, bot_name)
        LOGGER.info(f"Bot channel registered: {channel.channel_name} (ID: {channel.channel_id})")

    async def _subscribe_initial_channels(self, channel_ids: list[str]) -> None:
        """Subscribe to chat for every registered channel on startup."""
        await asyncio.sleep(2)
        LOGGER.info(f"Subscribing to {len(channel_ids)} channels...")
        for channel_id in channel_ids:
            try:
                await self.subscribe_channel_events(channel_id)
            except Exception as e:
                LOGGER.exception(f"Failed to subscribe channel {channel_id}: {e}")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def event_ready(self) -> None:
        LOGGER.info("Successfully logged in as: %s", self.bot_id)

    async def event_eventsub_error(self, error: Exception) -> None:
        LOGGER.error(f"EventSub error: {error}")

    async def event_oauth_authorized(
        self, payload: twitchio.authentication.UserTokenPayload
    ) -> None:
        await self.add_token(payload.access_token, payload.refresh_token)

        if payload.user_id == self.bot_id:
            LOGGER.info("Bot account authorized")

    async def event_message(self, payload: twitchio.ChatMessage) -> None:
        if not payload.broadcaster:
            LOGGER.debug(f"[{payload.chatter.name}]: {payload.text}")
            return

        LOGGER.debug(f"[{payload.chatter.name}#{payload.broadcaster.name}]: {payload.text}")

        if payload.chatter.id == self.bot_id:
            return

        chatter = payload.chatter
        message = IncomingMessage(
            channel_id=payload.broadcaster.id,
            channel_name=payload.broadcaster.name or "",
            sender_id=chatter.id,
            sender_name=chatter.name or "",
            sender_display_name=chatter.display_name or chatter.name or "",
            text=payload.text or "",
            moderator=bool(chatter.moderator),
            broadcaster=bool(chatter.broadcaster),
        )
        await self.router.handle(message)

    # ------------------------------------------------------------------
    # Token management
    # ------------------------------------------------------------------

    async def add_token(
        self, token: str, refresh: str
    ) -> twitchio.authentication.ValidateTokenPayload:
        resp: twitchio.authentication.ValidateTokenPayload = await super().add_token(token, refresh)

        if resp.user_id:
            try:
                await self.channels.upsert_token(resp.user_id, token, refresh)
            except Exception as e:
                LOGGER.error(f"Failed to save token for {resp.user_id}: {e}")

        login = resp.login or "unknown"
        LOGGER.info(f"Added token to database: {login} ({resp.user_id})")
        return resp

    async def load_tokens(self, path: str | None = None) -> None:
        tokens = await self.channels.list_tokens()

        for tok in tokens:
            try:
                await self.add_token(tok.token, tok.refresh)
            except twitchio.exceptions.InvalidTokenException as e:
                LOGGER.warning(
                    f"Invalid token for user_id {tok.user_id}, skipping. "
                    f"User needs to re-authenticate: {e}"
                )

    # ------------------------------------------------------------------
    # Channel subscriptions
    # ------------------------------------------------------------------

    async def subscribe_channel_events(self, broadcaster_user_id: str) -> None:
        if broadcaster_user_id in self._subscribed_channels:
            LOGGER.debug(f"Already subscribed: {broadcaster_user_id}")
            return

        subs: list[eventsub.SubscriptionPayload] = [
            eventsub.ChatMessageSubscription(
                broadcaster_user_id=broadcaster_user_id, user_id=self._bot_id
            ),
        ]
        resp = await self.multi_subscribe(subs)
        if resp.errors:
            non_conflict = [
                e for e in resp.errors if "409" not in str(e) and "already exists" not in str(e)
            ]
            if non_conflict:
                LOGGER.warning(f"Subscription errors: {non_conflict}")

        subscription_ids: list[str] = []
        for success_item in resp.success:
            sub_id = success_item.response.get("id")
            if sub_id and isinstance(sub_id, str):
                subscription_ids.append(sub_id)

        if subscription_ids:
            self._subscription_ids[broadcaster_user_id] = subscription_ids

        self._subscribed_channels.add(broadcaster_user_id)
        LOGGER.info(f"Subscribed to chat for channel: {broadcaster_user_id}")

    async def unsubscribe_channel_events(self, broadcaster_user_id: str) -> None:
        if broadcaster_user_id not in self._subscribed_channels:
            LOGGER.debug(f"Not subscribed to channel: {broadcaster_user_id}")
            return

        for sub_id in self._subscription_ids.pop(broadcaster_user_id, []):
            await self.delete_eventsub_subscription(sub_id)
            LOGGER.debug(f"Deleted subscription {sub_id} for channel {broadcaster_user_id}")

        self._subscribed_channels.discard(broadcaster_user_id)
        LOGGER.info(f"Unsubscribed from chat for channel: {broadcaster_user_id}")
