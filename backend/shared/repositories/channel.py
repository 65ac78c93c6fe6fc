"""Repository for the tokens and channels tables."""

from __future__ import annotations

import logging

import asyncpg

from shared.models.channel import Channel, Token

logger = logging.getLogger(__name__)

_CHANNEL_COLUMNS = "channel_id, channel_name, created_at"


class ChannelRepository:
    """Pure SQL operations for tokens / channels."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool

    # ==================== Token Operations ====================

    async def upsert_token(self, user_id: str, token: str, refresh: str) -> None:
        """Insert or update an OAuth token."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO tokens (user_id, token, refresh)
                VALUES ($1, $2, $3)
                ON CONFLICT (user_id) DO UPDATE SET
                    token      = EXCLUDED.token,
                    refresh    = EXCLUDED.refresh,
                    updated_at = NOW()
                """,
                user_id,
                token,
                refresh,
            )

    async def list_tokens(self) -> list[Token]:
        """Return all tokens."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT user_id, token, refresh, created_at, updated_at FROM tokens"
            )
            return [Token(**dict(r)) for r in rows]

    # ==================== Channel Operations ====================

    async def list_all_channels(self) -> list[Channel]:
        """Return every registered channel."""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                rows = await conn.fetch(f"SELECT {_CHANNEL_COLUMNS} FROM channels")
            return [Channel(**dict(r)) for r in rows]

    async def upsert_channel(self, channel_id: str, channel_name: str) -> Channel:
        """Insert or replace a channel row.

        Login names are stored lowercase regardless of what the caller passes,
        so join and part always address the same channel.
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO channels (channel_id, channel_name)
                    VALUES ($1, $2)
                    ON CONFLICT (channel_id) DO UPDATE SET
                        channel_name = EXCLUDED.channel_name
                    RETURNING {_CHANNEL_COLUMNS}
                    """,
                    channel_id,
                    channel_name.lower(),
                )
        return Channel(**dict(row))

    async def remove_channel(self, channel_id: str) -> int:
        """Delete a channel row. Returns the number of rows removed (0 or 1)."""
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                result = await conn.execute(
                    "DELETE FROM channels WHERE channel_id = $1",
                    channel_id,
                )
        # asyncpg returns the command tag, e.g. "DELETE 1"
        return int(result.split()[-1])
