"""Repository for the custom_commands table."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence

import asyncpg

from shared.models.custom_command import CustomCommand

logger = logging.getLogger(__name__)

_CMD_COLUMNS = "command_name, channel_id, response, created_by, updated_at"


async def _retry_on_db_error(func, max_retries: int = 2):
    """Retry helper for write operations."""
    for attempt in range(1, max_retries + 1):
        try:
            return await func()
        except asyncio.CancelledError:
            raise
        except (asyncpg.PostgresConnectionError, OSError) as e:
            if attempt < max_retries:
                delay = 0.5 * attempt
                logger.warning(
                    f"DB operation attempt {attempt}/{max_retries} failed: {type(e).__name__}, "
                    f"retrying in {delay}s..."
                )
                await asyncio.sleep(delay)
            else:
                raise


class CustomCommandRepository:
    """Pure SQL operations for custom_commands.

    The repository does not know about built-in command names; callers are
    responsible for rejecting names that would shadow one.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool

    async def add_or_edit(
        self,
        command_name: str,
        channel_id: str,
        response: str,
        created_by: str | None = None,
    ) -> CustomCommand:
        """Insert a command or replace the response of an existing one."""

        async def _query():
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    row = await conn.fetchrow(
                        f"""
                        INSERT INTO custom_commands
                            (command_name, channel_id, response, created_by)
                        VALUES ($1, $2, $3, $4)
                        ON CONFLICT (command_name, channel_id) DO UPDATE SET
                            response   = EXCLUDED.response,
                            created_by = EXCLUDED.created_by,
                            updated_at = NOW()
                        RETURNING {_CMD_COLUMNS}
                        """,
                        command_name,
                        channel_id,
                        response,
                        created_by,
                    )
            return CustomCommand(**dict(row))

        return await _retry_on_db_error(_query)

    async def delete(self, command_name: str, channel_id: str) -> bool:
        """Delete a command. Returns True if a row was removed.

        Runs once: the reply tag of a repeated DELETE cannot tell a lost
        commit apart from a missing row.
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                result = await conn.execute(
                    "DELETE FROM custom_commands WHERE command_name = $1 AND channel_id = $2",
                    command_name,
                    channel_id,
                )
        return result == "DELETE 1"

    async def list_for_owners(self, channel_ids: Iterable[str]) -> list[CustomCommand]:
        """Return every command owned by any of the given channels.

        The same name may appear once per owner.
        """
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                rows = await conn.fetch(
                    f"SELECT {_CMD_COLUMNS} FROM custom_commands "
                    "WHERE channel_id = ANY($1::text[]) ORDER BY command_name",
                    list(dict.fromkeys(channel_ids)),
                )
            return [CustomCommand(**dict(r)) for r in rows]

    async def lookup_response(self, command_name: str, channel_ids: Sequence[str]) -> str | None:
        """Find the response for a command, searching owners in the given order."""
        owners = list(dict.fromkeys(channel_ids))
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                rows = await conn.fetch(
                    "SELECT channel_id, response FROM custom_commands "
                    "WHERE command_name = $1 AND channel_id = ANY($2::text[])",
                    command_name,
                    owners,
                )
        by_owner = {r["channel_id"]: r["response"] for r in rows}
        for owner in owners:
            if owner in by_owner:
                return by_owner[owner]
        return None
