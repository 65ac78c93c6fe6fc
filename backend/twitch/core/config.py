"""Twitch bot configuration"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# === Path Configuration ===
TWITCH_DIR = Path(__file__).parent.parent
BACKEND_DIR = TWITCH_DIR.parent
DATA_DIR = BACKEND_DIR / "data"

BOT_SCOPES = [
    "user:bot",  # Bot identifier
    "user:read:chat",  # Read chat messages
    "user:write:chat",  # Send chat messages
    "clips:edit",  # !clip
]

BROADCASTER_SCOPES = [
    "channel:bot",  # Allow bot to join channel
]

# === Built-in commands ===
# Names are matched after the prefix is stripped and the line lowercased.
CMD_JOIN = "hola"
CMD_LEAVE = "adios"
CMD_CLIP = "clip"
CMD_QUOTE = "fernando"
CMD_DEFINE = "comando"
CMD_DELETE = "borracomando"
CMD_LIST = "comandos"

BUILTIN_COMMANDS: frozenset[str] = frozenset(
    {CMD_JOIN, CMD_LEAVE, CMD_CLIP, CMD_QUOTE, CMD_DEFINE, CMD_DELETE, CMD_LIST}
)


class TwitchBotSettings(BaseSettings):
    """Twitch bot settings"""

    model_config = SettingsConfigDict(
        env_file=TWITCH_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Twitch OAuth
    client_id: str = Field(..., description="Twitch OAuth Client ID")
    client_secret: str = Field(..., description="Twitch OAuth Client Secret")

    # Bot Configuration
    bot_id: str = Field(..., description="Bot User ID")
    bot_name: str = Field(default="", description="Bot login name (resolved from Twitch if empty)")

    # Database
    database_url: str = Field(..., description="PostgreSQL database URL")
    database_ssl: str | None = Field(default=None, description="asyncpg ssl mode, e.g. 'require'")

    # EventSub
    conduit_id: str = Field(default="", description="Twitch EventSub Conduit ID")

    # Commands
    command_prefix: str = Field(default="!", min_length=1, description="Chat command prefix")
    command_cooldown: float = Field(default=5, ge=0, description="Per-channel cooldown in seconds")
    quotes_file: Path = Field(
        default=DATA_DIR / "fernando_quotes.json", description="JSON list of quotes for !fernando"
    )

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL starts with postgresql://"""
        if not v.startswith(("postgresql://", "postgres://")):
            raise ValueError("DATABASE_URL must start with 'postgresql://'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper


@lru_cache
def get_settings() -> TwitchBotSettings:
    """Get cached settings instance"""
    return TwitchBotSettings()  # type: ignore[call-arg]
