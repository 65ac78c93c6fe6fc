#!/usr/bin/env python3
"""Print the Twitch authorization URLs for the bot account and for channels."""

import sys
from pathlib import Path
from urllib.parse import quote

# Add parent directories to path to import core
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from core.config import BOT_SCOPES, BROADCASTER_SCOPES, get_settings  # noqa: E402


def gen_url(cid: str, uri: str, scopes: list[str]) -> str:
    s = "+".join(s.replace(":", "%3A") for s in scopes)
    return f"https://id.twitch.tv/oauth2/authorize?client_id={cid}&redirect_uri={quote(uri, safe='')}&response_type=code&scope={s}"


def main() -> None:
    settings = get_settings()
    uri = "http://localhost:4343/oauth/callback"

    print("Bot account:")
    print(gen_url(settings.client_id, uri, BOT_SCOPES))
    print()
    print("Channel:")
    print(gen_url(settings.client_id, uri, BROADCASTER_SCOPES))


if __name__ == "__main__":
    main()
