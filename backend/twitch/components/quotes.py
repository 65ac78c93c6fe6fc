"""Fernando quote source for the !fernando command."""

import json
import logging
import random
from pathlib import Path

LOGGER = logging.getLogger("Quotes")


class QuoteProvider:
    """Serves a random quote from a JSON file of the form ``{"quotes": [...]}``."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.quotes: list[str] = []
        self._load_data()

    def _load_data(self) -> None:
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        self.quotes = [q.strip() for q in data.get("quotes", []) if q and q.strip()]
        if not self.quotes:
            raise ValueError(f"No quotes found in {self.path}")
        LOGGER.info(f"Loaded {len(self.quotes)} quotes from {self.path.name}")

    async def get_quote(self) -> str:
        return random.choice(self.quotes)
