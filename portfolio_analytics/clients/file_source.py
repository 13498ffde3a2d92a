"""Payload source backed by JSON files in a directory."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

LANDING_FILE = "landing.json"
SENTIMENT_FILE = "sentiment.json"
REGIME_HISTORY_FILE = "regime_history.json"
YIELD_SUMMARY_FILE = "yield_summary.json"


class FilePayloadSource:
    """Read saved API payloads; a missing file means the payload is absent.

    The user id is ignored: a directory holds one portfolio.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise FileNotFoundError(f"Payload directory not found: {self.directory}")

    def _read(self, name: str) -> Any:
        path = self.directory / name
        if not path.exists():
            logger.debug("No %s in %s", name, self.directory)
            return None
        try:
            with open(path) as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", path, e)
            return None

    async def fetch_landing(self, user_id: str) -> dict[str, Any] | None:
        return self._read(LANDING_FILE)

    async def fetch_sentiment(self) -> dict[str, Any] | None:
        return self._read(SENTIMENT_FILE)

    async def fetch_regime_history(self) -> Any:
        return self._read(REGIME_HISTORY_FILE)

    async def fetch_yield_summary(self, user_id: str) -> dict[str, Any] | None:
        return self._read(YIELD_SUMMARY_FILE)
