"""Payload source protocol — where raw analytics payloads come from."""
from typing import Any, Protocol


class PayloadSource(Protocol):
    """Abstract interface for fetching raw analytics payloads.

    Every method returns None when the payload is unavailable.
    """

    async def fetch_landing(self, user_id: str) -> dict[str, Any] | None: ...

    async def fetch_sentiment(self) -> dict[str, Any] | None: ...

    async def fetch_regime_history(self) -> Any: ...

    async def fetch_yield_summary(self, user_id: str) -> dict[str, Any] | None: ...
