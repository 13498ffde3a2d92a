"""Sentiment normalization — raw reading → value/status/quote."""
from __future__ import annotations

from typing import Any

from ..config import RegimeConfig
from ..models import SentimentReading
from .regime import default_quote_for_regime, regime_from_sentiment, regime_label

NEUTRAL_SENTIMENT = 50.0

_DEFAULT_REGIMES = RegimeConfig()


def _coerce_value(raw: Any) -> float | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        try:
            return float(raw)
        except ValueError:
            return None
    return None


def _extract_quote(raw: Any) -> str | None:
    # The API nests the text as {"quote": {"quote": "..."}}; tolerate a flat string too.
    if isinstance(raw, dict):
        raw = raw.get("quote")
    if isinstance(raw, str) and raw.strip():
        return raw
    return None


def process_sentiment_data(
    raw: Any,
    regimes: RegimeConfig = _DEFAULT_REGIMES,
) -> SentimentReading:
    """Normalize a sentiment payload.

    Missing payloads, payloads that are not an object and missing sub-fields
    degrade to the neutral reading.
    The status label always comes from the configured regime bands, and the
    API quote is preferred over the regime's default quote.
    """
    value = NEUTRAL_SENTIMENT
    quote = None
    if isinstance(raw, dict):
        coerced = _coerce_value(raw.get("value"))
        if coerced is not None:
            value = coerced
        quote = _extract_quote(raw.get("quote"))

    regime = regime_from_sentiment(value, regimes)
    return SentimentReading(
        value=value,
        status=regime_label(regime, regimes),
        quote=quote or default_quote_for_regime(regime, regimes),
        regime=regime,
    )
