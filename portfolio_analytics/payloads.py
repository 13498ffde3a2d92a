"""Pure parsing functions for analytics API payloads — no I/O.

Every field is optional on the wire; each parser documents the default it
falls back to so the analytics layer never sees a missing value.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any

from .models import (
    LandingData,
    Position,
    ProtocolYield,
    RegimeHistoryEntry,
    RegimeId,
    RoiSummary,
    RoiWindow,
    YieldStatistics,
    YieldWindow,
)

logger = logging.getLogger(__name__)

_LEGACY_ROI_KEYS = ("roi_7d", "roi_30d", "roi_365d")


def as_float(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float, else ``default``."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def as_int(value: Any, default: int = 0) -> int:
    return int(as_float(value, float(default)))


def as_str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def as_dict(value: Any) -> dict[str, Any]:
    """Objects pass through; any other JSON value becomes an empty dict."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed); naive values are UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Landing page (positions + ROI)
# ---------------------------------------------------------------------------


def parse_position(raw: dict[str, Any]) -> Position:
    """Parse one position.

    Accepts both the position shape (``total_usd_value``, ``symbol``) and the
    pool-detail shape (``asset_usd_value``, ``pool_symbols``). Missing value → 0,
    missing symbol → ``"UNKNOWN"``, missing category → ``"asset"``.
    """
    usd_value = raw.get("total_usd_value", raw.get("asset_usd_value"))

    symbol = as_str(raw.get("symbol"))
    if not symbol:
        pool_symbols = as_list(raw.get("pool_symbols"))
        symbol = as_str(pool_symbols[0]) if pool_symbols else ""

    category = as_str(raw.get("category")) or as_str(raw.get("protocol_type")) or "asset"
    protocol_id = as_str(raw.get("protocol_id")) or as_str(raw.get("protocol"))

    return Position(
        protocol_id=protocol_id,
        protocol_name=as_str(raw.get("protocol_name")) or protocol_id,
        chain=as_str(raw.get("chain")),
        usd_value=as_float(usd_value),
        symbol=symbol.upper() or "UNKNOWN",
        category=category.lower(),
    )


def _parse_roi_window(key: str, raw: Any) -> RoiWindow:
    if not isinstance(raw, dict):
        # roi_windows style: {"7d": 0.02}
        return RoiWindow(key=key, value=as_float(raw))
    return RoiWindow(
        key=key,
        value=as_float(raw.get("value")),
        data_points=as_int(raw.get("data_points")),
    )


def parse_roi_summary(raw: Any) -> RoiSummary:
    """Parse the ``portfolio_roi`` block; absent or not an object → all-zero summary."""
    if not isinstance(raw, dict) or not raw:
        return RoiSummary()

    windows = {
        key: _parse_roi_window(key, w) for key, w in as_dict(raw.get("windows")).items()
    }
    legacy = {
        key: _parse_roi_window(key, raw[key])
        for key in _LEGACY_ROI_KEYS
        if raw.get(key) is not None
    }

    return RoiSummary(
        recommended_roi=as_float(raw.get("recommended_roi")),
        recommended_yearly_roi=as_float(raw.get("recommended_yearly_roi")),
        estimated_yearly_pnl_usd=as_float(raw.get("estimated_yearly_pnl_usd")),
        recommended_period=as_str(raw.get("recommended_period")) or None,
        recommended_roi_period=as_str(raw.get("recommended_roi_period")) or None,
        windows=windows,
        legacy_windows=legacy,
    )


def parse_landing(raw: Any) -> LandingData:
    """Parse the landing-page payload; absent or not an object → empty portfolio."""
    if not isinstance(raw, dict) or not raw:
        return LandingData()

    raw_positions = raw.get("positions")
    if raw_positions is None:
        raw_positions = raw.get("pool_details")
    raw_positions = as_list(raw_positions)

    positions = tuple(parse_position(p) for p in raw_positions if isinstance(p, dict))

    balance = raw.get("net_portfolio_value", raw.get("total_net_usd"))
    return LandingData(
        net_portfolio_value=as_float(balance),
        roi=parse_roi_summary(raw.get("portfolio_roi")),
        positions=positions,
    )


# ---------------------------------------------------------------------------
# Regime history
# ---------------------------------------------------------------------------


def _parse_history_entry(raw: dict[str, Any]) -> RegimeHistoryEntry | None:
    regime_raw = raw.get("regime_id", raw.get("to_regime"))
    entered_raw = raw.get("entered_at", raw.get("transitioned_at"))

    try:
        regime_id = RegimeId(regime_raw)
    except ValueError:
        logger.warning("Dropping regime history entry with unknown regime %r", regime_raw)
        return None

    entered_at = parse_timestamp(entered_raw)
    if entered_at is None:
        logger.warning("Dropping regime history entry with bad timestamp %r", entered_raw)
        return None

    return RegimeHistoryEntry(regime_id=regime_id, entered_at=entered_at)


def parse_regime_history(raw: Any) -> list[RegimeHistoryEntry]:
    """Parse regime history into chronological order (oldest first).

    Accepts an ordered list of ``{regime_id, entered_at}`` or the transition
    object ``{current, previous}`` with ``to_regime``/``transitioned_at``.
    Anything else → empty history.
    """
    if isinstance(raw, dict):
        items = [raw.get("previous"), raw.get("current")]
    elif isinstance(raw, list):
        items = raw
    else:
        return []

    entries = [
        entry
        for entry in (_parse_history_entry(i) for i in items if isinstance(i, dict))
        if entry is not None
    ]
    # Stable sort keeps payload order for identical timestamps
    entries.sort(key=lambda e: e.entered_at)
    return entries


# ---------------------------------------------------------------------------
# Yield summary
# ---------------------------------------------------------------------------


def _parse_statistics(raw: Any) -> YieldStatistics:
    raw = as_dict(raw)
    filtered_days = max(0, as_int(raw.get("filtered_days")))
    outliers = as_int(raw.get("outliers_removed"))
    clamped = min(max(outliers, 0), filtered_days)
    if clamped != outliers:
        logger.warning(
            "outliers_removed=%s outside [0, %s]; clamped", outliers, filtered_days
        )
    return YieldStatistics(
        filtered_days=filtered_days,
        positive_days=max(0, as_int(raw.get("positive_days"))),
        negative_days=max(0, as_int(raw.get("negative_days"))),
        outliers_removed=clamped,
    )


def _parse_protocol_yield(raw: dict[str, Any]) -> ProtocolYield:
    window = as_dict(raw.get("window"))
    return ProtocolYield(
        protocol=as_str(raw.get("protocol")),
        chain=as_str(raw.get("chain")),
        total_yield_usd=as_float(window.get("total_yield_usd", raw.get("total_yield_usd"))),
        average_daily_yield_usd=as_float(
            window.get("average_daily_yield_usd", raw.get("average_daily_yield_usd"))
        ),
    )


def parse_yield_window(key: str, raw: dict[str, Any]) -> YieldWindow:
    breakdown = as_list(raw.get("protocol_breakdown"))
    return YieldWindow(
        key=key,
        average_daily_yield_usd=as_float(raw.get("average_daily_yield_usd")),
        median_daily_yield_usd=as_float(raw.get("median_daily_yield_usd")),
        total_yield_usd=as_float(raw.get("total_yield_usd")),
        statistics=_parse_statistics(raw.get("statistics")),
        protocol_breakdown=tuple(
            _parse_protocol_yield(p) for p in breakdown if isinstance(p, dict)
        ),
    )


def parse_yield_windows(raw: Any) -> dict[str, YieldWindow]:
    """Parse the yield summary's ``windows`` map, preserving payload order.

    A payload or ``windows`` value that is not an object → no windows.
    """
    if not isinstance(raw, dict):
        return {}
    return {
        key: parse_yield_window(key, w)
        for key, w in as_dict(raw.get("windows")).items()
        if isinstance(w, dict)
    }
