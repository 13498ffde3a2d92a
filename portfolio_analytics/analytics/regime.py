"""Regime engine — sentiment → regime, regime → target, history → transition context.

All functions take the regime tables as an explicit :class:`RegimeConfig`
argument (defaulting to the built-in tables) and never mutate it.
"""
from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timezone

from ..config import RegimeConfig
from ..models import (
    REGIME_ORDER,
    DurationInfo,
    RegimeHistoryEntry,
    RegimeId,
    StrategyDirection,
    StrategyInfo,
    TargetAllocation,
)

_DEFAULT_REGIMES = RegimeConfig()


def regime_from_sentiment(
    value: float, regimes: RegimeConfig = _DEFAULT_REGIMES
) -> RegimeId:
    """Map a 0–100 sentiment value onto a regime.

    Each band covers values up to and including its upper bound, so with the
    default table 25 is Extreme Fear and 25.1 is Fear. Non-finite or
    out-of-range values map to the fallback regime.
    """
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return regimes.fallback
    if value < 0 or value > 100:
        return regimes.fallback

    for band in regimes.bands:
        if value <= band.upper:
            return band.regime
    return regimes.fallback


def regime_label(regime_id: RegimeId, regimes: RegimeConfig = _DEFAULT_REGIMES) -> str:
    return regimes.labels.get(regime_id, regimes.labels.get(regimes.fallback, ""))


def regime_label_from_sentiment(
    value: float, regimes: RegimeConfig = _DEFAULT_REGIMES
) -> str:
    return regime_label(regime_from_sentiment(value, regimes), regimes)


def is_sentiment_in_regime(
    value: float, regime_id: RegimeId, regimes: RegimeConfig = _DEFAULT_REGIMES
) -> bool:
    return regime_from_sentiment(value, regimes) == regime_id


def default_quote_for_regime(
    regime_id: RegimeId, regimes: RegimeConfig = _DEFAULT_REGIMES
) -> str:
    return regimes.quotes.get(regime_id, "")


def regime_ordinal(regime_id: RegimeId) -> int:
    """Position of a regime on the fear → greed axis."""
    return REGIME_ORDER.index(regime_id)


def target_allocation(
    regime_id: RegimeId, regimes: RegimeConfig = _DEFAULT_REGIMES
) -> TargetAllocation:
    """Look up the target allocation for a regime.

    Returns the configured record itself, so repeated lookups for the same
    regime are identical objects. Unknown ids resolve to the fallback regime.
    """
    target = regimes.targets.get(regime_id)
    if target is None:
        target = regimes.targets[regimes.fallback]
    return target


# ---------------------------------------------------------------------------
# Regime history
# ---------------------------------------------------------------------------


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def build_duration(entered_at: datetime, now: datetime) -> DurationInfo:
    """Elapsed whole hours/days since ``entered_at``; future timestamps count as zero."""
    if entered_at.tzinfo is None:
        entered_at = entered_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    total_hours = max(0, int((now - entered_at).total_seconds() // 3600))
    days, rem_hours = divmod(total_hours, 24)

    if days == 0:
        human = _plural(rem_hours, "hour")
    elif rem_hours == 0:
        human = _plural(days, "day")
    else:
        human = f"{_plural(days, 'day')}, {_plural(rem_hours, 'hour')}"

    return DurationInfo(hours=total_hours, days=days, human_readable=human)


def strategy_direction(previous: RegimeId, current: RegimeId) -> StrategyDirection:
    """fromLeft when arriving from a more fearful regime, fromRight from a greedier one."""
    prev_pos = regime_ordinal(previous)
    cur_pos = regime_ordinal(current)
    if prev_pos < cur_pos:
        return StrategyDirection.FROM_LEFT
    if prev_pos > cur_pos:
        return StrategyDirection.FROM_RIGHT
    return StrategyDirection.DEFAULT


def regime_strategy_info(
    history: Sequence[RegimeHistoryEntry] | None,
    now: datetime | None = None,
) -> StrategyInfo:
    """Derive transition context from a chronologically ordered regime history.

    The most recent entry is the current regime. With fewer than two entries
    there is no previous regime and the direction is ``default``.
    """
    if not history:
        return StrategyInfo()

    if now is None:
        now = datetime.now(timezone.utc)

    current = history[-1]
    duration = build_duration(current.entered_at, now)

    if len(history) < 2:
        return StrategyInfo(regime_duration=duration)

    previous = history[-2]
    return StrategyInfo(
        previous_regime=previous.regime_id,
        strategy_direction=strategy_direction(previous.regime_id, current.regime_id),
        regime_duration=duration,
    )
