"""Yield window selection and data-confidence classification."""
from __future__ import annotations

from collections.abc import Mapping

from ..config import YieldThresholds
from ..models import SelectedYieldWindow, YieldConfidence, YieldWindow
from .roi import format_roi_window_label

BADGE_PRELIMINARY = "preliminary"
BADGE_IMPROVING = "improving"

_DEFAULT_THRESHOLDS = YieldThresholds()


def select_best_yield_window(
    windows: Mapping[str, YieldWindow] | None,
) -> SelectedYieldWindow | None:
    """Pick the most representative yield window.

    Windows with a positive average daily yield are preferred; if none
    exist every window is a candidate. Among candidates the one with the
    most filtered days wins, and ties go to the window that comes first in
    the mapping's iteration order.
    """
    if not windows:
        return None

    candidates = [
        (key, w) for key, w in windows.items() if w.average_daily_yield_usd > 0
    ]
    if not candidates:
        candidates = list(windows.items())

    best_key, best = candidates[0]
    for key, window in candidates[1:]:
        if window.statistics.filtered_days > best.statistics.filtered_days:
            best_key, best = key, window

    return SelectedYieldWindow(
        key=best_key, window=best, label=format_roi_window_label(best_key)
    )


def yield_badge(
    filtered_days: int, thresholds: YieldThresholds = _DEFAULT_THRESHOLDS
) -> str | None:
    """``preliminary`` below the preliminary threshold, ``improving`` below
    the confidence threshold, None once established."""
    if filtered_days < thresholds.min_preliminary_days:
        return BADGE_PRELIMINARY
    if filtered_days < thresholds.min_confidence_days:
        return BADGE_IMPROVING
    return None


def classify_yield_confidence(
    selected: SelectedYieldWindow | None,
    thresholds: YieldThresholds = _DEFAULT_THRESHOLDS,
) -> YieldConfidence:
    if selected is None:
        return YieldConfidence(status="no_data")

    days = selected.window.statistics.filtered_days
    badge = yield_badge(days, thresholds)
    if badge == BADGE_PRELIMINARY:
        status = "insufficient"
    elif badge == BADGE_IMPROVING:
        status = "low_confidence"
    else:
        status = "normal"

    return YieldConfidence(
        status=status,
        days_with_data=days,
        badge=badge,
        days_until_confident=max(0, thresholds.min_confidence_days - days),
    )
