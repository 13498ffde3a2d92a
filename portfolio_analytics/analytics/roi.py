"""ROI window ordering, labelling and recommended-period resolution."""
from __future__ import annotations

import math
import re
from collections.abc import Mapping

from ..models import RankedRoiWindow, RoiSummary, RoiWindow

DEFAULT_RECOMMENDED_PERIOD = "30d"

_WINDOW_KEY_RE = re.compile(r"^(?:roi_)?(\d+)([dwmy])$")

# Days per unit
_UNIT_DAYS: dict[str, int] = {"d": 1, "w": 7, "m": 30, "y": 365}
_UNIT_NAMES: dict[str, str] = {"d": "day", "w": "week", "m": "month", "y": "year"}

# Sorts after every recognised key
UNRECOGNIZED_SORT_SCORE = math.inf


def _parse_key(key: str) -> tuple[int, str] | None:
    match = _WINDOW_KEY_RE.match(key.strip().lower()) if isinstance(key, str) else None
    if not match:
        return None
    return int(match.group(1)), match.group(2)


def strip_roi_prefix(key: str) -> str:
    return key[len("roi_"):] if key.startswith("roi_") else key


def derive_roi_window_sort_score(key: str) -> float:
    """Length of a window in days, e.g. ``"7d"`` → 7, ``"roi_1y"`` → 365.

    Keys that do not parse score :data:`UNRECOGNIZED_SORT_SCORE`.
    """
    parsed = _parse_key(key)
    if parsed is None:
        return UNRECOGNIZED_SORT_SCORE
    count, unit = parsed
    return float(count * _UNIT_DAYS[unit])


def format_roi_window_label(key: str) -> str:
    """``"30d"`` → ``"30 days"``; unrecognised keys are returned unchanged."""
    parsed = _parse_key(key)
    if parsed is None:
        return key
    count, unit = parsed
    name = _UNIT_NAMES[unit]
    return f"{count} {name}" if count == 1 else f"{count} {name}s"


def rank_roi_windows(windows: Mapping[str, RoiWindow]) -> list[RankedRoiWindow]:
    """Shortest window first; unrecognised keys keep their input order at the end."""
    keys = sorted(windows, key=derive_roi_window_sort_score)
    return [
        RankedRoiWindow(
            key=key,
            label=format_roi_window_label(key),
            value=windows[key].value,
            data_points=windows[key].data_points,
        )
        for key in keys
    ]


def resolve_recommended_period_label(
    roi: RoiSummary | None, is_connected: bool
) -> str | None:
    """Pick the ROI window to headline.

    Order: ``recommended_period``, legacy ``recommended_roi_period``, a
    ``roi_30d`` window, then ``30d`` for visitors. Connected users with none
    of these get None.
    """
    if roi is not None:
        for explicit in (roi.recommended_period, roi.recommended_roi_period):
            if explicit:
                label = strip_roi_prefix(explicit)
                if label:
                    return label
        if "roi_30d" in roi.windows or "roi_30d" in roi.legacy_windows:
            return DEFAULT_RECOMMENDED_PERIOD
    if not is_connected:
        return DEFAULT_RECOMMENDED_PERIOD
    return None


def _window_value(windows: Mapping[str, RoiWindow], period: str) -> float | None:
    for key in (period, f"roi_{period}"):
        if key in windows:
            return windows[key].value
    return None


def extract_roi_changes(roi: RoiSummary) -> tuple[float, float]:
    """7-day and 30-day ROI; prefers ``windows`` over the legacy flat fields."""
    source = roi.windows if roi.windows else roi.legacy_windows
    change_7d = _window_value(source, "7d")
    change_30d = _window_value(source, "30d")
    return change_7d or 0.0, change_30d or 0.0
