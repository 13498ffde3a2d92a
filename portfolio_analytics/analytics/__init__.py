"""Pure analytics functions — no I/O, inputs never mutated."""
from .allocation import calculate_allocation, calculate_delta
from .regime import regime_from_sentiment, regime_strategy_info, target_allocation
from .roi import (
    derive_roi_window_sort_score,
    format_roi_window_label,
    resolve_recommended_period_label,
)
from .sentiment import process_sentiment_data
from .yield_window import classify_yield_confidence, select_best_yield_window

__all__ = [
    "calculate_allocation",
    "calculate_delta",
    "classify_yield_confidence",
    "derive_roi_window_sort_score",
    "format_roi_window_label",
    "process_sentiment_data",
    "regime_from_sentiment",
    "regime_strategy_info",
    "resolve_recommended_period_label",
    "select_best_yield_window",
    "target_allocation",
]
