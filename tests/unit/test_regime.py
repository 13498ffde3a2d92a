"""Unit tests for the regime engine — mapping, targets, transition context."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from portfolio_analytics.analytics.allocation import calculate_delta
from portfolio_analytics.analytics.regime import (
    build_duration,
    default_quote_for_regime,
    is_sentiment_in_regime,
    regime_from_sentiment,
    regime_label_from_sentiment,
    regime_ordinal,
    regime_strategy_info,
    strategy_direction,
    target_allocation,
)
from portfolio_analytics.config import RegimeBand, RegimeConfig
from portfolio_analytics.models import (
    DurationInfo,
    RegimeHistoryEntry,
    RegimeId,
    StrategyDirection,
    StrategyInfo,
    TargetAllocation,
)

EF, F, N, G, EG = (
    RegimeId.EXTREME_FEAR,
    RegimeId.FEAR,
    RegimeId.NEUTRAL,
    RegimeId.GREED,
    RegimeId.EXTREME_GREED,
)


class TestRegimeFromSentiment:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, EF), (25, EF),
            (25.1, F), (26, F), (45, F),
            (45.1, N), (50, N), (54, N),
            (54.1, G), (55, G), (75, G),
            (75.1, EG), (76, EG), (100, EG),
        ],
    )
    def test_band_boundaries(self, value: float, expected: RegimeId) -> None:
        assert regime_from_sentiment(value) == expected

    @pytest.mark.parametrize(
        "value", [-1, -50, 101, 150, float("nan"), float("inf"), float("-inf")]
    )
    def test_invalid_values_fall_back_to_neutral(self, value: float) -> None:
        assert regime_from_sentiment(value) == N

    def test_monotonic_over_domain(self) -> None:
        values = [i / 4 for i in range(0, 401)]
        ordinals = [regime_ordinal(regime_from_sentiment(v)) for v in values]
        assert ordinals == sorted(ordinals)
        assert ordinals[0] == 0
        assert ordinals[-1] == 4

    def test_custom_bands(self) -> None:
        cfg = RegimeConfig(
            bands=(RegimeBand(F, 50.0), RegimeBand(G, 100.0)), fallback=G
        )
        assert regime_from_sentiment(10, cfg) == F
        assert regime_from_sentiment(50.5, cfg) == G
        assert regime_from_sentiment(-3, cfg) == G


class TestRegimeHelpers:
    def test_labels(self) -> None:
        assert regime_label_from_sentiment(10) == "Extreme Fear"
        assert regime_label_from_sentiment(35) == "Fear"
        assert regime_label_from_sentiment(50) == "Neutral"
        assert regime_label_from_sentiment(65) == "Greed"
        assert regime_label_from_sentiment(85) == "Extreme Greed"
        assert regime_label_from_sentiment(150) == "Neutral"

    def test_is_sentiment_in_regime(self) -> None:
        assert is_sentiment_in_regime(25, EF)
        assert not is_sentiment_in_regime(26, EF)
        assert is_sentiment_in_regime(-10, N)
        assert not is_sentiment_in_regime(150, EG)

    def test_default_quote(self) -> None:
        assert default_quote_for_regime(EG) == "Be fearful when others are greedy."


class TestTargetAllocation:
    @pytest.mark.parametrize(
        ("regime", "expected"),
        [
            (EF, TargetAllocation(70.0, 30.0)),
            (F, TargetAllocation(70.0, 30.0)),
            (N, TargetAllocation(70.0, 30.0)),
            (G, TargetAllocation(70.0, 30.0)),
            (EG, TargetAllocation(30.0, 70.0)),
        ],
    )
    def test_lookup(self, regime: RegimeId, expected: TargetAllocation) -> None:
        assert target_allocation(regime) == expected

    def test_neutral_portfolio_on_target_has_no_drift(self) -> None:
        target = target_allocation(N)
        assert calculate_delta(70.0, target.crypto_pct) == pytest.approx(0.0)

    def test_fear_quote_matches_allocation_strategy(self) -> None:
        assert default_quote_for_regime(F) == "It was always my sitting that made the big money."

    def test_same_record_for_same_regime(self, regime_config: RegimeConfig) -> None:
        first = target_allocation(G, regime_config)
        second = target_allocation(G, regime_config)
        assert first == second
        assert first is second

    def test_every_target_sums_to_100(self) -> None:
        for regime in RegimeId:
            t = target_allocation(regime)
            assert t.crypto_pct + t.stable_pct == pytest.approx(100.0)

    def test_missing_target_uses_fallback(self) -> None:
        cfg = RegimeConfig(targets={N: TargetAllocation(50.0, 50.0)})
        assert target_allocation(EG, cfg) == TargetAllocation(50.0, 50.0)


class TestBuildDuration:
    def test_days_and_hours(self) -> None:
        start = datetime(2025, 12, 10, 8, 0, tzinfo=timezone.utc)
        now = start + timedelta(hours=51, minutes=20)
        assert build_duration(start, now) == DurationInfo(51, 2, "2 days, 3 hours")

    def test_singular_units(self) -> None:
        start = datetime(2025, 12, 10, tzinfo=timezone.utc)
        assert build_duration(start, start + timedelta(hours=25)).human_readable == "1 day, 1 hour"
        assert build_duration(start, start + timedelta(days=3)).human_readable == "3 days"
        assert build_duration(start, start + timedelta(minutes=30)).human_readable == "0 hours"

    def test_future_timestamp_is_zero(self) -> None:
        now = datetime(2025, 12, 10, tzinfo=timezone.utc)
        assert build_duration(now + timedelta(hours=5), now) == DurationInfo()

    def test_naive_timestamps_treated_as_utc(self) -> None:
        start = datetime(2025, 12, 10, 0, 0)
        now = datetime(2025, 12, 10, 6, 0, tzinfo=timezone.utc)
        assert build_duration(start, now).hours == 6


class TestStrategyDirection:
    def test_from_more_fearful_regime(self) -> None:
        assert strategy_direction(F, N) == StrategyDirection.FROM_LEFT

    def test_from_greedier_regime(self) -> None:
        assert strategy_direction(EG, G) == StrategyDirection.FROM_RIGHT

    def test_same_regime(self) -> None:
        assert strategy_direction(N, N) == StrategyDirection.DEFAULT


class TestRegimeStrategyInfo:
    def test_empty_history(self) -> None:
        assert regime_strategy_info([]) == StrategyInfo(
            previous_regime=None,
            strategy_direction=StrategyDirection.DEFAULT,
            regime_duration=DurationInfo(hours=0, days=0, human_readable="0 hours"),
        )

    def test_none_history(self) -> None:
        assert regime_strategy_info(None) == StrategyInfo()

    def test_single_entry(self, fixed_now: datetime) -> None:
        history = [RegimeHistoryEntry(N, fixed_now - timedelta(hours=30))]
        info = regime_strategy_info(history, now=fixed_now)
        assert info.previous_regime is None
        assert info.strategy_direction == StrategyDirection.DEFAULT
        assert info.regime_duration == DurationInfo(30, 1, "1 day, 6 hours")

    def test_uses_two_most_recent_entries(self, fixed_now: datetime) -> None:
        history = [
            RegimeHistoryEntry(EG, fixed_now - timedelta(days=20)),
            RegimeHistoryEntry(F, fixed_now - timedelta(days=10)),
            RegimeHistoryEntry(N, fixed_now - timedelta(hours=51)),
        ]
        info = regime_strategy_info(history, now=fixed_now)
        assert info.previous_regime == F
        assert info.strategy_direction == StrategyDirection.FROM_LEFT
        assert info.regime_duration.human_readable == "2 days, 3 hours"

    def test_moving_toward_fear(self, fixed_now: datetime) -> None:
        history = [
            RegimeHistoryEntry(G, fixed_now - timedelta(days=5)),
            RegimeHistoryEntry(F, fixed_now - timedelta(days=1)),
        ]
        info = regime_strategy_info(history, now=fixed_now)
        assert info.strategy_direction == StrategyDirection.FROM_RIGHT

    def test_does_not_mutate_history(self, fixed_now: datetime) -> None:
        history = [
            RegimeHistoryEntry(G, fixed_now - timedelta(days=5)),
            RegimeHistoryEntry(F, fixed_now - timedelta(days=1)),
        ]
        snapshot = list(history)
        regime_strategy_info(history, now=fixed_now)
        assert history == snapshot
