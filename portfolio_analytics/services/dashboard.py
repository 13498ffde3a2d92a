"""Dashboard assembly — raw payloads → one PortfolioView, plus text reports and drift alerts."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from ..analytics.allocation import (
    calculate_allocation,
    calculate_delta,
    count_unique_chains,
    count_unique_protocols,
)
from ..analytics.regime import regime_label, regime_strategy_info, target_allocation
from ..analytics.roi import (
    extract_roi_changes,
    rank_roi_windows,
    resolve_recommended_period_label,
)
from ..analytics.sentiment import process_sentiment_data
from ..analytics.yield_window import classify_yield_confidence, select_best_yield_window
from ..config import AppConfig
from ..interfaces.notifier import Notifier
from ..interfaces.payload_source import PayloadSource
from ..models import AllocationSnapshot, LandingData, PortfolioView, StrategyDirection
from ..notifications import TelegramNotifier
from ..payloads import parse_landing, parse_regime_history, parse_yield_windows

logger = logging.getLogger(__name__)


def build_portfolio_view(
    landing: Any,
    sentiment: Any,
    regime_history: Any,
    yield_summary: Any,
    config: AppConfig,
    is_connected: bool = True,
    now: datetime | None = None,
) -> PortfolioView:
    """Combine the four raw payloads into the record the dashboard renders.

    Any payload may be None or malformed JSON; the corresponding fields fall
    back to their neutral defaults.
    """
    data: LandingData = parse_landing(landing)
    regimes = config.regimes

    reading = process_sentiment_data(sentiment, regimes)
    target = target_allocation(reading.regime, regimes)
    allocation = calculate_allocation(data.positions, config.allocation)
    strategy = regime_strategy_info(parse_regime_history(regime_history), now)

    selected_yield = select_best_yield_window(parse_yield_windows(yield_summary))
    roi_windows = data.roi.windows or data.roi.legacy_windows
    change_7d, change_30d = extract_roi_changes(data.roi)

    return PortfolioView(
        balance=data.net_portfolio_value,
        roi=data.roi.recommended_yearly_roi,
        roi_change_7d=change_7d,
        roi_change_30d=change_30d,
        estimated_yearly_pnl_usd=data.roi.estimated_yearly_pnl_usd,
        sentiment=reading,
        current_regime=reading.regime,
        previous_regime=strategy.previous_regime,
        strategy_direction=strategy.strategy_direction,
        regime_duration=strategy.regime_duration,
        current_allocation=allocation,
        target_allocation=target,
        delta=calculate_delta(allocation.crypto_pct, target.crypto_pct),
        positions=len(data.positions),
        protocols=count_unique_protocols(data.positions),
        chains=count_unique_chains(data.positions),
        recommended_period=resolve_recommended_period_label(data.roi, is_connected),
        roi_windows=tuple(rank_roi_windows(roi_windows)),
        yield_window=selected_yield,
        yield_confidence=classify_yield_confidence(selected_yield, config.yield_thresholds),
    )


def build_visitor_view(
    sentiment: Any,
    regime_history: Any,
    config: AppConfig,
    now: datetime | None = None,
) -> PortfolioView:
    """View for a disconnected visitor: real market context, empty portfolio."""
    return build_portfolio_view(
        landing=None,
        sentiment=sentiment,
        regime_history=regime_history,
        yield_summary=None,
        config=config,
        is_connected=False,
        now=now,
    )


# ---------------------------------------------------------------------------
# Report formatting
# ---------------------------------------------------------------------------

_DIRECTION_TEXT = {
    StrategyDirection.FROM_LEFT: "coming from a more fearful regime",
    StrategyDirection.FROM_RIGHT: "coming from a greedier regime",
}


def _now_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _allocation_lines(allocation: AllocationSnapshot) -> list[str]:
    lines = [
        f"Crypto: {allocation.crypto_pct:.2f}% · Stable: {allocation.stable_pct:.2f}%"
    ]
    for c in allocation.simplified_crypto:
        lines.append(f"  {c.symbol}: ${c.value_usd:,.2f} ({c.weight_pct:.2f}%)")
    return lines


def render_report(view: PortfolioView, config: AppConfig) -> str:
    """Plain-text summary of a portfolio view."""
    regimes = config.regimes
    regime_line = f"Regime: {regime_label(view.current_regime, regimes)}"
    if view.previous_regime is not None:
        regime_line += f" (from {regime_label(view.previous_regime, regimes)})"
    direction = _DIRECTION_TEXT.get(view.strategy_direction)

    lines = [
        "📋 Portfolio Analytics",
        "",
        f"Balance: ${view.balance:,.2f}",
        f"ROI: {view.roi:.2f}% · 7d: {view.roi_change_7d:.2f}% · 30d: {view.roi_change_30d:.2f}%",
        f"Est. yearly PnL: ${view.estimated_yearly_pnl_usd:,.2f}",
    ]
    if view.recommended_period:
        lines.append(f"Recommended period: {view.recommended_period}")
    lines += [
        "",
        f"Sentiment: {view.sentiment.value:g} ({view.sentiment.status})",
        f"\"{view.sentiment.quote}\"",
        regime_line,
        f"In regime for {view.regime_duration.human_readable}",
    ]
    if direction:
        lines.append(f"Strategy: {direction}")
    lines += ["", *_allocation_lines(view.current_allocation)]
    lines.append(
        f"Target: {view.target_allocation.crypto_pct:.0f}% crypto / "
        f"{view.target_allocation.stable_pct:.0f}% stable · Delta: {view.delta:+.2f}"
    )

    if view.yield_window is not None:
        window = view.yield_window.window
        yield_line = (
            f"Avg daily yield ({view.yield_window.label}): "
            f"${window.average_daily_yield_usd:,.2f}"
        )
        if view.yield_confidence.badge:
            yield_line += f" [{view.yield_confidence.badge}]"
        lines += ["", yield_line]
        if window.statistics.outliers_removed:
            lines.append(f"  {window.statistics.outliers_removed} outlier day(s) removed")

    lines += [
        "",
        f"{view.positions} positions · {view.protocols} protocols · {view.chains} chains",
        f"{_now_str()} UTC",
    ]
    return "\n".join(lines)


def _build_drift_alert(view: PortfolioView, config: AppConfig) -> str:
    side = "over" if view.delta > 0 else "under"
    return (
        f"⚖️ Rebalance suggested — crypto {side}-allocated by {abs(view.delta):.2f} pts\n"
        f"\n"
        f"Regime: {regime_label(view.current_regime, config.regimes)} "
        f"(sentiment {view.sentiment.value:g})\n"
        f"Current: {view.current_allocation.crypto_pct:.2f}% crypto\n"
        f"Target: {view.target_allocation.crypto_pct:.2f}% crypto\n"
        f"\n"
        f"{_now_str()} UTC"
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class DashboardService:
    """Fetches payloads from a source and turns them into portfolio views."""

    def __init__(
        self,
        config: AppConfig,
        source: PayloadSource,
        notifiers: Sequence[Notifier] | None = None,
    ) -> None:
        self._config = config
        self._source = source

        if notifiers is None:
            notifiers = []
            if config.notifications.telegram.enabled:
                notifiers.append(TelegramNotifier(config.notifications.telegram))
        self._notifiers: list[Notifier] = list(notifiers)

    async def load_view(self, user_id: str) -> PortfolioView:
        """Fetch all payloads concurrently and assemble the view."""
        landing, sentiment, history, yield_summary = await asyncio.gather(
            self._source.fetch_landing(user_id),
            self._source.fetch_sentiment(),
            self._source.fetch_regime_history(),
            self._source.fetch_yield_summary(user_id),
        )
        view = build_portfolio_view(
            landing, sentiment, history, yield_summary, self._config
        )
        logger.info(
            "View — %s · crypto %.2f%% · target %.2f%% · delta %+.2f · regime %s",
            user_id,
            view.current_allocation.crypto_pct,
            view.target_allocation.crypto_pct,
            view.delta,
            view.current_regime.value,
        )
        return view

    async def load_visitor_view(self) -> PortfolioView:
        sentiment, history = await asyncio.gather(
            self._source.fetch_sentiment(),
            self._source.fetch_regime_history(),
        )
        return build_visitor_view(sentiment, history, self._config)

    def render_report(self, view: PortfolioView) -> str:
        return render_report(view, self._config)

    async def _send_alert(self, message: str, subject: str = "") -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_alert(message, subject=subject)
            except Exception as e:
                logger.error("Notifier send_alert failed: %s", e)

    async def check_and_alert(self, user_id: str) -> PortfolioView:
        """Load the view and alert when drift reaches the rebalance threshold."""
        view = await self.load_view(user_id)

        if view.current_allocation.total_usd <= 0:
            logger.info("No portfolio value for %s; skipping drift check", user_id)
            return view

        threshold = self._config.allocation.rebalance_threshold
        if abs(view.delta) >= threshold:
            await self._send_alert(
                _build_drift_alert(view, self._config),
                subject="⚖️ Allocation drift",
            )
        else:
            logger.info("Drift %.2f below threshold %.2f", view.delta, threshold)
        return view
