"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RegimeId(str, Enum):
    """Market regimes, ordered along the risk axis (fear → greed)."""

    EXTREME_FEAR = "ef"
    FEAR = "f"
    NEUTRAL = "n"
    GREED = "g"
    EXTREME_GREED = "eg"


REGIME_ORDER: tuple[RegimeId, ...] = tuple(RegimeId)


class StrategyDirection(str, Enum):
    FROM_LEFT = "fromLeft"
    FROM_RIGHT = "fromRight"
    DEFAULT = "default"


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Position:
    """Single protocol position as reported by the portfolio API."""

    protocol_id: str
    protocol_name: str
    chain: str
    usd_value: float
    symbol: str
    category: str = "asset"


@dataclass(frozen=True)
class Constituent:
    symbol: str
    value_usd: float
    weight_pct: float
    chain: str = ""
    protocol: str = ""


@dataclass(frozen=True)
class AllocationSnapshot:
    """Crypto/stable split of a portfolio.

    ``crypto_pct + stable_pct`` is 100 whenever the portfolio holds value,
    and both are 0 for an empty portfolio.
    """

    crypto_pct: float = 0.0
    stable_pct: float = 0.0
    crypto_constituents: tuple[Constituent, ...] = ()
    stable_constituents: tuple[Constituent, ...] = ()
    simplified_crypto: tuple[Constituent, ...] = ()
    crypto_total_usd: float = 0.0
    stable_total_usd: float = 0.0

    @property
    def total_usd(self) -> float:
        return self.crypto_total_usd + self.stable_total_usd


@dataclass(frozen=True)
class TargetAllocation:
    crypto_pct: float
    stable_pct: float


# ---------------------------------------------------------------------------
# Sentiment & regime
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SentimentReading:
    value: float
    status: str
    quote: str
    regime: RegimeId = RegimeId.NEUTRAL


@dataclass(frozen=True)
class RegimeHistoryEntry:
    regime_id: RegimeId
    entered_at: datetime


@dataclass(frozen=True)
class DurationInfo:
    """Elapsed time in the current regime."""

    hours: int = 0
    days: int = 0
    human_readable: str = "0 hours"


@dataclass(frozen=True)
class StrategyInfo:
    previous_regime: RegimeId | None = None
    strategy_direction: StrategyDirection = StrategyDirection.DEFAULT
    regime_duration: DurationInfo = field(default_factory=DurationInfo)


# ---------------------------------------------------------------------------
# Yield & ROI
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class YieldStatistics:
    filtered_days: int = 0
    positive_days: int = 0
    negative_days: int = 0
    outliers_removed: int = 0


@dataclass(frozen=True)
class ProtocolYield:
    protocol: str
    chain: str
    total_yield_usd: float = 0.0
    average_daily_yield_usd: float = 0.0


@dataclass(frozen=True)
class YieldWindow:
    key: str
    average_daily_yield_usd: float = 0.0
    median_daily_yield_usd: float = 0.0
    total_yield_usd: float = 0.0
    statistics: YieldStatistics = field(default_factory=YieldStatistics)
    protocol_breakdown: tuple[ProtocolYield, ...] = ()


@dataclass(frozen=True)
class SelectedYieldWindow:
    key: str
    window: YieldWindow
    label: str


@dataclass(frozen=True)
class YieldConfidence:
    status: str
    days_with_data: int = 0
    badge: str | None = None
    days_until_confident: int = 0


@dataclass(frozen=True)
class RoiWindow:
    key: str
    value: float = 0.0
    data_points: int = 0


@dataclass(frozen=True)
class RankedRoiWindow:
    key: str
    label: str
    value: float
    data_points: int


@dataclass(frozen=True)
class RoiSummary:
    """Portfolio-level ROI block of the landing payload."""

    recommended_roi: float = 0.0
    recommended_yearly_roi: float = 0.0
    estimated_yearly_pnl_usd: float = 0.0
    recommended_period: str | None = None
    recommended_roi_period: str | None = None
    windows: dict[str, RoiWindow] = field(default_factory=dict)
    legacy_windows: dict[str, RoiWindow] = field(default_factory=dict)


@dataclass(frozen=True)
class LandingData:
    net_portfolio_value: float = 0.0
    roi: RoiSummary = field(default_factory=RoiSummary)
    positions: tuple[Position, ...] = ()


# ---------------------------------------------------------------------------
# Assembled output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PortfolioView:
    """Everything the dashboard displays, recomputed on every load."""

    balance: float
    roi: float
    roi_change_7d: float
    roi_change_30d: float
    estimated_yearly_pnl_usd: float
    sentiment: SentimentReading
    current_regime: RegimeId
    previous_regime: RegimeId | None
    strategy_direction: StrategyDirection
    regime_duration: DurationInfo
    current_allocation: AllocationSnapshot
    target_allocation: TargetAllocation
    delta: float
    positions: int = 0
    protocols: int = 0
    chains: int = 0
    recommended_period: str | None = None
    roi_windows: tuple[RankedRoiWindow, ...] = ()
    yield_window: SelectedYieldWindow | None = None
    yield_confidence: YieldConfidence = field(
        default_factory=lambda: YieldConfidence(status="no_data")
    )
