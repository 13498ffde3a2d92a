"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .models import REGIME_ORDER, RegimeId, TargetAllocation

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_BANDS: tuple[tuple[RegimeId, float], ...] = (
    (RegimeId.EXTREME_FEAR, 25.0),
    (RegimeId.FEAR, 45.0),
    (RegimeId.NEUTRAL, 54.0),
    (RegimeId.GREED, 75.0),
    (RegimeId.EXTREME_GREED, 100.0),
)

DEFAULT_LABELS: dict[RegimeId, str] = {
    RegimeId.EXTREME_FEAR: "Extreme Fear",
    RegimeId.FEAR: "Fear",
    RegimeId.NEUTRAL: "Neutral",
    RegimeId.GREED: "Greed",
    RegimeId.EXTREME_GREED: "Extreme Greed",
}

# Crypto share is spot + LP of each regime's default (else fromLeft) strategy outcome.
DEFAULT_TARGETS: dict[RegimeId, TargetAllocation] = {
    RegimeId.EXTREME_FEAR: TargetAllocation(crypto_pct=70.0, stable_pct=30.0),
    RegimeId.FEAR: TargetAllocation(crypto_pct=70.0, stable_pct=30.0),
    RegimeId.NEUTRAL: TargetAllocation(crypto_pct=70.0, stable_pct=30.0),
    RegimeId.GREED: TargetAllocation(crypto_pct=70.0, stable_pct=30.0),
    RegimeId.EXTREME_GREED: TargetAllocation(crypto_pct=30.0, stable_pct=70.0),
}

DEFAULT_QUOTES: dict[RegimeId, str] = {
    RegimeId.EXTREME_FEAR: "Be greedy when others are fearful.",
    RegimeId.FEAR: "It was always my sitting that made the big money.",
    RegimeId.NEUTRAL: "It was always my sitting that made the big money.",
    RegimeId.GREED: "Nobody ever went broke taking a profit.",
    RegimeId.EXTREME_GREED: "Be fearful when others are greedy.",
}

DEFAULT_STABLE_SYMBOLS: frozenset[str] = frozenset(
    {
        "USDC", "USDT", "DAI", "FRAX", "LUSD", "TUSD", "USDE",
        "PYUSD", "GHO", "CRVUSD", "USDS", "FDUSD", "BUSD",
    }
)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegimeBand:
    """Sentiment values up to and including ``upper`` map to ``regime``."""

    regime: RegimeId
    upper: float


@dataclass(frozen=True)
class RegimeConfig:
    bands: tuple[RegimeBand, ...] = tuple(
        RegimeBand(regime=r, upper=u) for r, u in DEFAULT_BANDS
    )
    fallback: RegimeId = RegimeId.NEUTRAL
    labels: dict[RegimeId, str] = field(default_factory=lambda: dict(DEFAULT_LABELS))
    targets: dict[RegimeId, TargetAllocation] = field(
        default_factory=lambda: dict(DEFAULT_TARGETS)
    )
    quotes: dict[RegimeId, str] = field(default_factory=lambda: dict(DEFAULT_QUOTES))


@dataclass(frozen=True)
class AllocationConfig:
    top_n: int = 3
    stable_symbols: frozenset[str] = DEFAULT_STABLE_SYMBOLS
    debt_types: frozenset[str] = frozenset({"debt", "borrow", "borrowing"})
    rebalance_threshold: float = 5.0


@dataclass(frozen=True)
class YieldThresholds:
    min_preliminary_days: int = 7
    min_confidence_days: int = 14


@dataclass(frozen=True)
class ApiConfig:
    base_url: str = "http://localhost:8001"
    timeout: int = 30
    regime_history_limit: int = 2


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    regimes: RegimeConfig = field(default_factory=RegimeConfig)
    allocation: AllocationConfig = field(default_factory=AllocationConfig)
    yield_thresholds: YieldThresholds = field(default_factory=YieldThresholds)
    api: ApiConfig = field(default_factory=ApiConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _regime_id(raw: Any) -> RegimeId:
    try:
        return RegimeId(str(raw))
    except ValueError:
        raise ValueError(f"Unknown regime id '{raw}'") from None


def _build_regimes(raw: dict[str, Any]) -> RegimeConfig:
    defaults = RegimeConfig()

    bands = defaults.bands
    if "bands" in raw:
        bands = tuple(
            RegimeBand(regime=_regime_id(b.get("regime")), upper=float(b.get("upper", 0)))
            for b in raw["bands"]
        )

    labels = dict(defaults.labels)
    for key, label in raw.get("labels", {}).items():
        labels[_regime_id(key)] = str(label)

    targets = dict(defaults.targets)
    for key, t in raw.get("targets", {}).items():
        targets[_regime_id(key)] = TargetAllocation(
            crypto_pct=float(t.get("crypto", 0.0)),
            stable_pct=float(t.get("stable", 0.0)),
        )

    quotes = dict(defaults.quotes)
    for key, quote in raw.get("quotes", {}).items():
        quotes[_regime_id(key)] = str(quote)

    return RegimeConfig(
        bands=bands,
        fallback=_regime_id(raw.get("fallback", defaults.fallback.value)),
        labels=labels,
        targets=targets,
        quotes=quotes,
    )


def _build_allocation(raw: dict[str, Any]) -> AllocationConfig:
    defaults = AllocationConfig()
    stable_symbols = defaults.stable_symbols
    if "stable_symbols" in raw:
        stable_symbols = frozenset(str(s).upper() for s in raw["stable_symbols"])
    debt_types = defaults.debt_types
    if "debt_types" in raw:
        debt_types = frozenset(str(t).lower() for t in raw["debt_types"])
    return AllocationConfig(
        top_n=int(raw.get("top_n", defaults.top_n)),
        stable_symbols=stable_symbols,
        debt_types=debt_types,
        rebalance_threshold=float(
            raw.get("rebalance_threshold", defaults.rebalance_threshold)
        ),
    )


def _build_yield(raw: dict[str, Any]) -> YieldThresholds:
    return YieldThresholds(
        min_preliminary_days=int(raw.get("min_preliminary_days", 7)),
        min_confidence_days=int(raw.get("min_confidence_days", 14)),
    )


def _build_api(raw: dict[str, Any]) -> ApiConfig:
    return ApiConfig(
        base_url=raw.get("base_url") or ApiConfig.base_url,
        timeout=int(raw.get("timeout", 30)),
        regime_history_limit=int(raw.get("regime_history_limit", 2)),
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            bot_token=tg.get("bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        regimes=_build_regimes(raw.get("regimes", {})),
        allocation=_build_allocation(raw.get("allocation", {})),
        yield_thresholds=_build_yield(raw.get("yield", {})),
        api=_build_api(raw.get("api", {})),
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    regimes = cfg.regimes
    if not regimes.bands:
        raise ValueError("At least one regime band must be configured")

    uppers = [b.upper for b in regimes.bands]
    if any(later <= earlier for earlier, later in zip(uppers, uppers[1:])):
        raise ValueError("Regime band upper bounds must be strictly increasing")
    if uppers[-1] != 100.0:
        raise ValueError("The last regime band must end at 100")

    order = [REGIME_ORDER.index(b.regime) for b in regimes.bands]
    if any(later <= earlier for earlier, later in zip(order, order[1:])):
        raise ValueError("Regime bands must follow the fear → greed order")

    for regime in {b.regime for b in regimes.bands} | {regimes.fallback}:
        target = regimes.targets.get(regime)
        if target is None:
            raise ValueError(f"Regime '{regime.value}' has no target allocation")
        if abs(target.crypto_pct + target.stable_pct - 100.0) > 1e-6:
            raise ValueError(
                f"Target allocation for regime '{regime.value}' must sum to 100"
            )

    if cfg.allocation.top_n < 1:
        raise ValueError("allocation.top_n must be at least 1")

    thresholds = cfg.yield_thresholds
    if thresholds.min_preliminary_days > thresholds.min_confidence_days:
        raise ValueError(
            "yield.min_preliminary_days must not exceed yield.min_confidence_days"
        )
