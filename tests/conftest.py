"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from datetime import datetime, timezone
from pathlib import Path

import pytest

from portfolio_analytics.config import (
    AllocationConfig,
    ApiConfig,
    AppConfig,
    NotificationsConfig,
    RegimeConfig,
    TelegramConfig,
    YieldThresholds,
)
from portfolio_analytics.models import Position


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def regime_config() -> RegimeConfig:
    return RegimeConfig()


@pytest.fixture()
def allocation_config() -> AllocationConfig:
    return AllocationConfig(top_n=2)


@pytest.fixture()
def sample_app_config(allocation_config: AllocationConfig) -> AppConfig:
    return AppConfig(
        regimes=RegimeConfig(),
        allocation=allocation_config,
        yield_thresholds=YieldThresholds(min_preliminary_days=7, min_confidence_days=14),
        api=ApiConfig(base_url="https://api.example.com", timeout=10),
        notifications=NotificationsConfig(
            telegram=TelegramConfig(enabled=True, bot_token="fake-token", chat_id="12345"),
        ),
    )


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2025, 12, 12, 13, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_positions() -> list[Position]:
    return [
        Position("aave-v3", "Aave V3", "ethereum", 4000.0, "BTC"),
        Position("gmx", "GMX", "arbitrum", 2000.0, "BTC"),
        Position("lido", "Lido", "ethereum", 1500.0, "ETH"),
        Position("aave-v3", "Aave V3", "ethereum", 300.0, "LINK"),
        Position("uniswap-v3", "Uniswap V3", "base", 200.0, "AERO"),
        Position("aave-v3", "Aave V3", "ethereum", 1000.0, "USDC"),
        Position("curve", "Curve", "arbitrum", 1000.0, "USDT"),
        Position("aave-v3", "Aave V3", "ethereum", 2500.0, "USDC", category="debt"),
    ]


# ---------------------------------------------------------------------------
# Raw payload fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_landing_payload() -> dict:
    return {
        "net_portfolio_value": 10000.0,
        "portfolio_roi": {
            "recommended_roi": 5.5,
            "recommended_period": "roi_30d",
            "recommended_yearly_roi": 18.2,
            "estimated_yearly_pnl_usd": 1820.0,
            "windows": {
                "roi_30d": {"value": 4.1, "data_points": 30},
                "roi_7d": {"value": 1.2, "data_points": 7},
                "roi_365d": {"value": 22.0, "data_points": 280},
            },
        },
        "positions": [
            {
                "protocol_id": "aave-v3",
                "protocol_name": "Aave V3",
                "chain": "ethereum",
                "total_usd_value": 6000.0,
                "protocol_type": "lending",
                "symbol": "BTC",
            },
            {
                "protocol_id": "curve",
                "protocol_name": "Curve",
                "chain": "arbitrum",
                "total_usd_value": 4000.0,
                "protocol_type": "dex",
                "symbol": "usdc",
            },
            {
                "protocol_id": "aave-v3",
                "protocol_name": "Aave V3",
                "chain": "ethereum",
                "total_usd_value": 1500.0,
                "protocol_type": "debt",
                "symbol": "USDC",
            },
        ],
    }


@pytest.fixture()
def sample_sentiment_payload() -> dict:
    return {
        "value": 72,
        "status": "Greed",
        "quote": {"quote": "The market is a device for transferring money."},
    }


@pytest.fixture()
def sample_regime_history_payload() -> list:
    return [
        {"regime_id": "n", "entered_at": "2025-12-01T00:00:00Z"},
        {"regime_id": "g", "entered_at": "2025-12-10T10:30:00Z"},
    ]


@pytest.fixture()
def sample_yield_payload() -> dict:
    return {
        "windows": {
            "7d": {
                "average_daily_yield_usd": -1.0,
                "median_daily_yield_usd": -0.8,
                "total_yield_usd": -7.0,
                "statistics": {
                    "filtered_days": 7,
                    "positive_days": 2,
                    "negative_days": 5,
                    "outliers_removed": 0,
                },
                "protocol_breakdown": [],
            },
            "30d": {
                "average_daily_yield_usd": 2.0,
                "median_daily_yield_usd": 1.9,
                "total_yield_usd": 40.0,
                "statistics": {
                    "filtered_days": 20,
                    "positive_days": 15,
                    "negative_days": 5,
                    "outliers_removed": 2,
                },
                "protocol_breakdown": [
                    {
                        "protocol": "Aave",
                        "chain": "ethereum",
                        "window": {"total_yield_usd": 30.0, "average_daily_yield_usd": 1.5},
                    }
                ],
            },
        }
    }


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    regimes:
      bands:
        - {regime: ef, upper: 20}
        - {regime: f, upper: 40}
        - {regime: n, upper: 60}
        - {regime: g, upper: 80}
        - {regime: eg, upper: 100}
      fallback: n
      targets:
        n: {crypto: 55, stable: 45}
      quotes:
        eg: "Sell the rip."
    allocation:
      top_n: 4
      stable_symbols: [usdc, dai]
      rebalance_threshold: 7.5
    yield:
      min_preliminary_days: 5
      min_confidence_days: 10
    api:
      base_url: "https://api.example.com"
      timeout: 10
    notifications:
      telegram:
        enabled: true
        bot_token: "tok"
        chat_id: 999
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
