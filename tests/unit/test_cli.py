"""Unit tests for CLI argument parsing and JSON output."""
from __future__ import annotations

import json

from portfolio_analytics.cli import build_parser, view_to_json
from portfolio_analytics.config import AppConfig
from portfolio_analytics.services.dashboard import build_visitor_view


class TestBuildParser:
    def test_snapshot_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["snapshot", "user-1"])
        assert args.command == "snapshot"
        assert args.user_id == "user-1"
        assert args.json is False

    def test_snapshot_json_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["snapshot", "user-1", "--json"])
        assert args.json is True

    def test_analyze_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["analyze", "/tmp/payloads", "--visitor"])
        assert args.command == "analyze"
        assert args.directory == "/tmp/payloads"
        assert args.visitor is True

    def test_check_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["check", "user-1"])
        assert args.command == "check"
        assert args.user_id == "user-1"

    def test_config_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["--config", "/tmp/c.yaml", "check", "u"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["--log-level", "DEBUG", "check", "u"])
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        parser = build_parser()
        args = parser.parse_args([])
        assert args.command is None


class TestViewToJson:
    def test_serializes_enums_as_values(self) -> None:
        view = build_visitor_view(None, None, AppConfig())
        data = json.loads(view_to_json(view))
        assert data["current_regime"] == "n"
        assert data["strategy_direction"] == "default"
        assert data["sentiment"]["status"] == "Neutral"
        assert data["recommended_period"] == "30d"
        assert data["current_allocation"]["crypto_pct"] == 0.0
