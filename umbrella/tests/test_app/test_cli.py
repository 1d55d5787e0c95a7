"""Tests for CLI commands."""

from pathlib import Path
from unittest.mock import patch

import pytest

from umbrella.cli import main
from umbrella.errors import NetworkFailure
from umbrella.ingest.forecast_fetcher import ForecastFetcher, parse_snapshot


@pytest.fixture
def paths(tmp_path: Path) -> list[str]:
    return [
        "--config", str(tmp_path / "config.yaml"),
        "--db", str(tmp_path / "test.db"),
    ]


class TestCLI:
    def test_no_command_returns_1(self, capsys):
        assert main([]) == 1

    def test_config_show(self, paths, capsys):
        assert main([*paths, "config", "show"]) == 0
        assert "open-meteo" in capsys.readouterr().out

    def test_config_set_persists(self, paths, tmp_path: Path, capsys):
        assert main([*paths, "config", "set", "display.hourly_count=6"]) == 0
        assert "6" in capsys.readouterr().out
        assert (tmp_path / "config.yaml").exists()

        main([*paths, "config", "show"])
        assert '"hourly_count": 6' in capsys.readouterr().out

    def test_config_set_invalid(self, paths, capsys):
        assert main([*paths, "config", "set", "notifications.default_hour=30"]) == 1
        assert main([*paths, "config", "set", "no-equals"]) == 1

    def test_regions(self, paths, capsys):
        assert main([*paths, "regions", "--search", "bu"]) == 0
        out = capsys.readouterr().out
        assert "Busan" in out
        assert "Seoul" not in out

    def test_region_set_and_show(self, paths, capsys):
        assert main([*paths, "region", "set", "jeju"]) == 0
        assert "Jeju selected" in capsys.readouterr().out
        assert main([*paths, "region", "show"]) == 0
        assert "33.4996" in capsys.readouterr().out

    def test_region_unknown(self, paths, capsys):
        assert main([*paths, "region", "set", "Atlantis"]) == 1

    def test_region_custom(self, paths, capsys):
        assert main([*paths, "region", "custom", "37.1", "127.2", "--name", "Home"]) == 0
        main([*paths, "region", "show"])
        assert "Home" in capsys.readouterr().out

    def test_time_show_default(self, paths, capsys):
        assert main([*paths, "time", "show"]) == 0
        assert "08:00" in capsys.readouterr().out

    def test_time_set_without_location(self, paths, capsys):
        assert main([*paths, "time", "set", "14:30"]) == 0
        main([*paths, "time", "show"])
        assert "14:30" in capsys.readouterr().out

    def test_time_set_invalid(self, paths, capsys):
        assert main([*paths, "time", "set", "25:00"]) == 1

    def test_forecast_without_location(self, paths, capsys):
        assert main([*paths, "forecast"]) == 1
        assert "No location selected" in capsys.readouterr().out

    def test_forecast_schedules(self, paths, seoul_payload: dict, capsys):
        main([*paths, "region", "set", "Seoul"])
        snap = parse_snapshot(seoul_payload, 37.5665, 126.978)
        with patch.object(ForecastFetcher, "fetch", return_value=snap):
            assert main([*paths, "forecast"]) == 0
        out = capsys.readouterr().out
        assert "Seoul" in out
        assert "Reminder: set for 08:00 daily" in out

        assert main([*paths, "notifications"]) == 0
        assert "08:00 daily" in capsys.readouterr().out

    def test_forecast_json(self, paths, seoul_payload: dict, capsys):
        main([*paths, "region", "set", "Seoul"])
        capsys.readouterr()
        snap = parse_snapshot(seoul_payload, 37.5665, 126.978)
        with patch.object(ForecastFetcher, "fetch", return_value=snap):
            assert main([*paths, "forecast", "--json"]) == 0
        assert '"level": "high"' in capsys.readouterr().out

    def test_forecast_network_failure(self, paths, capsys):
        main([*paths, "region", "set", "Seoul"])
        with patch.object(ForecastFetcher, "fetch", side_effect=NetworkFailure("down")):
            assert main([*paths, "forecast"]) == 1
        assert "retry" in capsys.readouterr().out

    def test_test_notify(self, paths, capsys):
        assert main([*paths, "test-notify"]) == 0
        assert "sent" in capsys.readouterr().out

    def test_test_notify_denied(self, paths, capsys):
        main([*paths, "config", "set", "notifications.enabled=false"])
        assert main([*paths, "test-notify"]) == 1
        assert "not available" in capsys.readouterr().out

    def test_reset(self, paths, capsys):
        main([*paths, "region", "set", "Seoul"])
        assert main([*paths, "reset"]) == 0
        assert main([*paths, "region", "show"]) == 1

    def test_notification_history(self, paths, capsys):
        main([*paths, "test-notify"])
        capsys.readouterr()
        assert main([*paths, "notifications", "--history"]) == 0
        assert "[immediate]" in capsys.readouterr().out
