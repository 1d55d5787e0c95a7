"""Tests for the reminder daemon."""

import json
import os
import sqlite3
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from umbrella.app import WeatherApp
from umbrella.daemon import ReminderDaemon, daemon_status, stop_daemon
from umbrella.errors import NetworkFailure, SchedulingFailure
from umbrella.ingest.forecast_fetcher import ForecastFetcher
from umbrella.ingest.open_meteo_client import OpenMeteoClient
from umbrella.notify.delivery import LogDelivery


@pytest.fixture
def tmp_data(tmp_path, monkeypatch):
    """Redirect PID/state files to temp directory."""
    pid_file = tmp_path / "daemon.pid"
    state_file = tmp_path / "daemon_state.json"
    monkeypatch.setattr("umbrella.daemon.PID_FILE", pid_file)
    monkeypatch.setattr("umbrella.daemon.PID_DIR", tmp_path)
    monkeypatch.setattr("umbrella.daemon.STATE_FILE", state_file)
    monkeypatch.setattr("umbrella.daemon.LOG_DIR", tmp_path / "logs")
    return {"pid": pid_file, "state": state_file, "dir": tmp_path}


class TestReminderDaemon:
    def test_start_writes_state(self, tmp_data, app: WeatherApp):
        daemon = ReminderDaemon(app, poll_seconds=1)
        with patch.object(daemon, "_loop"), patch.object(daemon, "_setup_signals"):
            daemon.start()
        assert tmp_data["state"].exists()
        assert not tmp_data["pid"].exists()
        assert (tmp_data["dir"] / "logs" / "daemon.log").exists()

    def test_prevents_duplicate_start(self, tmp_data, app: WeatherApp):
        tmp_data["pid"].write_text(str(os.getpid()))
        with pytest.raises(SystemExit):
            ReminderDaemon(app)._check_not_already_running()

    def test_cleans_stale_pid(self, tmp_data, app: WeatherApp):
        tmp_data["pid"].write_text("999999999")
        ReminderDaemon(app)._check_not_already_running()
        assert not tmp_data["pid"].exists()

    def test_refresh_schedules_reminder(
        self, tmp_data, app: WeatherApp, mock_fetcher: MagicMock, make_snapshot
    ):
        app.select_region("Seoul")
        mock_fetcher.fetch.return_value = make_snapshot(80, 5.2)

        daemon = ReminderDaemon(app)
        daemon.run_once(now=datetime(2026, 10, 19, 6, 0))
        assert len(app.scheduler.list_scheduled()) == 1
        assert daemon._consecutive_failures == 0

    def test_refresh_not_repeated_within_interval(
        self, tmp_data, app: WeatherApp, mock_fetcher: MagicMock, make_snapshot
    ):
        app.select_region("Seoul")
        mock_fetcher.fetch.return_value = make_snapshot(80, 5.2)

        daemon = ReminderDaemon(app, refresh_minutes=60)
        daemon.run_once(now=datetime(2026, 10, 19, 6, 0))
        daemon.run_once(now=datetime(2026, 10, 19, 6, 1))
        assert mock_fetcher.fetch.call_count == 1

    def test_refresh_failure_backs_off(
        self, tmp_data, app: WeatherApp, mock_fetcher: MagicMock
    ):
        app.select_region("Seoul")
        mock_fetcher.fetch.side_effect = NetworkFailure("down")

        daemon = ReminderDaemon(app)
        daemon.run_once(now=datetime(2026, 10, 19, 6, 0))
        assert daemon._consecutive_failures == 1

    def test_malformed_payload_is_refresh_failure(self, tmp_data, app: WeatherApp):
        app.select_region("Seoul")
        client = MagicMock(spec=OpenMeteoClient)
        client.get_forecast.return_value = {
            "daily": {"time": ["2026-10-19"]},
            "hourly": ["x"],
        }
        app.fetcher = ForecastFetcher(client)

        daemon = ReminderDaemon(app)
        daemon.run_once(now=datetime(2026, 10, 19, 6, 0))
        assert daemon._consecutive_failures == 1

    def test_no_location_is_failure(self, tmp_data, app: WeatherApp):
        daemon = ReminderDaemon(app)
        daemon.run_once(now=datetime(2026, 10, 19, 6, 0))
        assert daemon._consecutive_failures == 1

    def test_fires_once_per_day(
        self, tmp_data, app: WeatherApp, mock_fetcher: MagicMock, make_snapshot
    ):
        app.select_region("Seoul")
        mock_fetcher.fetch.return_value = make_snapshot(80, 5.2)
        app.load_weather()

        delivery = MagicMock(spec=LogDelivery)
        app.scheduler.delivery = delivery
        daemon = ReminderDaemon(app)

        assert daemon._fire_due(datetime(2026, 10, 19, 7, 59)) == 0
        assert daemon._fire_due(datetime(2026, 10, 19, 8, 0, 5)) == 1
        assert daemon._fire_due(datetime(2026, 10, 19, 8, 1)) == 0
        assert delivery.deliver.call_count == 1

    def test_reschedule_does_not_refire_same_day(
        self, tmp_data, app: WeatherApp, mock_fetcher: MagicMock, make_snapshot
    ):
        app.select_region("Seoul")
        mock_fetcher.fetch.return_value = make_snapshot(80, 5.2)
        app.load_weather()
        daemon = ReminderDaemon(app)

        assert daemon._fire_due(datetime(2026, 10, 19, 8, 0)) == 1
        app.load_weather()  # cancel + re-register clears last_fired_on
        assert daemon._fire_due(datetime(2026, 10, 19, 8, 2)) == 0

    def test_restart_does_not_refire_same_day(
        self, tmp_data, app: WeatherApp, mock_fetcher: MagicMock, make_snapshot
    ):
        app.select_region("Seoul")
        mock_fetcher.fetch.return_value = make_snapshot(80, 5.2)
        delivery = MagicMock(spec=LogDelivery)
        app.scheduler.delivery = delivery

        first = ReminderDaemon(app)
        first.run_once(now=datetime(2026, 10, 19, 8, 1))
        first.run_once(now=datetime(2026, 10, 19, 8, 1, 30))

        # A new process refreshes first, which re-registers the trigger
        second = ReminderDaemon(app)
        second.run_once(now=datetime(2026, 10, 19, 8, 2))

        assert delivery.deliver.call_count == 1
        assert mock_fetcher.fetch.call_count == 2
        assert second._fire_due(datetime(2026, 10, 20, 8, 0)) == 1

    def test_mark_fired_failure_does_not_stop_polling(
        self, tmp_data, app: WeatherApp, mock_fetcher: MagicMock, make_snapshot
    ):
        app.select_region("Seoul")
        mock_fetcher.fetch.return_value = make_snapshot(80, 5.2)
        app.load_weather()
        app.scheduler.delivery = MagicMock(spec=LogDelivery)
        daemon = ReminderDaemon(app)

        with patch(
            "umbrella.storage.notification_repo.mark_fired",
            side_effect=sqlite3.OperationalError("disk I/O error"),
        ):
            assert daemon._fire_due(datetime(2026, 10, 19, 8, 0)) == 0

    def test_delivery_failure_retried_next_poll(
        self, tmp_data, app: WeatherApp, mock_fetcher: MagicMock, make_snapshot
    ):
        app.select_region("Seoul")
        mock_fetcher.fetch.return_value = make_snapshot(80, 5.2)
        app.load_weather()

        delivery = MagicMock(spec=LogDelivery)
        delivery.deliver.side_effect = [SchedulingFailure("down"), None]
        app.scheduler.delivery = delivery
        daemon = ReminderDaemon(app)

        assert daemon._fire_due(datetime(2026, 10, 19, 8, 0)) == 0
        assert daemon._fire_due(datetime(2026, 10, 19, 8, 1)) == 1


class TestStopAndStatus:
    def test_stop_without_pid(self, tmp_data, capsys):
        assert stop_daemon() == 1

    def test_stop_stale_pid(self, tmp_data, capsys):
        tmp_data["pid"].write_text("999999999")
        assert stop_daemon() == 0
        assert not tmp_data["pid"].exists()

    def test_status_without_state(self, tmp_data, capsys):
        assert daemon_status() == 1

    def test_status_with_state(self, tmp_data, capsys):
        tmp_data["state"].write_text(
            json.dumps({"pid": 999999999, "total_refreshes": 4, "total_fired": 2})
        )
        assert daemon_status() == 0
        out = capsys.readouterr().out
        assert "stopped" in out
        assert "Refreshes: 4" in out
