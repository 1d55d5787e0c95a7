"""Reminder daemon: refreshes the forecast on an interval and fires due reminders.

Stands in for the platform notification service: registered reminders
only reach anyone while this process runs.

Usage:
    umbrella daemon                   # poll every 30s, refresh hourly
    umbrella daemon --refresh 30      # refresh forecast every 30 minutes
    umbrella daemon --stop            # stop running daemon
"""

import json
import logging
import os
import signal
import sys
import time
from datetime import UTC, datetime
from pathlib import Path

from umbrella.app import WeatherApp
from umbrella.errors import LocationRequired, UmbrellaError

logger = logging.getLogger(__name__)

MAX_BACKOFF = 3600  # 1 hour max between failed refreshes
PID_DIR = Path("data")
PID_FILE = PID_DIR / "daemon.pid"
STATE_FILE = PID_DIR / "daemon_state.json"
LOG_DIR = Path("logs")


class ReminderDaemon:
    """Runs refresh and fire cycles in a loop with signal handling."""

    def __init__(
        self,
        app: WeatherApp,
        poll_seconds: int = 30,
        refresh_minutes: int = 60,
    ):
        self.app = app
        self.poll_seconds = poll_seconds
        self.refresh_seconds = refresh_minutes * 60
        self._running = False
        self._consecutive_failures = 0
        self._total_refreshes = 0
        self._total_fired = 0
        self._next_refresh = 0.0
        self._started_at: str | None = None
        self._file_handler: logging.Handler | None = None

    def start(self) -> None:
        """Start the daemon loop."""
        self._check_not_already_running()
        self._write_pid()
        self._setup_signals()
        self._setup_file_log()
        self._running = True
        self._started_at = datetime.now(UTC).isoformat()

        logger.info(
            "Daemon started — poll=%ds refresh=%ds pid=%d",
            self.poll_seconds, self.refresh_seconds, os.getpid(),
        )
        print(f"🔄 Reminder daemon started (pid {os.getpid()})")
        print("   Stop: umbrella daemon --stop")

        try:
            self._loop()
        except KeyboardInterrupt:
            logger.info("Daemon interrupted by keyboard")
        finally:
            self._cleanup()

    def _loop(self) -> None:
        while self._running:
            self.run_once()
            self._save_state()

            # Sleep in 1-second increments so we can respond to signals
            sleep_until = time.monotonic() + self.poll_seconds
            while self._running and time.monotonic() < sleep_until:
                time.sleep(1)

    def run_once(self, now: datetime | None = None) -> None:
        """One cycle: refresh the forecast if due, then fire due reminders."""
        if time.monotonic() >= self._next_refresh:
            if self._refresh():
                self._consecutive_failures = 0
                wait = self.refresh_seconds
            else:
                self._consecutive_failures += 1
                wait = min(
                    self.poll_seconds * (2 ** self._consecutive_failures),
                    MAX_BACKOFF,
                )
                logger.warning(
                    "Refresh failed (%d consecutive), retrying in %ds",
                    self._consecutive_failures, wait,
                )
            self._next_refresh = time.monotonic() + wait

        self._fire_due(now or datetime.now())

    def _refresh(self) -> bool:
        """Reload the forecast, which also reschedules the reminder."""
        self._total_refreshes += 1
        try:
            view = self.app.load_weather()
        except LocationRequired:
            logger.warning("No location selected; run `umbrella region set NAME`")
            return False
        except UmbrellaError:
            logger.exception("Forecast refresh #%d failed", self._total_refreshes)
            return False
        logger.info(
            "Refresh #%d OK — advisory %s, reminder %s",
            self._total_refreshes,
            view.decision.level,
            "scheduled" if view.reminder_scheduled else "cleared",
        )
        return True

    def _fire_due(self, now: datetime) -> int:
        """Deliver reminders whose time has come. Returns how many fired."""
        fired = 0
        for n in self.app.scheduler.due(now):
            try:
                self.app.scheduler.fire(n, now)
            except UmbrellaError:
                logger.exception("Delivery of reminder %d failed", n.id)
                continue
            fired += 1
        self._total_fired += fired
        return fired

    def _setup_signals(self) -> None:
        """Handle SIGTERM and SIGINT for graceful shutdown."""
        def _stop(signum: int, frame: object) -> None:
            sig_name = signal.Signals(signum).name
            logger.info("Received %s, shutting down gracefully...", sig_name)
            self._running = False

        signal.signal(signal.SIGTERM, _stop)
        signal.signal(signal.SIGINT, _stop)

    def _setup_file_log(self) -> None:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(LOG_DIR / "daemon.log")
        handler.setLevel(logging.INFO)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logging.getLogger().addHandler(handler)
        self._file_handler = handler

    def _check_not_already_running(self) -> None:
        """Prevent duplicate daemons."""
        if PID_FILE.exists():
            try:
                pid = int(PID_FILE.read_text().strip())
                os.kill(pid, 0)
                print(f"❌ Daemon already running (pid {pid}). Stop it first:")
                print("   umbrella daemon --stop")
                sys.exit(1)
            except (ProcessLookupError, ValueError):
                # Stale PID file, process is dead
                PID_FILE.unlink(missing_ok=True)
            except PermissionError:
                print(f"❌ Daemon may be running (pid {pid}), can't verify.")
                sys.exit(1)

    def _write_pid(self) -> None:
        PID_DIR.mkdir(parents=True, exist_ok=True)
        PID_FILE.write_text(str(os.getpid()))

    def _save_state(self) -> None:
        """Persist daemon stats for status reporting."""
        PID_DIR.mkdir(parents=True, exist_ok=True)
        state = {
            "pid": os.getpid(),
            "started_at": self._started_at,
            "poll_seconds": self.poll_seconds,
            "refresh_seconds": self.refresh_seconds,
            "total_refreshes": self._total_refreshes,
            "total_fired": self._total_fired,
            "consecutive_failures": self._consecutive_failures,
            "last_update": datetime.now(UTC).isoformat(),
        }
        STATE_FILE.write_text(json.dumps(state, indent=2))

    def _cleanup(self) -> None:
        PID_FILE.unlink(missing_ok=True)
        self._save_state()
        logger.info(
            "Daemon stopped — %d refreshes, %d reminders fired",
            self._total_refreshes, self._total_fired,
        )
        if self._file_handler is not None:
            logging.getLogger().removeHandler(self._file_handler)
            self._file_handler.close()
        print(
            f"⏹️  Daemon stopped — {self._total_refreshes} refreshes, "
            f"{self._total_fired} reminders fired"
        )


def stop_daemon() -> int:
    """Stop a running daemon by sending SIGTERM."""
    if not PID_FILE.exists():
        print("No daemon running (no PID file found)")
        return 1

    try:
        pid = int(PID_FILE.read_text().strip())
    except ValueError:
        print("Corrupt PID file, removing")
        PID_FILE.unlink(missing_ok=True)
        return 1

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        print(f"Daemon not running (stale pid {pid}), cleaning up")
        PID_FILE.unlink(missing_ok=True)
        STATE_FILE.unlink(missing_ok=True)
        return 0

    print(f"Stopping daemon (pid {pid})...")
    os.kill(pid, signal.SIGTERM)

    for _ in range(30):
        time.sleep(1)
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            print("✅ Daemon stopped")
            PID_FILE.unlink(missing_ok=True)
            return 0

    print("⚠️  Daemon didn't stop in 30s, sending SIGKILL")
    os.kill(pid, signal.SIGKILL)
    PID_FILE.unlink(missing_ok=True)
    return 0


def daemon_status() -> int:
    """Print daemon status from state file."""
    if not STATE_FILE.exists():
        print("No daemon state found")
        return 1

    state = json.loads(STATE_FILE.read_text())
    pid = state.get("pid", "?")

    running = False
    try:
        os.kill(int(pid), 0)
        running = True
    except (ProcessLookupError, ValueError, TypeError):
        pass

    status_icon = "🟢" if running else "🔴"
    print(f"{status_icon} Daemon {'running' if running else 'stopped'}")
    print(f"  PID: {pid}")
    print(f"  Started: {state.get('started_at', '?')}")
    print(f"  Refreshes: {state.get('total_refreshes', 0)}")
    print(f"  Reminders fired: {state.get('total_fired', 0)}")
    print(f"  Consecutive failures: {state.get('consecutive_failures', 0)}")
    print(f"  Last update: {state.get('last_update', '?')}")
    return 0
