"""CLI entry point for the rain reminder."""

import argparse
import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from umbrella.app import WeatherApp, build_app
from umbrella.config.loader import (
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from umbrella.daemon import ReminderDaemon, daemon_status, stop_daemon
from umbrella.errors import (
    LocationRequired,
    NetworkFailure,
    PermissionDenied,
    SchedulingFailure,
    StorageFailure,
)
from umbrella.models.notification import Denied
from umbrella.models.settings import NotificationTime
from umbrella.reporting.formatters import format_home_json, format_home_text
from umbrella.storage import notification_repo

DEFAULT_CONFIG = "config/umbrella.yaml"
DEFAULT_DB = "data/umbrella.db"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="umbrella",
        description="Daily rain reminder backed by the Open-Meteo forecast",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite DB path")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # forecast
    fc_p = sub.add_parser("forecast", help="Show the forecast and refresh the reminder")
    fc_p.add_argument("--json", action="store_true", help="JSON output")

    # regions
    regions_p = sub.add_parser("regions", help="List built-in regions")
    regions_p.add_argument("--search", default="", help="Filter by name")

    # region set / custom / show
    region_p = sub.add_parser("region", help="Location operations")
    region_sub = region_p.add_subparsers(dest="region_command")
    set_region_p = region_sub.add_parser("set", help="Select a built-in region")
    set_region_p.add_argument("name")
    custom_p = region_sub.add_parser("custom", help="Use explicit coordinates")
    custom_p.add_argument("latitude", type=float)
    custom_p.add_argument("longitude", type=float)
    custom_p.add_argument("--name", default=None)
    region_sub.add_parser("show", help="Show the selected location")

    # time show / set / reset
    time_p = sub.add_parser("time", help="Reminder time operations")
    time_sub = time_p.add_subparsers(dest="time_command")
    time_sub.add_parser("show", help="Show the reminder time")
    time_set_p = time_sub.add_parser("set", help="Set the reminder time")
    time_set_p.add_argument("hhmm", help="HH:MM, 24-hour")
    time_sub.add_parser("reset", help="Reset the reminder time to the default")

    notif_p = sub.add_parser("notifications", help="List registered reminders")
    notif_p.add_argument(
        "--history", action="store_true", help="Show recent deliveries"
    )
    sub.add_parser("test-notify", help="Send a sample notification now")
    sub.add_parser("reset", help="Clear stored settings and reminders")

    # daemon
    daemon_p = sub.add_parser("daemon", help="Run the reminder daemon")
    daemon_p.add_argument("--poll", type=int, default=None, help="Poll seconds")
    daemon_p.add_argument("--refresh", type=int, default=None, help="Refresh minutes")
    daemon_p.add_argument("--stop", action="store_true", help="Stop running daemon")
    daemon_p.add_argument("--status", action="store_true", help="Show daemon status")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    cset_p = config_sub.add_parser("set", help="Set a config value")
    cset_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    if args.command == "config":
        return _cmd_config(config, args)
    if args.command == "daemon" and args.stop:
        return stop_daemon()
    if args.command == "daemon" and args.status:
        return daemon_status()

    app = build_app(config, args.db)
    try:
        return _dispatch(app, args)
    except NetworkFailure as e:
        print(f"Could not load the forecast: {e}. Check your connection and retry.")
        return 1
    except SchedulingFailure as e:
        print(f"Could not update the reminder: {e}. Retry in a moment.")
        return 1
    except StorageFailure as e:
        print(f"Could not save settings: {e}")
        return 1
    except PermissionDenied as e:
        print(f"Notifications are not available: {e}")
        return 1
    finally:
        app.close()


def _dispatch(app: WeatherApp, args) -> int:
    if args.command == "forecast":
        return _cmd_forecast(app, args)
    elif args.command == "regions":
        return _cmd_regions(app, args)
    elif args.command == "region":
        return _cmd_region(app, args)
    elif args.command == "time":
        return _cmd_time(app, args)
    elif args.command == "notifications":
        return _cmd_notifications(app, args)
    elif args.command == "test-notify":
        app.send_test_notification()
        print("Test notification sent")
        return 0
    elif args.command == "reset":
        app.clear_all_data()
        print("All settings cleared")
        return 0
    elif args.command == "daemon":
        daemon = ReminderDaemon(
            app,
            poll_seconds=args.poll or app.config.daemon.poll_seconds,
            refresh_minutes=args.refresh or app.config.daemon.refresh_minutes,
        )
        daemon.start()
        return 0
    return 1


def _cmd_forecast(app: WeatherApp, args) -> int:
    try:
        view = app.load_weather()
    except LocationRequired:
        print("No location selected. Pick one first:")
        print("  umbrella regions")
        print("  umbrella region set NAME")
        return 1

    if args.json:
        print(format_home_json(view))
    else:
        now = _forecast_local_now(view.snapshot.timezone)
        print(format_home_text(view, now, app.config.display.hourly_count))
    return 0


def _cmd_regions(app: WeatherApp, args) -> int:
    regions = app.search_regions(args.search)
    if not regions:
        print(f"No regions match {args.search!r}")
        return 1
    for r in regions:
        print(f"📍 {r.name:<10} {r.latitude:.2f}, {r.longitude:.2f}")
    return 0


def _cmd_region(app: WeatherApp, args) -> int:
    if args.region_command == "set":
        try:
            location = app.select_region(args.name)
        except KeyError:
            print(f"Unknown region: {args.name} (see `umbrella regions`)")
            return 1
        print(f"{location.display_name} selected")
        return 0
    elif args.region_command == "custom":
        kwargs = {"name": args.name} if args.name else {}
        try:
            location = app.set_custom_location(args.latitude, args.longitude, **kwargs)
        except ValueError as e:
            print(f"Error: {e}")
            return 1
        print(f"{location.display_name} set ({location.latitude}, {location.longitude})")
        return 0
    elif args.region_command == "show":
        location = app.current_location()
        if location is None:
            print("No location selected")
            return 1
        print(
            f"📍 {location.display_name} "
            f"({location.latitude:.4f}, {location.longitude:.4f})"
        )
        return 0
    print("Use: region set NAME | region custom LAT LON | region show")
    return 1


def _cmd_time(app: WeatherApp, args) -> int:
    if args.time_command == "show":
        print(f"Reminder time: {app.notification_time().label()}")
        return 0
    elif args.time_command == "set":
        try:
            time = NotificationTime.parse(args.hhmm)
        except ValueError as e:
            print(f"Error: {e}")
            return 1
        scheduled = app.update_notification_time(time.hour, time.minute)
        print(f"Reminder time set to {time.label()}")
        _print_reminder_state(scheduled)
        return 0
    elif args.time_command == "reset":
        scheduled = app.reset_settings()
        print(f"Reminder time reset to {app.notification_time().label()}")
        _print_reminder_state(scheduled)
        return 0
    print("Use: time show | time set HH:MM | time reset")
    return 1


def _cmd_notifications(app: WeatherApp, args) -> int:
    if args.history:
        for row in notification_repo.get_recent_deliveries(app.conn):
            print(f"{row['delivered_at']} [{row['kind']}] {row['title']} {row['body']}")
        return 0
    permission = app.scheduler.request_permission()
    if isinstance(permission, Denied):
        print(f"Notifications unavailable: {permission.reason}")
    scheduled = app.scheduler.list_scheduled()
    if not scheduled:
        print("No reminders registered")
        return 0
    for n in scheduled:
        fired = f" (last fired {n.last_fired_on})" if n.last_fired_on else ""
        print(f"{n.hour:02d}:{n.minute:02d} daily — {n.title} {n.body}{fired}")
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
        except (KeyError, ValueError, ValidationError) as e:
            print(f"Error: {e}")
            return 1
        save_config(new_config, args.config)
        print(f"Set {key.strip()} = {get_config_value(new_config, key.strip())}")
        return 0
    print("Use: config show | config set key=value")
    return 1


def _print_reminder_state(scheduled: bool) -> None:
    print("Rain expected: reminder scheduled" if scheduled else "No reminder needed for now")


def _forecast_local_now(timezone: str) -> datetime:
    """Wall-clock time in the forecast's zone, naive like the API timestamps."""
    if not timezone:
        return datetime.now()
    try:
        return datetime.now(ZoneInfo(timezone)).replace(tzinfo=None)
    except (ZoneInfoNotFoundError, ValueError):
        return datetime.now()
