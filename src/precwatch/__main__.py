"""Command-line entry point for the console log monitor."""
from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from pathlib import Path

from .actions import DemoHook
from .classifier import LineClassifier
from .config import ConfigError, load_config
from .dispatch import CommandDispatcher
from .monitor import ConsoleMonitor
from .steam import SteamNotFoundError, locate_console_log
from .tail import LogWatcher
from .throttle import Throttler


def main() -> None:
    parser = argparse.ArgumentParser(description="Start and stop demo recording from the TF2 console log")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to an optional YAML configuration file",
    )
    parser.add_argument(
        "--log-path",
        default=None,
        help="console.log to watch (default: located through the Steam installation)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    logging.info("P-REC watcher started")

    try:
        app_config = load_config(Path(args.config) if args.config else None)
        if args.log_path:
            log_path = Path(args.log_path).expanduser()
        elif app_config.watch.log_path is not None:
            log_path = app_config.watch.log_path
        else:
            log_path = locate_console_log()
        demo_hook = DemoHook.from_config(app_config.demo_hook, log_dir=log_path.parent)
    except (ConfigError, SteamNotFoundError, RuntimeError) as exc:
        logging.error("%s", exc)
        raise SystemExit(2) from exc

    watcher = LogWatcher(
        log_path,
        poll_interval=app_config.watch.poll_interval,
        max_poll_interval=app_config.watch.max_poll_interval,
        start_at_end=app_config.watch.start_at_end,
    )
    monitor = ConsoleMonitor(
        watcher,
        LineClassifier(log_path.parent, demo_hook),
        Throttler(app_config.debounce_window),
        CommandDispatcher(app_config.rcon),
    )

    def _request_stop(signum, _frame) -> None:
        logging.info("Received signal %s, stopping", signum)
        monitor.stop()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    try:
        asyncio.run(monitor.run())
    except KeyboardInterrupt:
        logging.info("Monitor interrupted by user")
    except OSError as exc:
        logging.error("Cannot read %s: %s", log_path, exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
