#!/usr/bin/env python3
"""
Image Relay - Main entry point

Watches the source directory and relays every new image through the
background-removal API:
- Result bytes go to the processed directory
- Originals are archived in the destination directory
"""

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger

from app.utils.config import DEFAULT_CONFIG_PATH, load_settings
from app.utils.exceptions import ConfigError
from app.utils.helpers import ensure_directories
from domains.image_relay.watcher import ImageRelayWatcher

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO"):
    """Route loguru output to stdout."""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level.upper())


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Upload new images from a watched folder to a background-removal API.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="YAML configuration file (default: ./config.yaml).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the log level from the configuration.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(args.log_level or "INFO")

    # Configuration comes first: a bad config exits before any directory is made
    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        logger.critical(f"Failed to load configuration: {e}")
        return 1

    if not args.log_level and settings.log_level.upper() != "INFO":
        configure_logging(settings.log_level)

    logger.info("Image Relay - Source Folder Watcher")

    try:
        for created in ensure_directories(settings.get_directories()):
            logger.info(f"Created directory: {created}")
    except OSError as e:
        logger.critical(f"Failed to create directories: {e}")
        return 1

    watcher = ImageRelayWatcher(settings)
    try:
        watcher.start()
    except Exception as e:
        logger.critical(f"File system watcher failed to start: {e}")
        return 1

    stop_event = threading.Event()

    def _signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down.")
        stop_event.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    try:
        watcher.run(stop_event)
    finally:
        watcher.stop()

    logger.info("Image Relay stopped.")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
