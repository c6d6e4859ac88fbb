"""
Tenki - weather lookup widget for terminal with OpenWeatherMap backend.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

import lib.utils as utils
from internal.application import TenkiApplication
from internal.config.manager import ConfigManager
from lib.logging_utils import initLogging

# Configure basic logging first
logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.WARNING)
# set higher logging level for httpx to avoid all GET requests (with API key) being logged
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Tenki - weather lookup widget with city autocomplete")
    parser.add_argument(
        "-c",
        "--config",
        default="config.toml",
        help="Path to configuration file (default: config.toml)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (can be specified multiple times)",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Pretty-print loaded configuration (secrets masked) and exit",
    )
    parser.add_argument(
        "--city",
        help="Look up weather for given city once, print it and exit",
    )
    args = parser.parse_args(argv)
    args.config = os.path.abspath(args.config)

    # Convert config directories to absolute paths
    if args.config_dir:
        args.config_dir = [os.path.abspath(dir_path) for dir_path in args.config_dir]

    return args


def prettyPrintConfig(configManager: ConfigManager):
    """Pretty-print the loaded configuration."""
    print("=== Tenki Configuration ===")
    print()
    print(utils.jsonDumps(utils.maskSecrets(configManager.config), indent=2))
    print()
    print("=== Configuration loaded successfully ===")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    try:
        configManager = ConfigManager(configPath=args.config, configDirs=args.config_dir)

        if args.print_config:
            prettyPrintConfig(configManager)
            return 0

        initLogging(configManager.getLoggingConfig())
        app = TenkiApplication(configManager)

        if args.city:
            return 0 if app.runOnce(args.city) else 1

        app.run()
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception as e:
        logger.error(f"Tenki crashed: {e}")
        logger.exception(e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
