"""
Configuration management for Tenki weather widget.

Configuration is read from the main TOML file, then every *.toml file found
(recursively, in sorted order) in the given config directories is merged on
top of it. Values of the form ${VAR} are replaced with environment variables,
.env file is loaded into environment beforehand.
"""

import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import tomli

import lib.utils as utils

logger = logging.getLogger(__name__)

ENV_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}")
API_KEY_PLACEHOLDERS = ("", "YOUR_API_KEY_HERE")


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} placeholders with environment variables.

    Placeholders of unset variables are left as is.

    Args:
        value: Configuration value: string, dict, list or scalar

    Returns:
        Copy of value with placeholders substituted, scalars unchanged
    """
    if isinstance(value, str):
        return ENV_PLACEHOLDER_RE.sub(lambda match: os.getenv(match.group(1), match.group(0)), value)
    elif isinstance(value, dict):
        return {key: substituteEnvVars(item) for key, item in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


def mergeConfigs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge override into copy of base: tables merged key by key, other values replaced."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = mergeConfigs(current, value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Loads and holds Tenki configuration.

    Sections:
        [openweathermap]: api-key, request-timeout, units
        [geolocation]: enabled, provider, lat, lon, request-timeout
        [widget]: min-query-length, suggestion-limit
        [logging]: see lib.logging_utils
    """

    def __init__(
        self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None, dotEnvFile: str = ".env"
    ):
        """
        Load configuration.

        Args:
            configPath: Main TOML file, may be absent if configDirs are given
            configDirs: Directories with additional TOML files
            dotEnvFile: dotenv file loaded into environment before substitution

        Raises:
            SystemExit: If there is nothing to load or main file is broken
        """
        self.config_path = configPath
        self.config_dirs = configDirs or []
        utils.load_dotenv(path=dotEnvFile)
        self.config: Dict[str, Any] = substituteEnvVars(self._loadConfig())

    def _iterDirConfigFiles(self, directory: str) -> Iterator[Path]:
        dirPath = Path(directory)
        if not dirPath.is_dir():
            logger.warning(f"Config directory {directory} does not exist or is not a directory, skipping")
            return

        found = sorted(path for path in dirPath.rglob("*.toml") if path.is_file())
        logger.info(f"Found {len(found)} .toml files in {directory}")
        yield from found

    def _loadConfig(self) -> Dict[str, Any]:
        mainFile = Path(self.config_path)
        if not mainFile.exists() and not self.config_dirs:
            logger.error(f"Configuration file {self.config_path} not found!")
            sys.exit(1)

        config: Dict[str, Any] = {}
        if mainFile.exists():
            try:
                with open(mainFile, "rb") as f:
                    config = tomli.load(f)
            except (OSError, tomli.TOMLDecodeError) as e:
                logger.error(f"Failed to load configuration from {self.config_path}: {e}")
                sys.exit(1)
            logger.info(f"Loaded main config from {self.config_path}")

        for configDir in self.config_dirs:
            for tomlFile in self._iterDirConfigFiles(configDir):
                # Broken file in config dir is skipped, the rest still applies
                try:
                    with open(tomlFile, "rb") as f:
                        config = mergeConfigs(config, tomli.load(f))
                except (OSError, tomli.TOMLDecodeError) as e:
                    logger.error(f"Failed to load config file {tomlFile}: {e}")
                    continue
                logger.debug(f"Merged config from {tomlFile}")

        return config

    def get(self, key: str, default=None) -> Any:
        """Get top-level configuration value by key."""
        return self.config.get(key, default)

    def getLoggingConfig(self) -> Dict[str, Any]:
        return self.get("logging", {})

    def getOpenWeatherMapConfig(self) -> Dict[str, Any]:
        """
        Get OpenWeatherMap configuration

        Returns:
            Dict with OpenWeatherMap settings:
            - api-key: API key (usually "${OPENWEATHERMAP_API_KEY}")
            - request-timeout: HTTP timeout in seconds (default 10)
            - units: Unit system (default "metric")
        """
        return self.get("openweathermap", {})

    def getGeolocationConfig(self) -> Dict[str, Any]:
        """
        Get geolocation configuration

        Returns:
            Dict with geolocation settings:
            - enabled: Whether location access is granted (default false)
            - provider: "ip-api", "static" or "none"
            - lat, lon: Position for "static" provider
            - request-timeout: HTTP timeout for "ip-api" provider
        """
        return self.get("geolocation", {})

    def getWidgetConfig(self) -> Dict[str, Any]:
        """Get widget behaviour configuration (min-query-length, suggestion-limit)."""
        return self.get("widget", {})

    def getApiKey(self) -> str:
        """Get OpenWeatherMap API key, empty string if not configured."""
        apiKey = str(self.getOpenWeatherMapConfig().get("api-key", ""))
        if apiKey in API_KEY_PLACEHOLDERS or ENV_PLACEHOLDER_RE.fullmatch(apiKey):
            # Not fatal: provider rejects requests with 401
            logger.warning("OpenWeatherMap API key is not set, weather requests will fail!")
        return apiKey
