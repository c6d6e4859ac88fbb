"""
Logging utilities for Tenki.

Logging is configured from the [logging] config section, same keys apply to
root logger and to each [logging.logger."<name>"] table:

    [logging]
    level = "INFO"
    format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    console = true
    console-level = "WARNING"
    file = "logs/tenki.log"
    file-level = "DEBUG"
    rotate = true

    [logging.logger."lib.openweathermap"]
    level = "DEBUG"
    propagate = true
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# GET request lines contain appid
NOISY_LOGGERS = ("httpx", "httpcore")
ROTATE_BACKUP_COUNT = 7


def getLogLevelByStr(levelStr: str, default: Optional[int] = None) -> Optional[int]:
    """Get log level by name ("debug", "INFO", ...), default if name is unknown."""
    level = logging.getLevelName(levelStr.upper())
    if isinstance(level, int):
        return level
    logger.error(f"Invalid log level '{levelStr}'")
    return default


def _handlerLevel(config: Dict[str, Any], key: str, fallback: int) -> int:
    if key not in config:
        return fallback
    level = getLogLevelByStr(config[key])
    return fallback if level is None else level


def _createFileHandler(logFile: str, rotate: bool) -> logging.Handler:
    Path(logFile).parent.mkdir(parents=True, exist_ok=True)
    if rotate:
        return TimedRotatingFileHandler(
            filename=logFile,
            when="midnight",
            interval=1,
            backupCount=ROTATE_BACKUP_COUNT,
            encoding="utf-8",
        )
    return logging.FileHandler(logFile, encoding="utf-8")


def configureLogger(localLogger: logging.Logger, config: Dict[str, Any]) -> None:
    """
    Configure single logger: level, propagation and handlers.

    Existing handlers of the logger are replaced. Failure to open log file is
    logged and leaves logger without file handler.
    """
    if "propagate" in config:
        localLogger.propagate = bool(config["propagate"])

    if "level" in config:
        level = getLogLevelByStr(config["level"])
        if level is not None:
            localLogger.setLevel(level)
    effectiveLevel = localLogger.getEffectiveLevel()

    for handler in list(localLogger.handlers):
        localLogger.removeHandler(handler)

    handlers: List[logging.Handler] = []
    if config.get("console", False):
        consoleHandler = logging.StreamHandler()
        consoleHandler.setLevel(_handlerLevel(config, "console-level", effectiveLevel))
        handlers.append(consoleHandler)

    if "file" in config:
        try:
            fileHandler = _createFileHandler(config["file"], bool(config.get("rotate", False)))
        except OSError as e:
            logger.error(f"Failed to setup file logging for {localLogger.name}: {e}")
        else:
            fileHandler.setLevel(_handlerLevel(config, "file-level", effectiveLevel))
            handlers.append(fileHandler)

    formatter = logging.Formatter(config.get("format", DEFAULT_FORMAT))
    for handler in handlers:
        handler.setFormatter(formatter)
        localLogger.addHandler(handler)
        logger.info(f"Logging {localLogger.name} to {handler.__class__.__name__}, logLevel: {handler.level}")


def initLogging(config: Dict[str, Any]) -> None:
    """Configure root logger and per-logger overrides from [logging] section."""
    rootLogger = logging.getLogger()
    rootLogger.setLevel(logging.INFO)
    configureLogger(rootLogger, config)

    rootLevel = rootLogger.getEffectiveLevel()
    if rootLevel < logging.WARNING:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    for loggerName, loggerConfig in config.get("logger", {}).items():
        logger.debug(f"Configuring logger '{loggerName}' with config {loggerConfig}")
        configureLogger(logging.getLogger(loggerName), loggerConfig)

    logger.info(f"Logging configured: root level={logging.getLevelName(rootLevel)}")
