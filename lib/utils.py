"""
Utility functions for Tenki.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def jsonDumps(data: Any, compact: Optional[bool] = None, **kwargs) -> str:
    dumpKwargs = {
        "ensure_ascii": False,
        "default": str,
        "sort_keys": True,
    }

    if compact is None:
        # If indent is passed, then user want pretty-printed JSON,
        #  no need to use compact separators
        compact = "indent" not in kwargs

    if compact:
        dumpKwargs["separators"] = (",", ":")
    dumpKwargs.update(kwargs)
    return json.dumps(data, **dumpKwargs)


def maskSecrets(data: Any, secretKeys: tuple[str, ...] = ("api-key", "token")) -> Any:
    """
    Recursively replace values of secret keys with "***".

    Args:
        data: Configuration value (dict, list or scalar)
        secretKeys: Keys whose non-empty values are masked

    Returns:
        Copy of data with secrets masked
    """
    if isinstance(data, dict):
        return {
            k: ("***" if k in secretKeys and v else maskSecrets(v, secretKeys)) for k, v in data.items()
        }
    elif isinstance(data, list):
        return [maskSecrets(item, secretKeys) for item in data]
    return data


def load_dotenv(path: str = ".env", populateEnv: bool = True) -> Dict[str, str]:
    """
    Simple dotenv file loader.
    Just read file line by line and put key-value pairs into dictionary.
    Missing file is not an error, empty dictionary is returned then.
    Variables already present in environment are not overridden.

    Args:
        path: Path to .env file (default ".env")
        populateEnv: Whether to populate environment variables (default True)

    Returns:
        Dictionary of key-value pairs from .env file
    """
    ret: Dict[str, str] = {}
    if not os.path.isfile(path):
        logger.debug(f"No dotenv file at {path}")
        return ret

    with open(path, "rt", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if not sep:
                continue
            ret[key.strip()] = value.strip().strip('"')

    if populateEnv:
        for k, v in ret.items():
            os.environ.setdefault(k, v)
    return ret
