from __future__ import annotations

"""
Configuration Persistence.

Reads logger options stored as a JSON object on disk. Missing or corrupted
files degrade to an empty option set so that validation injects defaults.
"""

import json
import logging
import os
from typing import Any, Dict

logger = logging.getLogger(__name__)


def read_config_file(path: str) -> Dict[str, Any]:
    """
    Load raw logger options from a JSON file.

    Args:
        path: Location of the JSON document.

    Returns:
        Dict[str, Any]: The stored options, or an empty dict on failure.
    """
    if not os.path.exists(path):
        logger.debug(f"Config file '{path}' not found. Returning defaults.")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config '{path}': {e}. Using defaults.")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Corrupted config file '{path}'. Using defaults.")
        return {}

    return data
