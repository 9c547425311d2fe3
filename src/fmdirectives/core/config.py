#!/usr/bin/env python3
"""
fmdirectives configuration loader.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Final, List

from fmdirectives.core.constants import (
    DEFAULT_REGISTRY_ARRAY_NAMES,
    REGISTRY_DERIVED_FIELD,
    REGISTRY_FALLBACK_SOURCE_FIELD,
)
from fmdirectives.core.utils import merge_dicts, load_json_file

# --- Defaults & locations --- #

DEFAULT_CONFIG: Final[Dict[str, Any]] = {
    "registry_array_names": list(DEFAULT_REGISTRY_ARRAY_NAMES),
    "registry_derived_field": REGISTRY_DERIVED_FIELD,
    "registry_fallback_source_field": REGISTRY_FALLBACK_SOURCE_FIELD,
    "logging": {"level": "INFO"},
}

GLOBAL_CONFIG_PATH: Final[Path] = Path.home() / ".config" / "fmdirectives" / "config.json"

PROJECT_CONFIG_NAME: Final[str] = "fmdirectives.json"


# --- Public API --- #

def load_config() -> Dict[str, Any]:
    """
    Load fmdirectives configuration with layered precedence.

    Order:
        1. Built-in defaults
        2. Global config (~/.config/fmdirectives/config.json)
        3. Project config (./fmdirectives.json)
        4. Environment overrides:
           - FMDIRECTIVES_REGISTRY_NAMES (comma-separated list)
           - FMDIRECTIVES_LOG_LEVEL

    Returns:
        A merged configuration dictionary.
    """
    # 1) start with defaults
    config = copy.deepcopy(DEFAULT_CONFIG)

    # 2) global config
    config = merge_dicts(config, load_json_file(GLOBAL_CONFIG_PATH))

    # 3) project config
    project_path = Path.cwd() / PROJECT_CONFIG_NAME
    config = merge_dicts(config, load_json_file(project_path))

    # 4) environment overrides
    names_env = os.getenv("FMDIRECTIVES_REGISTRY_NAMES")
    if names_env:
        config["registry_array_names"] = _split_names_env(names_env)

    log_level_env = os.getenv("FMDIRECTIVES_LOG_LEVEL")
    if log_level_env:
        config.setdefault("logging", {})["level"] = log_level_env

    return config


# --- Internals --- #

def _split_names_env(value: str) -> List[str]:
    """
    Split a comma-separated env var, trimming whitespace and empties.

    Example:
        " commands, entries ,," -> ["commands", "entries"]
    """
    return [p.strip() for p in value.split(",") if p.strip()]
