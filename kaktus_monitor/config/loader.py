"""Configuration file loader.

The file is read with yaml.safe_load, so a plain JSON secrets file works
as well as YAML.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml  # type: ignore[import-untyped]

from .schema import AppConfig

_LOGGER = logging.getLogger(__name__)


def load_config(path: Path | str) -> AppConfig:
    """Load and validate the configuration file.

    Args:
        path: Path to a YAML or JSON file

    Returns:
        Parsed AppConfig object.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is empty or invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")

    _LOGGER.debug("Loading config from %s", config_path)

    with open(config_path, encoding="utf-8") as f:
        raw_config = yaml.safe_load(f)

    if not raw_config:
        raise ValueError(f"Empty config file at {config_path}")

    try:
        return AppConfig.model_validate(raw_config)
    except Exception as e:
        raise ValueError(f"Invalid config file at {config_path}: {e}") from e
