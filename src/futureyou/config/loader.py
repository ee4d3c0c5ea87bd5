"""Configuration loader from YAML."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .schema import Config

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FUTUREYOU_CONFIG"
DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def resolve_config_path(yaml_path: Optional[Union[str, Path]] = None) -> Path:
    """Explicit path, then $FUTUREYOU_CONFIG, then the packaged defaults."""
    if yaml_path is not None:
        return Path(yaml_path)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULTS_PATH


def load_config(yaml_path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load configuration from YAML file.

    Sections or fields missing from the file keep their schema defaults,
    so a user file only needs the values it changes.

    Args:
        yaml_path: Path to YAML file (defaults to $FUTUREYOU_CONFIG, then defaults.yaml)

    Returns:
        Config object

    Raises:
        ValueError: If the file does not hold a mapping at the top level
    """
    path = resolve_config_path(yaml_path)
    logger.debug("Loading configuration from %s", path)

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Configuration in {path} must be a mapping, got {type(data).__name__}")

    return Config.from_dict(data)


def config_from_dict(data: Dict[str, Any]) -> Config:
    """
    Create config from dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        Config object
    """
    return Config.from_dict(data)
