"""Unpacker configuration loaded from a YAML file.

The file path comes from the ``OAUTH_UNPACKER_CONFIG`` environment
variable. A missing or unreadable file gives the default configuration.

Example::

    oauth1_auth_types: [oauth]
    oauth2_auth_types: [bearer, oauth2]
    keep_duplicate_params: false
    body_chunk_size: 4096
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

import yaml

from oauth_unpacker.unpacker import UnpackerConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = os.environ.get("OAUTH_UNPACKER_CONFIG", "config/unpacker.yaml")


def _auth_types(value: Any) -> tuple:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ValueError("expected a list of scheme names")
    return tuple(v.lower() for v in value)


def _flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValueError("expected true or false")
    return value


def _chunk_size(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError("expected a positive integer")
    return value


OPTIONS = {
    "oauth1_auth_types": _auth_types,
    "oauth2_auth_types": _auth_types,
    "keep_duplicate_params": _flag,
    "body_chunk_size": _chunk_size,
}


def load_settings(file_path: str = CONFIG_FILE) -> Dict[str, Any]:
    """Read the raw settings mapping from ``file_path``."""
    if not os.path.exists(file_path):
        return {}
    try:
        with open(file_path, "r") as file:
            data = yaml.safe_load(file) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Error loading config file %s: %s", file_path, exc)
        return {}
    if not isinstance(data, dict):
        logger.error("Config file %s must contain a mapping", file_path)
        return {}
    return data


def load_config(file_path: str = CONFIG_FILE) -> UnpackerConfig:
    """Build an UnpackerConfig from the settings in ``file_path``.

    Unknown keys and invalid values are logged and skipped.

    Args:
        file_path: Path to a YAML file

    Returns:
        UnpackerConfig with the valid settings applied over the defaults
    """
    config = UnpackerConfig()
    for name, value in load_settings(file_path).items():
        convert = OPTIONS.get(name)
        if convert is None:
            logger.warning("Ignoring unknown config option %s", name)
            continue
        try:
            setattr(config, name, convert(value))
        except ValueError as exc:
            logger.warning("Invalid value for %s: %s", name, exc)
    return config
