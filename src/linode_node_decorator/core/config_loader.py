"""
config_loader.py
- Loads the optional YAML settings file (/etc/linode-node-decorator/config.yml).
- A missing default file is not an error; a missing explicitly configured file or a malformed one is.
"""

import os

import yaml
from loguru import logger

from linode_node_decorator.core.errors import ConfigError


def load_yaml(path, required=False):
    """Load a YAML mapping from path. Returns {} if an optional file does not exist."""
    if not path or not os.path.exists(path):
        if required:
            raise ConfigError(f"config file {path} does not exist")
        logger.debug(f"[config] No config file at {path}, using environment and defaults.")
        return {}

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to load {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")

    logger.info(f"[config] Loaded settings from {path}: {sorted(data)}")
    return data
