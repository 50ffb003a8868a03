"""
config.py
- Resolves runtime settings from CLI flags, environment variables and the optional YAML file.
- Precedence: flag > environment > YAML file > default.
- Only the outermost bootstrap layer calls load_settings(); the core receives plain values.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from linode_node_decorator.core.config_loader import load_yaml
from linode_node_decorator.core.constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_METADATA_BASE_URL,
    DEFAULT_METADATA_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TOKEN_EXPIRY,
    BACKEND_KUBERNETES,
    SUPPORTED_BACKENDS,
)
from linode_node_decorator.core.errors import ConfigError

# --- Environment Variable Names ---
ENV_NODE_NAME = "NODE_NAME"
ENV_POLL_INTERVAL = "POLL_INTERVAL"
ENV_BACKEND = "CLUSTER_BACKEND"
ENV_METADATA_BASE_URL = "METADATA_BASE_URL"
ENV_TOKEN_EXPIRY = "METADATA_TOKEN_EXPIRY"
ENV_METADATA_TIMEOUT = "METADATA_TIMEOUT"
ENV_DRY_RUN = "DRY_RUN"
ENV_DEBUG = "DEBUG"
ENV_CONFIG_FILE = "CONFIG_FILE"
ENV_SENTRY_DSN = "SENTRY_DSN"


@dataclass(frozen=True)
class Settings:
    node_name: str
    poll_interval: int = DEFAULT_POLL_INTERVAL
    backend: str = BACKEND_KUBERNETES
    metadata_base_url: str = DEFAULT_METADATA_BASE_URL
    token_expiry: int = DEFAULT_TOKEN_EXPIRY
    metadata_timeout: int = DEFAULT_METADATA_TIMEOUT
    dry_run: bool = False
    debug: bool = False
    sentry_dsn: Optional[str] = None


def parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def positive_int(name, value):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if number <= 0:
        raise ConfigError(f"{name} must be a positive number of seconds, got {number}")
    return number


def _pick(key, flag_value, env_name, file_cfg, environ, default):
    if flag_value is not None:
        return flag_value
    if environ.get(env_name):
        return environ[env_name]
    if key in file_cfg and file_cfg[key] is not None:
        return file_cfg[key]
    return default


def load_settings(args=None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from parsed CLI args (argparse.Namespace or None) and the environment.

    Raises ConfigError for a missing node name, a bad interval or an unknown backend.
    """
    environ = os.environ if environ is None else environ

    def flag(name):
        return getattr(args, name, None) if args is not None else None

    explicit_path = flag("config") or environ.get(ENV_CONFIG_FILE)
    file_cfg = load_yaml(explicit_path or DEFAULT_CONFIG_FILE, required=bool(explicit_path))

    node_name = _pick("node_name", flag("node_name"), ENV_NODE_NAME, file_cfg, environ, "")
    if not node_name:
        raise ConfigError(f"node name is not set (use --node-name or {ENV_NODE_NAME})")

    backend = str(_pick("backend", flag("backend"), ENV_BACKEND, file_cfg, environ, BACKEND_KUBERNETES)).lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ConfigError(f"unknown cluster backend {backend!r}, expected one of {SUPPORTED_BACKENDS}")

    # store_true flags are False when absent, so only True overrides
    dry_run_flag = True if flag("dry_run") else None
    debug_flag = True if flag("debug") else None

    return Settings(
        node_name=str(node_name),
        poll_interval=positive_int(
            "poll interval",
            _pick("poll_interval", flag("poll_interval"), ENV_POLL_INTERVAL, file_cfg, environ, DEFAULT_POLL_INTERVAL),
        ),
        backend=backend,
        metadata_base_url=str(
            _pick("metadata_base_url", None, ENV_METADATA_BASE_URL, file_cfg, environ, DEFAULT_METADATA_BASE_URL)
        ).rstrip("/"),
        token_expiry=positive_int(
            "metadata token expiry",
            _pick("token_expiry", None, ENV_TOKEN_EXPIRY, file_cfg, environ, DEFAULT_TOKEN_EXPIRY),
        ),
        metadata_timeout=positive_int(
            "metadata timeout",
            _pick("metadata_timeout", None, ENV_METADATA_TIMEOUT, file_cfg, environ, DEFAULT_METADATA_TIMEOUT),
        ),
        dry_run=parse_bool(_pick("dry_run", dry_run_flag, ENV_DRY_RUN, file_cfg, environ, False)),
        debug=parse_bool(_pick("debug", debug_flag, ENV_DEBUG, file_cfg, environ, False)),
        sentry_dsn=environ.get(ENV_SENTRY_DSN) or file_cfg.get("sentry_dsn") or None,
    )
