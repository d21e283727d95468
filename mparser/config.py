"""Configuration management for mparser."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from . import __version__
from .models.config import MparserConfig, ParserConfig, ServerConfig

# Application name for XDG paths
APP_NAME = "mparser"

# Default configuration
DEFAULT_CONFIG: dict[str, Any] = {
    "parser": {
        "fetch_timeout_seconds": 5.0,
        "max_concurrency_fetch": 16,
        "resolve_deadline_seconds": None,  # overall budget for all title fetches (None = unbounded)
        "max_page_bytes": 512 * 1024,  # stop reading a page after this many bytes
        "fallback_title": "Website",
        "user_agent": f"mparser/{__version__}",
        "follow_redirects": True,
    },
    "server": {
        "host": "localhost",
        "port": 9080,
        "ssl_on": False,
        "ssl_cert_path": None,
        "ssl_key_path": None,
        "max_body_bytes": 1024 * 1024,
    },
}

# Environment variables understood by the HTTP listener
ENV_LISTEN_HOST = "LISTEN_HOST"
ENV_LISTEN_PORT = "LISTEN_PORT"
ENV_SSL_ON = "SSL_ON"
ENV_SSL_CERT_PATH = "SSL_CERT_PATH"
ENV_SSL_KEY_PATH = "SSL_KEY_PATH"

# Explicit config file location
ENV_CONFIG_PATH = "MPARSER_CONFIG"


def get_config_path() -> Path:
    """
    Get the path to the config file.

    MPARSER_CONFIG wins; otherwise $XDG_CONFIG_HOME/mparser/config.json.
    """
    explicit = os.environ.get(ENV_CONFIG_PATH)
    if explicit:
        return Path(explicit)
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return Path(config_home) / APP_NAME / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration, with the user's file layered over DEFAULT_CONFIG."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = get_config_path()
    if not config_path.exists():
        return config

    user_config = json.loads(config_path.read_text())
    if not isinstance(user_config, dict):
        raise ValueError(f"{config_path}: expected a JSON object, got {type(user_config).__name__}")
    return deep_merge(config, user_config)


def save_config(config: dict[str, Any]) -> None:
    """Write config as indented JSON, creating the directory if needed."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2) + "\n")


def deep_merge(base: dict, override: dict) -> dict:
    """Return base updated with override; nested dicts are merged key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = deep_merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def get_parser_config(config: dict[str, Any] | None = None) -> ParserConfig:
    """Get the validated parser section."""
    cfg = config if config is not None else load_config()
    return MparserConfig.model_validate(cfg).parser


def get_server_config(config: dict[str, Any] | None = None) -> ServerConfig:
    """
    Get the validated server section.

    Priority for each field:
    1. LISTEN_HOST / LISTEN_PORT / SSL_ON / SSL_CERT_PATH / SSL_KEY_PATH
    2. server.* in config.json
    3. Built-in defaults
    """
    cfg = config if config is not None else load_config()
    server = dict(cfg.get("server", {}))

    host = os.environ.get(ENV_LISTEN_HOST)
    if host:
        server["host"] = host

    port = os.environ.get(ENV_LISTEN_PORT)
    if port:
        server["port"] = port

    # Only the literal "1" enables TLS
    ssl_on = os.environ.get(ENV_SSL_ON)
    if ssl_on:
        server["ssl_on"] = ssl_on == "1"

    cert_path = os.environ.get(ENV_SSL_CERT_PATH)
    if cert_path:
        server["ssl_cert_path"] = cert_path

    key_path = os.environ.get(ENV_SSL_KEY_PATH)
    if key_path:
        server["ssl_key_path"] = key_path

    return ServerConfig.model_validate(server)
