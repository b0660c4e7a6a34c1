"""
Config loading for evm_callgraph.

Sources (in precedence order, highest first):
  1. Environment variables (ETHERSCAN_API, EVM_CALLGRAPH_*)
  2. ~/.evm_callgraph/config.toml
  3. Built-in defaults

Usage:
    from evm_callgraph.config import load_config, require_api_key
    config = load_config()
    api_key = require_api_key(config)
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path

import toml

from evm_callgraph.etherscan import DEFAULT_TIMEOUT, ETHERSCAN_BASE
from evm_callgraph.exceptions import ConfigInvalidError, ConfigMissingError

# Default config directory and file
DEFAULT_CONFIG_DIR = Path.home() / ".evm_callgraph"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"

API_KEY_ENV = "ETHERSCAN_API"

# Environment variable → config key mapping
# Format: (env_var_name, dotted_config_path, type_converter)
_ENV_OVERRIDES: list[tuple[str, str, type]] = [
    (API_KEY_ENV, "api.etherscan_api_key", str),
    ("EVM_CALLGRAPH_BASE_URL", "api.base_url", str),
    ("EVM_CALLGRAPH_TIMEOUT", "api.timeout_seconds", float),
]


@dataclass
class APIConfig:
    """Etherscan API configuration."""

    etherscan_api_key: str = ""
    base_url: str = ETHERSCAN_BASE
    timeout_seconds: float = DEFAULT_TIMEOUT


@dataclass
class EvmCallgraphConfig:
    """Full configuration object. Passed via Click context to all commands."""

    api: APIConfig = field(default_factory=APIConfig)


def load_config(path: str | None = None) -> EvmCallgraphConfig:
    """
    Load configuration from TOML file + environment variable overrides.

    A missing config file is not an error; defaults and environment apply.

    Args:
        path: Override config file path. If None, uses EVM_CALLGRAPH_CONFIG_PATH
              env var or default (~/.evm_callgraph/config.toml).

    Raises:
        ConfigInvalidError: Config file is invalid TOML or holds invalid values.
    """
    config_path = _resolve_config_path(path)

    raw: dict = {}
    if config_path.exists():
        try:
            raw = toml.load(str(config_path))
        except toml.TomlDecodeError as e:
            raise ConfigInvalidError(f"Invalid TOML in {config_path}: {e}") from e

    config = _dict_to_config(raw)
    _apply_env_overrides(config)
    _validate_config(config)

    return config


def require_api_key(config: EvmCallgraphConfig) -> str:
    """
    Return the configured Etherscan API key.

    Raises:
        ConfigMissingError: No key in the environment or config file.
    """
    key = config.api.etherscan_api_key
    if not key:
        raise ConfigMissingError(
            f"Etherscan API key is not set. Export {API_KEY_ENV} or set "
            f"api.etherscan_api_key in {get_default_config_path()}",
            details={"env_var": API_KEY_ENV},
        )
    return key


def get_default_config_path() -> Path:
    """Return the default config file path."""
    return DEFAULT_CONFIG_PATH


# ──────────────────────────────────────────────────────────────
# Private helpers
# ──────────────────────────────────────────────────────────────


def _resolve_config_path(path: str | None) -> Path:
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get("EVM_CALLGRAPH_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def _dict_to_config(raw: dict) -> EvmCallgraphConfig:
    """Build EvmCallgraphConfig from raw TOML dict, applying defaults for missing keys."""
    config = EvmCallgraphConfig()

    api = raw.get("api", {})
    if not isinstance(api, dict):
        raise ConfigInvalidError(f"[api] must be a table, got {type(api).__name__}")
    config.api.etherscan_api_key = str(api.get("etherscan_api_key", ""))
    config.api.base_url = str(api.get("base_url", ETHERSCAN_BASE))
    try:
        config.api.timeout_seconds = float(api.get("timeout_seconds", DEFAULT_TIMEOUT))
    except (ValueError, TypeError) as e:
        raise ConfigInvalidError(f"api.timeout_seconds must be a number: {e}") from e

    return config


def _apply_env_overrides(config: EvmCallgraphConfig) -> None:
    """Apply environment variable overrides to a loaded config."""
    for env_var, dotted_key, converter in _ENV_OVERRIDES:
        val = os.environ.get(env_var)
        if val is None:
            continue
        section, key = dotted_key.split(".", 1)
        section_obj = getattr(config, section)
        try:
            setattr(section_obj, key, converter(val))
        except (ValueError, TypeError) as e:
            raise ConfigInvalidError(
                f"Invalid value for {env_var}={val!r}: {e}"
            ) from e


def _validate_config(config: EvmCallgraphConfig) -> None:
    """Validate config values. Raises ConfigInvalidError on invalid values."""
    if not math.isfinite(config.api.timeout_seconds) or config.api.timeout_seconds <= 0:
        raise ConfigInvalidError(
            f"api.timeout_seconds must be a positive finite number, got {config.api.timeout_seconds}"
        )
    if not config.api.base_url.startswith(("http://", "https://")):
        raise ConfigInvalidError(
            f"api.base_url must be an http(s) URL, got {config.api.base_url!r}"
        )
