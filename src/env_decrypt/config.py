"""
Configuration loading helpers for the environment decrypter.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

import yaml


class ConfigError(RuntimeError):
    """Raised when the user provided configuration is invalid."""


@dataclass
class LoaderConfig:
    """Names and locations used while decrypting the environment file at startup."""

    environment_variable: str = "APP_ENV"
    key_variable: str = "ENV_ENCRYPTION_KEY"
    default_environment: str = "production"
    decrypt_command: str = "env:decrypt"
    scratch_path: str | None = None


def _require_string(raw: Dict[str, Any], key: str) -> str:
    value = raw[key]
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Configuration key '{key}' must be a non-empty string")
    return value.strip()


def config_from_dict(raw: Dict[str, Any]) -> LoaderConfig:
    """Build a LoaderConfig from a plain mapping, rejecting unknown keys."""

    known = {field.name for field in fields(LoaderConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key in raw:
        if key == "scratch_path" and raw[key] is None:
            values[key] = None
            continue
        values[key] = _require_string(raw, key)
    return LoaderConfig(**values)


def load_config(path: str | Path) -> LoaderConfig:
    """Load LoaderConfig from a YAML file, optionally nested under ``env_decrypt``."""

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in configuration file: {path}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must contain a mapping")
    if "env_decrypt" in raw:
        raw = raw["env_decrypt"] or {}
        if not isinstance(raw, dict):
            raise ConfigError("The 'env_decrypt' section must be a mapping")
    return config_from_dict(raw)


__all__ = [
    "ConfigError",
    "LoaderConfig",
    "config_from_dict",
    "load_config",
]
