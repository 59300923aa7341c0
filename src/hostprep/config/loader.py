# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostprep/config/loader.py

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from hostprep.errors import ConfigError

from .models import HostConfig

log = logging.getLogger("hostprep")


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _find_overrides_file() -> Path | None:
    env = os.environ.get("HOSTPREP_OVERRIDES_FILE")
    if not env:
        return None
    p = Path(env)
    if p.is_file():
        return p
    log.warning("HOSTPREP_OVERRIDES_FILE=%s does not exist, skipping", env)
    return None


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    expanded = os.path.expandvars(raw)
    try:
        data = yaml.safe_load(expanded) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(path: str | Path | None = None) -> HostConfig:
    """
    Load and validate the desired host state.

    With no path (and no ``HOSTPREP_CONFIG`` env var) the built-in defaults are
    used unchanged. A YAML file only needs the keys it changes, e.g.::

        network:
          address: 10.0.0.5
        users: [alice, bob]

    ``${ENV_VAR}`` placeholders are resolved at load time. When
    ``HOSTPREP_OVERRIDES_FILE`` points at another YAML file it is deep-merged on
    top before validation.
    """
    if path is None:
        path = os.environ.get("HOSTPREP_CONFIG") or None

    data: dict = {}
    if path is not None:
        data = _load_yaml(Path(path))
        log.debug("Loaded config from %s", path)

    overrides = _find_overrides_file()
    if overrides:
        log.debug("Merging overrides from %s", overrides)
        _deep_merge(data, _load_yaml(overrides))

    try:
        return HostConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid host configuration: {e}") from e
