# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/hostinit/config/loader.py

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import HostInitConfig

log = logging.getLogger("hostinit")

DATA_DIR = Path(__file__).parent / "data"


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


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    try:
        data = yaml.safe_load(expanded) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at top level")
    return data


def _env_overrides(env: Mapping[str, str]) -> dict:
    """
    Environment switches that may be set without a config file:
      INIT_USERNAME / USERNAME   target user
      ROCKY_REPO_MIRROR          repository mirror base URL
      SKIP_ROCKY_REPO_MIRROR=1   leave .repo files alone
      PIP_INDEX_URL              pip mirror
    """
    out: dict = {"mirrors": {}}
    user = env.get("INIT_USERNAME") or env.get("USERNAME")
    if user:
        out["target_user"] = user
    if env.get("ROCKY_REPO_MIRROR"):
        out["mirrors"]["repo_mirror"] = env["ROCKY_REPO_MIRROR"]
    if env.get("SKIP_ROCKY_REPO_MIRROR") == "1":
        out["mirrors"]["skip_repo_mirror"] = True
    if env.get("PIP_INDEX_URL"):
        out["mirrors"]["pip_index_url"] = env["PIP_INDEX_URL"]
    return out


def load_config(
    path: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> HostInitConfig:
    """
    Build the run configuration.

    Precedence, lowest first:
      1. packaged policy defaults (``config/data/defaults.yml``)
      2. the YAML file at ``path`` or ``$HOSTINIT_CONFIG`` (``${ENV}`` expanded)
      3. environment overrides (see ``_env_overrides``)
    """
    env = os.environ if env is None else env
    data = {"policy": _load_yaml(DATA_DIR / "defaults.yml")}

    path = path or env.get("HOSTINIT_CONFIG")
    if path:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"config file not found: {path}")
        log.debug("Merging config from %s", path)
        _deep_merge(data, _load_yaml(path))
    else:
        log.debug("No config file given; using packaged defaults")

    _deep_merge(data, _env_overrides(env))

    try:
        return HostInitConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e
