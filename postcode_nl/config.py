"""
This module provides credential configuration for the Postcode.nl API client.

Classes:
    Settings: API key, secret, platform label and optional referer.
    ConfigError: Raised when settings cannot be loaded or are incomplete.

Functions:
    load_settings(path: Path | None, env: Mapping[str, str] | None) -> Settings:
        Loads settings from a YAML file, then applies POSTCODE_NL_* environment
        overrides.

(c) Passlick Development 2025. All rights reserved.
"""


from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping
import yaml

DEFAULT_CONFIG_PATH = Path("postcode-nl.yaml")
DEFAULT_PLATFORM = "postcode-nl-cli"
ENV_PREFIX = "POSTCODE_NL_"


class ConfigError(Exception):
    pass


@dataclass
class Settings:
    key: str
    secret: str
    platform: str = DEFAULT_PLATFORM
    referer: str | None = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Settings":
        missing = [name for name in ("key", "secret") if not data.get(name)]
        if missing:
            raise ConfigError(f"Missing API credentials: {', '.join(missing)}")
        return Settings(
            key=str(data["key"]),
            secret=str(data["secret"]),
            platform=str(data.get("platform") or DEFAULT_PLATFORM),
            referer=data.get("referer"),
        )


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(raw).__name__}")
    return raw


def load_settings(path: Path | None = None, env: Mapping[str, str] | None = None) -> Settings:
    """Merge the YAML file (if any) with environment overrides.

    An explicitly given path must exist; the default path is optional.
    """
    env = os.environ if env is None else env
    data: Dict[str, Any] = {}
    if path is not None:
        data.update(_read_yaml(path))
    elif DEFAULT_CONFIG_PATH.exists():
        data.update(_read_yaml(DEFAULT_CONFIG_PATH))
    for field in ("key", "secret", "platform", "referer"):
        value = env.get(ENV_PREFIX + field.upper())
        if value:
            data[field] = value
    return Settings.from_dict(data)
