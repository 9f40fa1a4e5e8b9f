"""
Service configuration and decoding profiles.

Profiles are named :class:`~svcdec.params.DecodingParam` presets kept in a YAML
file (``configs/profiles.yaml`` by default).  Each entry is validated with
:class:`~svcdec.api.schemas.DecodingParamModel`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from .api.schemas import DecodingParamModel
from .params import DecodingParam

LOG = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent / "configs"
PROFILES_PATH = CONFIG_DIR / "profiles.yaml"

ENV_PREFIX = "SVCDEC_"


class ProfileError(LookupError):
    """Raised when a profile cannot be read or parsed."""


class UnknownProfile(ProfileError):
    """Raised when no profile with the requested name exists."""


def read_profiles_file(path: Optional[Union[str, Path]] = None) -> Dict[str, dict]:
    """Return the raw YAML mapping; a missing file yields an empty mapping."""

    target = Path(path) if path is not None else PROFILES_PATH
    try:
        with target.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except FileNotFoundError:
        LOG.warning("Profiles file %s not found.", target)
        return {}
    except yaml.YAMLError as exc:
        raise ProfileError(f"Cannot parse profiles file {target}: {exc}") from exc

    profiles = raw.get("profiles", raw) if isinstance(raw, dict) else None
    if not isinstance(profiles, dict):
        raise ProfileError(f"Profiles file {target} must contain a mapping")
    return {str(name): dict(entry or {}) for name, entry in profiles.items()}


def _parse_profile(name: str, entry: Mapping[str, object]) -> DecodingParam:
    try:
        return DecodingParamModel.model_validate(dict(entry)).to_param()
    except ValidationError as exc:
        raise ProfileError(f"Profile '{name}' is invalid: {exc}") from exc


def load_profiles(path: Optional[Union[str, Path]] = None) -> Dict[str, DecodingParam]:
    return {name: _parse_profile(name, entry) for name, entry in read_profiles_file(path).items()}


def get_profile(name: str, path: Optional[Union[str, Path]] = None) -> DecodingParam:
    entries = read_profiles_file(path)
    if name not in entries:
        raise UnknownProfile(f"Unknown profile '{name}'. Available: {sorted(entries)}")
    return _parse_profile(name, entries[name])


@dataclass
class ServiceConfig:
    """Top level configuration of the decoder control service."""

    profile: str = "default"
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"
    profiles_path: Path = field(default=PROFILES_PATH)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServiceConfig":
        env = os.environ if environ is None else environ
        config = cls()
        config.profile = env.get(f"{ENV_PREFIX}PROFILE", config.profile)
        config.host = env.get(f"{ENV_PREFIX}HOST", config.host)
        port = env.get(f"{ENV_PREFIX}PORT")
        if port:
            try:
                config.port = int(port)
            except ValueError:
                LOG.warning("Ignoring invalid %sPORT=%r", ENV_PREFIX, port)
        config.log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL", config.log_level).upper()
        profiles = env.get(f"{ENV_PREFIX}PROFILES")
        if profiles:
            config.profiles_path = Path(profiles).expanduser()
        return config
