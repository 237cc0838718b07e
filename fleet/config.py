"""Settings loaded from an optional YAML file and the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

import yaml

DEFAULT_MIRROR_DIR = Path.home() / ".fleetsync" / "mirror"
DEFAULT_DATA_FILE = Path("data") / "db.json"

# Environment variables checked for each setting, first match wins.
ENV_KEYS: Dict[str, tuple] = {
    "api_base": ("FLEET_API_BASE", "API_BASE"),
    "api_token": ("FLEET_API_TOKEN",),
    "supabase_url": ("SUPABASE_URL", "VITE_SUPABASE_URL"),
    "supabase_key": ("SUPABASE_KEY", "SUPABASE_SERVICE_ROLE", "VITE_SUPABASE_ANON_KEY"),
    "mirror_dir": ("FLEET_MIRROR_DIR",),
    "data_file": ("FLEET_DATA_FILE",),
    "timeout": ("FLEET_TIMEOUT",),
    "due_soon_miles": ("FLEET_DUE_SOON_MILES",),
    "log_level": ("FLEET_LOG_LEVEL",),
}

# YAML files use camelCase keys like the records do.
YAML_KEYS = {
    "apiBase": "api_base",
    "apiToken": "api_token",
    "supabaseUrl": "supabase_url",
    "supabaseKey": "supabase_key",
    "mirrorDir": "mirror_dir",
    "dataFile": "data_file",
    "timeout": "timeout",
    "dueSoonMiles": "due_soon_miles",
    "logLevel": "log_level",
}


@dataclass
class Settings:
    """Runtime configuration for the sync layer, CLI and API server."""

    api_base: str = "http://localhost:3000"
    api_token: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    mirror_dir: Path = DEFAULT_MIRROR_DIR
    data_file: Path = DEFAULT_DATA_FILE
    timeout: float = 5.0
    due_soon_miles: float = 1000
    log_level: str = "WARNING"

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def _coerce(name: str, value):
    """Convert a raw YAML/env value to the type of the named setting."""
    if value is None or value == "":
        return None
    if name in ("mirror_dir", "data_file"):
        return Path(value).expanduser()
    if name in ("timeout", "due_soon_miles"):
        return float(value)
    return str(value)


def load_settings(
    filename: Optional[Union[str, Path]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build settings from defaults, then the YAML file, then the environment.

    Unknown YAML keys are ignored. A missing file is an error only when a
    filename was given explicitly.
    """
    if env is None:
        env = os.environ

    values = {}

    if filename is not None:
        with open(filename, "r") as fp:
            data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
        for key, name in YAML_KEYS.items():
            if key in data:
                coerced = _coerce(name, data[key])
                if coerced is not None:
                    values[name] = coerced

    for name, keys in ENV_KEYS.items():
        for key in keys:
            coerced = _coerce(name, env.get(key))
            if coerced is not None:
                values[name] = coerced
                break

    return Settings(**values)
