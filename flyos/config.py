"""Shell configuration and environment handling."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_BASE_ENV: list[str] = [f"{key}={value}" for key, value in os.environ.items()]


def flyos_home() -> Path:
    """Return the base directory: $FLYOS_HOME, else the user's home, else the cwd."""
    custom = os.environ.get("FLYOS_HOME")
    if custom:
        return Path(custom)
    try:
        return Path.home()
    except RuntimeError:
        pass
    try:
        return Path.cwd()
    except OSError:
        return Path(".")


def merge_env(custom: Mapping[str, str], base: Iterable[str] | None = None) -> list[str]:
    """Return ``KEY=VALUE`` entries: the base environment followed by ``custom``."""
    env = list(_BASE_ENV if base is None else base)
    env.extend(f"{key}={value}" for key, value in custom.items())
    return env


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _string_list(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} must be an array of strings")
    return list(value)


@dataclass
class Config:
    """Directories to scan for commands, names to skip, and extra environment."""

    commands_dirs: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)
    env: dict[str, Any] = field(default_factory=dict)

    def normalize_env(self) -> dict[str, str]:
        """Flatten env values to strings; lists of strings are joined with ``:``."""
        result: dict[str, str] = {}
        for key, value in self.env.items():
            if isinstance(value, str):
                result[key] = value
            elif isinstance(value, (list, tuple)):
                result[key] = ":".join(item for item in value if isinstance(item, str))
            else:
                result[key] = _format_scalar(value)
        return result

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Config:
        """Build a config from decoded TOML data, checking the value types."""
        env = data.get("env", {})
        if not isinstance(env, Mapping):
            raise ValueError("env must be a table")
        return cls(
            commands_dirs=_string_list(data, "commands_dirs"),
            excludes=_string_list(data, "excludes"),
            env=dict(env),
        )


def parse_config(path: str | os.PathLike[str]) -> Config:
    """Read and decode a TOML configuration file."""
    with open(path, "rb") as fh:
        data = tomllib.load(fh)
    return Config.from_mapping(data)