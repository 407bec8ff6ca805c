"""Client configuration: socket path resolution and optional TOML settings."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from surfacectl.logging import LOG_LEVELS, default_log_path, normalize_level

SOCKET_ENV = "SURFACECTL_SOCKET"
LOG_LEVEL_ENV = "SURFACECTL_LOG_LEVEL"
DEFAULT_SOCKET_PATH = Path(".config/surfacectl/api.sock")
DEFAULT_CONFIG_PATH = Path(".config/surfacectl/config.toml")
DEFAULT_REQUEST_TIMEOUT = 5.0
MAX_REQUEST_TIMEOUT = 300.0


class ClientConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    socket_path: Path
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0, le=MAX_REQUEST_TIMEOUT)
    log_level: str = "INFO"
    log_file: Path | None = None

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = normalize_level(value)
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return normalized


def resolve_socket_path(environ: Mapping[str, str], home: str | Path) -> Path:
    override = environ.get(SOCKET_ENV, "")
    if override:
        return Path(override)
    return Path(home) / DEFAULT_SOCKET_PATH


def get_config_path(home: str | Path, path: str | Path | None = None) -> Path:
    if path is None:
        return Path(home) / DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _read_toml(path: Path) -> dict[str, object]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return {}
    return raw if isinstance(raw, dict) else {}


def _sanitize(raw: Mapping[str, object], config: ClientConfig) -> ClientConfig:
    timeout = raw.get("request_timeout", config.request_timeout)
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
        if 0 < timeout <= MAX_REQUEST_TIMEOUT:
            config.request_timeout = float(timeout)

    log_level = raw.get("log_level", config.log_level)
    if isinstance(log_level, str) and normalize_level(log_level) in LOG_LEVELS:
        config.log_level = log_level

    log_file = raw.get("log_file")
    if isinstance(log_file, str) and log_file.strip():
        config.log_file = Path(log_file.strip()).expanduser()

    return config


def load_config(
    environ: Mapping[str, str],
    home: str | Path,
    path: str | Path | None = None,
) -> ClientConfig:
    config = ClientConfig(
        socket_path=resolve_socket_path(environ, home),
        log_file=default_log_path(home),
    )
    config = _sanitize(_read_toml(get_config_path(home, path)), config)

    env_level = environ.get(LOG_LEVEL_ENV, "").strip()
    if env_level and normalize_level(env_level) in LOG_LEVELS:
        config.log_level = env_level
    return config
