from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from surfacectl.config import (
    DEFAULT_REQUEST_TIMEOUT,
    ClientConfig,
    get_config_path,
    load_config,
    resolve_socket_path,
)


def test_socket_override_wins_when_non_empty(tmp_path: Path) -> None:
    assert resolve_socket_path({"SURFACECTL_SOCKET": "/run/api.sock"}, tmp_path) == Path("/run/api.sock")


@pytest.mark.parametrize("environ", [{}, {"SURFACECTL_SOCKET": ""}, {"OTHER": "/x"}])
def test_socket_defaults_under_home(tmp_path: Path, environ: dict[str, str]) -> None:
    assert resolve_socket_path(environ, tmp_path) == tmp_path / ".config" / "surfacectl" / "api.sock"


def test_load_config_defaults(tmp_path: Path) -> None:
    config = load_config({}, tmp_path)
    assert config.socket_path == tmp_path / ".config/surfacectl/api.sock"
    assert config.request_timeout == DEFAULT_REQUEST_TIMEOUT
    assert config.log_level == "INFO"
    assert config.log_file == tmp_path / ".config/surfacectl/logs/surfacectl.log"


def test_load_config_reads_toml_settings(tmp_path: Path) -> None:
    path = get_config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text(
        'request_timeout = 2.5\nlog_level = "warning"\nlog_file = "/var/log/sctl.log"\nsocket_path = "/ignored"\n',
        encoding="utf-8",
    )
    config = load_config({}, tmp_path)
    assert config.request_timeout == 2.5
    assert config.log_level == "WARN"
    assert config.log_file == Path("/var/log/sctl.log")
    assert config.socket_path == tmp_path / ".config/surfacectl/api.sock"


def test_load_config_ignores_invalid_values(tmp_path: Path) -> None:
    path = get_config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text('request_timeout = -1\nlog_level = "loud"\n', encoding="utf-8")
    config = load_config({}, tmp_path)
    assert config.request_timeout == DEFAULT_REQUEST_TIMEOUT
    assert config.log_level == "INFO"


def test_load_config_ignores_broken_toml(tmp_path: Path) -> None:
    path = get_config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text("request_timeout = [", encoding="utf-8")
    assert load_config({}, tmp_path).request_timeout == DEFAULT_REQUEST_TIMEOUT


def test_log_level_env_overrides_file(tmp_path: Path) -> None:
    config = load_config({"SURFACECTL_LOG_LEVEL": "debug"}, tmp_path)
    assert config.log_level == "DEBUG"


def test_client_config_validates_assignment(tmp_path: Path) -> None:
    config = ClientConfig(socket_path=tmp_path / "api.sock")
    with pytest.raises(ValidationError):
        config.request_timeout = 0
    with pytest.raises(ValidationError):
        config.log_level = "chatty"
