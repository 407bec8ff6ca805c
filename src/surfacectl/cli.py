"""Public CLI contract and entrypoint."""

from __future__ import annotations

import logging as py_logging
import os
import sys
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import TextIO

from surfacectl.client import SurfaceClient
from surfacectl.commands import CommandContext, CommandRegistry, default_registry
from surfacectl.config import LOG_LEVEL_ENV, SOCKET_ENV, ClientConfig, load_config
from surfacectl.errors import CommandUnknownError, ExitCode, SurfaceCtlError, user_facing_error
from surfacectl.logging import configure_logging

HELP_FLAGS = ("-h", "--help")

_USAGE_HEAD = """surfacectl - terminal control-plane client (Unix socket)

Usage:
  surfacectl <command> [options]

Commands:
"""

_USAGE_TAIL = f"""
Options:
  -t <target>           Target terminal (id, title, or id prefix)
  -l, --literal         Send keys literally (no key-name handling)
  --enter               Press Enter after sending keys
  -S <start>            capture-pane start line (0 = first visible line)
  -E <end>              capture-pane end line (0 = first visible line)
  -p                    capture-pane print to stdout (always on)
  -h, --help            Show this help

Environment:
  {SOCKET_ENV}     Control socket path (default ~/.config/surfacectl/api.sock)
  {LOG_LEVEL_ENV}  Also log to stderr at this level

Examples:
  surfacectl list-surfaces
  surfacectl send-keys -t workspace "ls -la" --enter
  surfacectl send-keys -t 550e8400 C-c
  surfacectl set-title -t workspace "build: release"
  surfacectl capturep -t 550e8400 -S 0 -E 5
"""

ClientFactory = Callable[[ClientConfig], SurfaceClient]


def format_usage(registry: CommandRegistry) -> str:
    lines = []
    for command in registry:
        names = ", ".join((command.name, *command.aliases))
        lines.append(f"  {names:<22}{command.summary}")
    return _USAGE_HEAD + "\n".join(lines) + "\n" + _USAGE_TAIL


def wants_help(args: Sequence[str]) -> bool:
    return not args or any(arg in HELP_FLAGS for arg in args)


def _default_client(config: ClientConfig) -> SurfaceClient:
    return SurfaceClient(config.socket_path, timeout=config.request_timeout)


def _home_dir() -> Path:
    try:
        return Path.home()
    except RuntimeError:
        return Path.cwd()


def main(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    home: str | Path | None = None,
    registry: CommandRegistry | None = None,
    client_factory: ClientFactory | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    args = list(argv) if argv is not None else list(sys.argv[1:])
    out = stdout or sys.stdout
    err = stderr or sys.stderr
    registry = registry or default_registry()

    if wants_help(args):
        out.write(format_usage(registry))
        return int(ExitCode.SUCCESS)

    env = environ if environ is not None else os.environ
    logger = configure_logging(console=False)
    try:
        config = load_config(env, home if home is not None else _home_dir())
        logger = configure_logging(
            config.log_level,
            err,
            log_file=config.log_file,
            console=bool(env.get(LOG_LEVEL_ENV, "").strip()),
        )

        name = args[0]
        command = registry.resolve(name)
        if command is None:
            raise CommandUnknownError(
                f"unknown command '{name}'",
                hint="run 'surfacectl --help' for usage",
            )

        client = (client_factory or _default_client)(config)
        context = CommandContext(args=args[1:], client=client, stdout=out)
        logger.debug("Running command=%s socket=%s", command.name, config.socket_path)
        command.run(context)
    except SurfaceCtlError as exc:
        logger.error(
            "Handled %s (code=%s): %s",
            type(exc).__name__,
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=err)
        return int(exc.code)
    except Exception as exc:
        logger.exception("Unhandled exception in CLI entrypoint")
        print(user_facing_error(str(exc) or type(exc).__name__), file=err)
        return int(ExitCode.FAILURE)
    return int(ExitCode.SUCCESS)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
