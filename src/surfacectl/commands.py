"""CLI commands, their execution context, and the name/alias registry."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import NoReturn, TextIO

from surfacectl.client import SurfaceClient
from surfacectl.errors import CommandError
from surfacectl.keys import ENTER, parse_key
from surfacectl.models import Terminal
from surfacectl.targets import require_target

logger = py_logging.getLogger(__name__)

TITLE_ACTION = "set_surface_title"


@dataclass
class CommandContext:
    args: list[str]
    client: SurfaceClient
    stdout: TextIO = field(default_factory=lambda: sys.stdout)

    def write(self, text: str) -> None:
        self.stdout.write(text)


@dataclass(frozen=True)
class Command:
    name: str
    summary: str
    run: Callable[[CommandContext], None]
    aliases: tuple[str, ...] = ()


class CommandRegistry:
    """Fixed command set with an alias index built once at construction."""

    def __init__(self, commands: Iterable[Command]) -> None:
        self._commands: dict[str, Command] = {}
        self._aliases: dict[str, str] = {}
        for command in commands:
            for name in (command.name, *command.aliases):
                if name in self._commands or name in self._aliases:
                    raise ValueError(f"Command name or alias registered twice: {name}")
            self._commands[command.name] = command
            for alias in command.aliases:
                self._aliases[alias] = command.name

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def resolve(self, name: str) -> Command | None:
        command = self._commands.get(name)
        if command is not None:
            return command
        canonical = self._aliases.get(name)
        if canonical is None:
            return None
        return self._commands[canonical]


class CommandArgumentParser(argparse.ArgumentParser):
    """argparse variant that reports usage problems as ``CommandError``."""

    def __init__(self, prog: str) -> None:
        super().__init__(prog=prog, add_help=False, allow_abbrev=False)

    def error(self, message: str) -> NoReturn:
        raise CommandError(f"{self.prog}: {message}")


def _parser(name: str) -> CommandArgumentParser:
    return CommandArgumentParser(prog=f"surfacectl {name}")


def _describe(terminal: Terminal) -> str:
    line = f"{terminal.id}: {terminal.title}"
    if terminal.columns is not None and terminal.rows is not None:
        line += f" [{terminal.columns}x{terminal.rows}]"
    if terminal.focused:
        line += " (focused)"
    if terminal.working_directory:
        line += f" {terminal.working_directory}"
    return line


def list_surfaces(context: CommandContext) -> None:
    _parser("list-surfaces").parse_args(context.args)
    for terminal in context.client.list_terminals():
        context.write(_describe(terminal) + "\n")


def send_keys(context: CommandContext) -> None:
    parser = _parser("send-keys")
    parser.add_argument("-t", dest="target", required=True)
    parser.add_argument("-l", "--literal", action="store_true")
    parser.add_argument("--enter", action="store_true")
    parser.add_argument("keys", nargs="*")
    namespace = parser.parse_args(context.args)
    if not namespace.keys and not namespace.enter:
        raise CommandError("send-keys: nothing to send")

    client = context.client
    terminal = require_target(namespace.target, client.list_terminals())
    logger.debug("send-keys terminal=%s literal=%s", terminal.id, namespace.literal)

    if namespace.literal:
        text = "".join(namespace.keys)
        if text:
            client.send_text(terminal.id, text)
    else:
        for token in namespace.keys:
            stroke = parse_key(token)
            if stroke is None:
                client.send_text(terminal.id, token)
            else:
                client.send_key(terminal.id, stroke)

    if namespace.enter:
        client.send_key(terminal.id, ENTER)


def set_title(context: CommandContext) -> None:
    parser = _parser("set-title")
    parser.add_argument("-t", dest="target", required=True)
    parser.add_argument("title", nargs="+")
    namespace = parser.parse_args(context.args)

    title = " ".join(namespace.title)
    terminal = require_target(namespace.target, context.client.list_terminals())
    context.client.perform_action(terminal.id, f"{TITLE_ACTION}:{title}")


def _line_index(value: int, count: int) -> int:
    if value < 0:
        return max(count + value, 0)
    return value


def select_lines(contents: str, start: int | None, end: int | None) -> list[str]:
    """Inclusive ``start``..``end`` slice; negative values count from the last line."""
    lines = contents.splitlines()
    first = _line_index(start, len(lines)) if start is not None else 0
    last = _line_index(end, len(lines)) if end is not None else len(lines) - 1
    return lines[first : last + 1]


def capture_pane(context: CommandContext) -> None:
    parser = _parser("capture-pane")
    parser.add_argument("-t", dest="target", default=None)
    parser.add_argument("-S", dest="start", type=int, default=None)
    parser.add_argument("-E", dest="end", type=int, default=None)
    # printing is the only output mode; accepted for tmux compatibility
    parser.add_argument("-p", dest="print_output", action="store_true")
    namespace = parser.parse_args(context.args)

    terminals = context.client.list_terminals()
    if namespace.target is None:
        terminal = next((item for item in terminals if item.focused), None)
        if terminal is None:
            raise CommandError("capture-pane: no focused terminal; pass -t <target>")
    else:
        terminal = require_target(namespace.target, terminals)

    contents = context.client.read_screen(terminal.id)
    lines = select_lines(contents, namespace.start, namespace.end)
    if lines:
        context.write("\n".join(lines) + "\n")


BUILTIN_COMMANDS: tuple[Command, ...] = (
    Command("list-surfaces", "List all terminals", list_surfaces, aliases=("ls",)),
    Command("send-keys", "Send keys to a terminal (requires -t)", send_keys),
    Command("set-title", "Set terminal title (requires -t)", set_title),
    Command(
        "capture-pane",
        "Capture pane contents (visible only by default)",
        capture_pane,
        aliases=("capturep",),
    ),
)


def default_registry() -> CommandRegistry:
    return CommandRegistry(BUILTIN_COMMANDS)
