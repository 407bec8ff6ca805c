"""Resolve ``-t`` target strings against a terminal snapshot."""

from __future__ import annotations

from collections.abc import Sequence

from surfacectl.errors import TargetUnresolvedError
from surfacectl.models import Terminal


def resolve_target(target: str, terminals: Sequence[Terminal]) -> Terminal | None:
    """Return the first terminal matching ``target``.

    Rules are tried in order and the first rule with any match wins; within a
    rule the earliest terminal in ``terminals`` wins:

    1. exact id (case-sensitive)
    2. exact title, case-insensitive
    3. ``target`` is a case-insensitive substring of the title
    4. id prefix (case-sensitive)

    An empty target is a substring of every title, so it picks the first
    terminal.
    """
    lowered = target.lower()

    for terminal in terminals:
        if terminal.id == target:
            return terminal
    for terminal in terminals:
        if terminal.title.lower() == lowered:
            return terminal
    for terminal in terminals:
        if lowered in terminal.title.lower():
            return terminal
    for terminal in terminals:
        if terminal.id.startswith(target):
            return terminal
    return None


def require_target(target: str, terminals: Sequence[Terminal]) -> Terminal:
    terminal = resolve_target(target, terminals)
    if terminal is None:
        raise TargetUnresolvedError(
            f"no terminal matches target '{target}'",
            hint="run 'surfacectl list-surfaces' to see terminals",
        )
    return terminal
