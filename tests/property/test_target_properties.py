from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from surfacectl.models import Terminal
from surfacectl.targets import resolve_target

_TEXT = st.text(alphabet="abcABC-12 ", max_size=8)
_TERMINALS = st.lists(
    st.builds(Terminal, id=_TEXT.filter(bool), title=_TEXT),
    max_size=6,
)


@given(target=_TEXT, terminals=_TERMINALS)
def test_resolution_is_idempotent(target: str, terminals: list[Terminal]) -> None:
    first = resolve_target(target, terminals)
    second = resolve_target(target, terminals)
    assert first is second


@given(target=_TEXT, terminals=_TERMINALS)
def test_resolved_terminal_satisfies_one_of_the_rules(target: str, terminals: list[Terminal]) -> None:
    found = resolve_target(target, terminals)
    if found is None:
        return
    lowered = target.lower()
    assert (
        found.id == target
        or found.title.lower() == lowered
        or lowered in found.title.lower()
        or found.id.startswith(target)
    )
    assert found in terminals


@given(terminals=_TERMINALS.filter(bool))
def test_every_identifier_resolves_to_a_terminal_with_that_identifier(
    terminals: list[Terminal],
) -> None:
    for terminal in terminals:
        found = resolve_target(terminal.id, terminals)
        assert found is not None
        assert found.id == terminal.id
