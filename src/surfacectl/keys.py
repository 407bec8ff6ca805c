"""tmux-style key notation (``Enter``, ``C-c``, ``M-S-Left``) to key strokes."""

from __future__ import annotations

from surfacectl.models import KeyStroke

_MODIFIER_PREFIXES = {
    "C-": "ctrl",
    "M-": "alt",
    "S-": "shift",
}

# name -> (key identifier, unshifted codepoint)
_NAMED_KEYS: dict[str, tuple[str, int]] = {
    "enter": ("enter", 0x0D),
    "escape": ("escape", 0x1B),
    "esc": ("escape", 0x1B),
    "tab": ("tab", 0x09),
    "bspace": ("backspace", 0x7F),
    "space": ("space", 0x20),
    "up": ("arrow_up", 0),
    "down": ("arrow_down", 0),
    "left": ("arrow_left", 0),
    "right": ("arrow_right", 0),
    "home": ("home", 0),
    "end": ("end", 0),
    "pageup": ("page_up", 0),
    "pgup": ("page_up", 0),
    "ppage": ("page_up", 0),
    "pagedown": ("page_down", 0),
    "pgdn": ("page_down", 0),
    "npage": ("page_down", 0),
    "dc": ("delete", 0),
    "delete": ("delete", 0),
    "ic": ("insert", 0),
    "insert": ("insert", 0),
}
_NAMED_KEYS.update({f"f{index}": (f"f{index}", 0) for index in range(1, 13)})

ENTER = KeyStroke(key="enter", unshifted_codepoint=0x0D)


def _split_modifiers(token: str) -> tuple[frozenset[str], str]:
    mods: set[str] = set()
    rest = token
    while len(rest) > 2 and rest[:2] in _MODIFIER_PREFIXES:
        mods.add(_MODIFIER_PREFIXES[rest[:2]])
        rest = rest[2:]
    return frozenset(mods), rest


def parse_key(token: str) -> KeyStroke | None:
    """Return a key stroke for a key name, or ``None`` when ``token`` is plain text.

    A bare single character is text; it only becomes a key stroke with at
    least one modifier prefix (``C-c``).
    """
    if not token:
        return None
    mods, rest = _split_modifiers(token)
    named = _NAMED_KEYS.get(rest.lower())
    if named is not None:
        key, codepoint = named
        return KeyStroke(key=key, mods=mods, unshifted_codepoint=codepoint)
    if mods and len(rest) == 1:
        char = rest.lower()
        return KeyStroke(key=char, mods=mods, unshifted_codepoint=ord(char))
    return None
