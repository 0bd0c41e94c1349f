"""Key events, key-specification parsing, and the action resolver.

Key specifications are the strings users write in ``keybindings.toml``:
single characters (``w``, ``?``, ``I``), named keys (``Up``, ``Enter``,
``Space``, ``Backspace``, ``Esc``) and modifier combos (``Shift+Up``,
``Ctrl+u``). Both specs and decoded terminal input normalize to the same
``KeyEvent`` so resolution is a single dictionary lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..actions import BINDABLE_ACTIONS, Action

logger = logging.getLogger(__name__)

MODIFIERS = ("ctrl", "alt", "shift")
NAMED_KEYS = (
    "up",
    "down",
    "left",
    "right",
    "enter",
    "backspace",
    "delete",
    "esc",
    "tab",
    "space",
    "home",
    "end",
    "pageup",
    "pagedown",
)
_KEY_ALIASES = {
    "return": "enter",
    "escape": "esc",
    "bs": "backspace",
    "del": "delete",
    "pgup": "pageup",
    "pgdn": "pagedown",
}
_MODIFIER_ALIASES = {
    "control": "ctrl",
    "meta": "alt",
    "option": "alt",
}


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key press: a key code plus its modifier set.

    Printable characters use the character itself as ``code`` (so Shift+i
    arrives as ``"I"`` with no modifiers); other keys use a lowercase name
    from ``NAMED_KEYS``.
    """

    code: str
    modifiers: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, code: str, *modifiers: str) -> KeyEvent:
        return cls(code, frozenset(modifiers))


def _normalize(code: str, modifiers: set[str]) -> KeyEvent:
    if code == " ":
        code = "space"
    if len(code) == 1:
        if "shift" in modifiers:
            # Terminals deliver shifted characters already; fold the modifier in.
            modifiers.discard("shift")
            code = code.upper()
        if "ctrl" in modifiers:
            code = code.lower()
    return KeyEvent(code, frozenset(modifiers))


def parse_key_spec(spec: str) -> KeyEvent:
    """Parse one key specification string into a ``KeyEvent``.

    Raises ``ValueError`` for empty specs, unknown modifiers or unknown key
    names.
    """
    if not isinstance(spec, str) or spec == "":
        raise ValueError(f"invalid key specification: {spec!r}")

    if len(spec) == 1:
        key_part, modifier_text = spec, ""
    elif spec.endswith("++"):
        key_part, modifier_text = "+", spec[:-2]
    elif "+" in spec:
        modifier_text, _, key_part = spec.rpartition("+")
    else:
        key_part, modifier_text = spec, ""

    modifiers: set[str] = set()
    if modifier_text:
        for raw in modifier_text.split("+"):
            name = raw.strip().lower()
            name = _MODIFIER_ALIASES.get(name, name)
            if name not in MODIFIERS:
                raise ValueError(f"unknown modifier {raw!r} in key specification {spec!r}")
            modifiers.add(name)

    if len(key_part) == 1:
        return _normalize(key_part, modifiers)

    name = key_part.strip().lower()
    name = _KEY_ALIASES.get(name, name)
    if name not in NAMED_KEYS:
        raise ValueError(f"unknown key name {key_part!r} in key specification {spec!r}")
    return _normalize(name, modifiers)


def format_key_event(event: KeyEvent) -> str:
    """Render a key event the way it would be written in a key specification."""
    if len(event.code) == 1:
        key = event.code
    else:
        key = event.code.capitalize()
    prefix = "".join(f"{mod.capitalize()}+" for mod in MODIFIERS if mod in event.modifiers)
    return prefix + key


class KeyBindingResolver:
    """Resolve key events to actions using an immutable binding table.

    ``bindings`` maps action names (``Action`` values) to key specifications.
    Invalid specifications, unknown action names, and keys bound to more than
    one action are collected in ``problems`` and logged once; the first
    binding in action declaration order wins.
    """

    def __init__(self, bindings: Mapping[str, Sequence[str]]) -> None:
        self.problems: list[str] = []
        self._table: dict[KeyEvent, Action] = {}
        self._keys_by_action: dict[Action, tuple[KeyEvent, ...]] = {}

        known = {action.value for action in BINDABLE_ACTIONS}
        for name in bindings:
            if name not in known:
                self.problems.append(f"unknown action {name!r} in keybindings")

        for action in BINDABLE_ACTIONS:
            bound: list[KeyEvent] = []
            for spec in bindings.get(action.value, ()):
                try:
                    event = parse_key_spec(spec)
                except ValueError as exc:
                    self.problems.append(str(exc))
                    continue
                owner = self._table.get(event)
                if owner is None:
                    self._table[event] = action
                    bound.append(event)
                elif owner is not action:
                    self.problems.append(
                        f"key {format_key_event(event)!r} is bound to both "
                        f"{owner.value!r} and {action.value!r}; keeping {owner.value!r}"
                    )
            self._keys_by_action[action] = tuple(bound)

        for problem in self.problems:
            logger.warning("keybindings: %s", problem)

    def resolve(self, event: KeyEvent) -> Action:
        """Return the action bound to ``event`` or ``Action.NOOP``."""
        return self._table.get(event, Action.NOOP)

    def keys_for(self, action: Action) -> tuple[str, ...]:
        """Return display labels of the keys bound to ``action``."""
        return tuple(format_key_event(event) for event in self._keys_by_action.get(action, ()))
