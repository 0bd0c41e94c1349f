"""Input-layer public API: raw key decoding and action resolution."""

from .keys import KeyBindingResolver, KeyEvent, format_key_event, parse_key_spec
from .reader import ESC_SEQUENCE_TIMEOUT_MS, UNKNOWN_KEY, _PENDING_BYTES, read_key

__all__ = [
    "read_key",
    "_PENDING_BYTES",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "UNKNOWN_KEY",
    "KeyEvent",
    "KeyBindingResolver",
    "parse_key_spec",
    "format_key_event",
]
