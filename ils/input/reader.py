"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into ``KeyEvent`` values.
Handles ESC-sequence timing, CSI modifier combos and multi-byte UTF-8.
"""

from __future__ import annotations

import os
import select

from .keys import KeyEvent

ESC_SEQUENCE_TIMEOUT_MS = 25
CSI_MAX_BYTES = 16
_PENDING_BYTES: list[bytes] = []

# Escape sequences with no key name. No key spec parses to it.
UNKNOWN_KEY = KeyEvent("unknown")

_CSI_FINAL_KEYS = {
    b"A": "up",
    b"B": "down",
    b"C": "right",
    b"D": "left",
    b"H": "home",
    b"F": "end",
}
_CSI_TILDE_KEYS = {
    "1": "home",
    "3": "delete",
    "4": "end",
    "5": "pageup",
    "6": "pagedown",
    "7": "home",
    "8": "end",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _modifiers_from_param(param: str) -> frozenset[str]:
    """Decode the xterm modifier parameter (``1 + bitmask``) of a CSI sequence."""
    try:
        mask = int(param) - 1
    except ValueError:
        return frozenset()
    mods = set()
    if mask & 1:
        mods.add("shift")
    if mask & 2:
        mods.add("alt")
    if mask & 4:
        mods.add("ctrl")
    return frozenset(mods)


def _decode_utf8(fd: int, first: bytes) -> str:
    lead = first[0]
    if lead >= 0xF0:
        extra = 3
    elif lead >= 0xE0:
        extra = 2
    elif lead >= 0xC0:
        extra = 1
    else:
        extra = 0
    data = first
    for _ in range(extra):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data.decode("utf-8", errors="replace")


def _read_csi(fd: int) -> KeyEvent:
    body = b""
    while len(body) < CSI_MAX_BYTES:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return UNKNOWN_KEY
        if 0x40 <= part[0] <= 0x7E:
            params = body.decode("ascii", errors="replace").split(";")
            modifiers = _modifiers_from_param(params[1]) if len(params) > 1 else frozenset()
            if part == b"~":
                name = _CSI_TILDE_KEYS.get(params[0])
                return KeyEvent(name, modifiers) if name else UNKNOWN_KEY
            name = _CSI_FINAL_KEYS.get(part)
            if name is None:
                return UNKNOWN_KEY
            return KeyEvent(name, modifiers)
        body += part
    return UNKNOWN_KEY


def read_key(fd: int, timeout_ms: int | None = None) -> KeyEvent | None:
    """Block for one key press and decode it.

    Returns ``None`` on end of input, or when ``timeout_ms`` elapses before
    any byte arrives.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None

        ch = os.read(fd, 1)
        if not ch:
            return None

    if ch in {b"\r", b"\n"}:
        return KeyEvent("enter")
    if ch in {b"\x08", b"\x7f"}:
        return KeyEvent("backspace")
    if ch == b"\t":
        return KeyEvent("tab")
    if ch == b" ":
        return KeyEvent("space")
    if b"\x01" <= ch <= b"\x1a":
        return KeyEvent.of(chr(ch[0] + 0x60), "ctrl")

    if ch != b"\x1b":
        if ch[0] >= 0x80:
            return KeyEvent(_decode_utf8(fd, ch))
        return KeyEvent(ch.decode("ascii", errors="replace"))

    # Escape / arrow key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return KeyEvent("esc")
    if seq == b"[":
        return _read_csi(fd)
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        name = _CSI_FINAL_KEYS.get(final) if final is not None else None
        return KeyEvent(name) if name else UNKNOWN_KEY
    _PENDING_BYTES.append(seq)
    return KeyEvent("esc")
