"""Persistent TOML configuration.

Files live in the platform config directory (``~/.config/ils`` on Linux):
``keybindings.toml``, ``colors.toml``, ``settings.toml`` and the plain-text
``preview_ratio``. Loading never raises: a malformed file is logged once
and replaced by built-in defaults for the session.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

import toml
from platformdirs import user_config_dir

from .actions import BINDABLE_ACTIONS, Action
from .errors import ConfigParseError
from .layout import DEFAULT_PREVIEW_RATIO

logger = logging.getLogger(__name__)

APP_NAME = "ils"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
KEYBINDINGS_FILENAME = "keybindings.toml"
COLORS_FILENAME = "colors.toml"
SETTINGS_FILENAME = "settings.toml"
PREVIEW_RATIO_FILENAME = "preview_ratio"

DEFAULT_KEYBINDINGS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        Action.MOVE_UP.value: ("w", "Up"),
        Action.MOVE_DOWN.value: ("s", "Down"),
        Action.MOVE_LEFT.value: ("a", "Left"),
        Action.MOVE_RIGHT.value: ("d", "Right"),
        Action.ENTER.value: ("l", "Enter"),
        Action.BACK.value: ("j", "b", "Backspace"),
        Action.HOME.value: ("h",),
        Action.TOGGLE_HIDDEN.value: (".",),
        Action.TOGGLE_HELP.value: ("?",),
        Action.TOGGLE_PREVIEW.value: ("p",),
        Action.SCROLL_PREVIEW_UP.value: ("i",),
        Action.SCROLL_PREVIEW_DOWN.value: ("o",),
        Action.SCROLL_PREVIEW_FAST_UP.value: ("I", "Shift+Up"),
        Action.SCROLL_PREVIEW_FAST_DOWN.value: ("O", "Shift+Down"),
        Action.INCREASE_PREVIEW_HEIGHT.value: ("+", "="),
        Action.DECREASE_PREVIEW_HEIGHT.value: ("-", "_"),
        Action.SELECT.value: ("Space",),
        Action.QUIT.value: ("q", "Esc"),
    }
)

DEFAULT_COLORS: Mapping[str, str] = MappingProxyType(
    {
        "path_fg": "white",
        "path_bg": "#333333",
        "selected_fg": "none",
        "selected_bg": "none",
        "directory_fg": "cyan",
        "preview_border_fg": "darkgrey",
    }
)


@dataclass(frozen=True)
class Settings:
    exit_after_edit: bool = False
    preview_scroll_amount: int = 10
    show_dir_slash: bool = False
    style: str = "monokai"


@dataclass(frozen=True)
class AppConfig:
    """Immutable configuration snapshot built once at startup."""

    keybindings: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: DEFAULT_KEYBINDINGS)
    colors: Mapping[str, str] = field(default_factory=lambda: DEFAULT_COLORS)
    settings: Settings = field(default_factory=Settings)
    preview_ratio: float = DEFAULT_PREVIEW_RATIO
    config_dir: Path = CONFIG_DIR

    def save_preview_ratio(self, ratio: float) -> None:
        save_preview_ratio(ratio, self.config_dir)


def _read_toml(path: Path) -> dict[str, object] | None:
    """Return the parsed document, ``None`` when the file does not exist."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise ConfigParseError(path, exc.strerror or str(exc)) from exc
    try:
        return toml.loads(text)
    except toml.TomlDecodeError as exc:
        raise ConfigParseError(path, str(exc)) from exc


def load_keybindings(config_dir: Path = CONFIG_DIR) -> Mapping[str, tuple[str, ...]]:
    """Load key bindings merged over the defaults.

    Actions missing from the file keep their default keys. Unknown action
    names are passed through so the resolver can report them.
    """
    path = config_dir / KEYBINDINGS_FILENAME
    data = _read_toml(path)
    if data is None:
        return DEFAULT_KEYBINDINGS

    merged = dict(DEFAULT_KEYBINDINGS)
    for name, keys in data.items():
        if isinstance(keys, str):
            keys = [keys]
        if not isinstance(keys, list) or not all(isinstance(key, str) for key in keys):
            raise ConfigParseError(path, f"{name!r} must be a list of key strings")
        merged[name] = tuple(keys)
    return MappingProxyType(merged)


def load_colors(config_dir: Path = CONFIG_DIR) -> Mapping[str, str]:
    path = config_dir / COLORS_FILENAME
    data = _read_toml(path)
    if data is None:
        return DEFAULT_COLORS

    merged = dict(DEFAULT_COLORS)
    for name, value in data.items():
        if not isinstance(value, str):
            raise ConfigParseError(path, f"{name!r} must be a color string")
        merged[name] = value
    return MappingProxyType(merged)


def load_settings(config_dir: Path = CONFIG_DIR) -> Settings:
    path = config_dir / SETTINGS_FILENAME
    data = _read_toml(path)
    if data is None:
        return Settings()

    defaults = Settings()
    exit_after_edit = data.get("exit_after_edit", defaults.exit_after_edit)
    scroll_amount = data.get("preview_scroll_amount", defaults.preview_scroll_amount)
    show_dir_slash = data.get("show_dir_slash", defaults.show_dir_slash)
    style = data.get("style", defaults.style)
    if not isinstance(exit_after_edit, bool):
        raise ConfigParseError(path, "exit_after_edit must be true or false")
    if isinstance(scroll_amount, bool) or not isinstance(scroll_amount, int) or scroll_amount < 1:
        raise ConfigParseError(path, "preview_scroll_amount must be a positive integer")
    if not isinstance(show_dir_slash, bool):
        raise ConfigParseError(path, "show_dir_slash must be true or false")
    if not isinstance(style, str) or not style.strip():
        raise ConfigParseError(path, "style must be a non-empty string")
    return Settings(
        exit_after_edit=exit_after_edit,
        preview_scroll_amount=scroll_amount,
        show_dir_slash=show_dir_slash,
        style=style.strip(),
    )


def load_preview_ratio(config_dir: Path = CONFIG_DIR) -> float | None:
    """Read the saved preview ratio; ``None`` when it has never been saved."""
    path = config_dir / PREVIEW_RATIO_FILENAME
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise ConfigParseError(path, exc.strerror or str(exc)) from exc
    try:
        ratio = float(text.strip())
    except ValueError as exc:
        raise ConfigParseError(path, f"not a number: {text.strip()!r}") from exc
    if math.isnan(ratio) or not 0.0 <= ratio <= 1.0:
        raise ConfigParseError(path, f"ratio {ratio} outside [0.0, 1.0]")
    return ratio


def _load_or_default(loader, config_dir: Path, default):
    try:
        return loader(config_dir)
    except ConfigParseError as exc:
        logger.warning("%s; using defaults", exc)
        return default


def load_app_config(config_dir: Path = CONFIG_DIR) -> AppConfig:
    """Build the session configuration, falling back per file on parse errors."""
    ratio = _load_or_default(load_preview_ratio, config_dir, DEFAULT_PREVIEW_RATIO)
    return AppConfig(
        keybindings=_load_or_default(load_keybindings, config_dir, DEFAULT_KEYBINDINGS),
        colors=_load_or_default(load_colors, config_dir, DEFAULT_COLORS),
        settings=_load_or_default(load_settings, config_dir, Settings()),
        preview_ratio=DEFAULT_PREVIEW_RATIO if ratio is None else ratio,
        config_dir=config_dir,
    )


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def save_keybindings(bindings: Mapping[str, tuple[str, ...]], config_dir: Path = CONFIG_DIR) -> Path:
    path = config_dir / KEYBINDINGS_FILENAME
    ordered = {action.value: list(bindings[action.value]) for action in BINDABLE_ACTIONS if action.value in bindings}
    _write_text(path, toml.dumps(ordered))
    return path


def save_colors(colors: Mapping[str, str], config_dir: Path = CONFIG_DIR) -> Path:
    path = config_dir / COLORS_FILENAME
    _write_text(path, toml.dumps(dict(colors)))
    return path


def save_settings(settings: Settings, config_dir: Path = CONFIG_DIR) -> Path:
    path = config_dir / SETTINGS_FILENAME
    data = {
        "exit_after_edit": settings.exit_after_edit,
        "preview_scroll_amount": settings.preview_scroll_amount,
        "show_dir_slash": settings.show_dir_slash,
        "style": settings.style,
    }
    _write_text(path, toml.dumps(data))
    return path


def save_preview_ratio(ratio: float, config_dir: Path = CONFIG_DIR) -> None:
    """Persist the preview ratio; write failures are logged, never raised."""
    path = config_dir / PREVIEW_RATIO_FILENAME
    try:
        _write_text(path, f"{round(ratio, 2)}")
    except OSError as exc:
        logger.warning("cannot save preview ratio to %s: %s", path, exc)
