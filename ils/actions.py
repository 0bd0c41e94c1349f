"""Logical actions produced by resolving key events.

Action values double as the keys used in ``keybindings.toml``.
"""

from __future__ import annotations

from enum import Enum


class Action(str, Enum):
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    ENTER = "enter"
    BACK = "back"
    HOME = "home"
    TOGGLE_HIDDEN = "toggle_hidden"
    TOGGLE_HELP = "toggle_help"
    TOGGLE_PREVIEW = "toggle_preview"
    SCROLL_PREVIEW_UP = "scroll_preview_up"
    SCROLL_PREVIEW_DOWN = "scroll_preview_down"
    SCROLL_PREVIEW_FAST_UP = "scroll_preview_fast_up"
    SCROLL_PREVIEW_FAST_DOWN = "scroll_preview_fast_down"
    INCREASE_PREVIEW_HEIGHT = "increase_preview_height"
    DECREASE_PREVIEW_HEIGHT = "decrease_preview_height"
    SELECT = "select"
    QUIT = "quit"
    NOOP = "noop"


# Declaration order decides which action keeps a key bound twice.
BINDABLE_ACTIONS: tuple[Action, ...] = tuple(action for action in Action if action is not Action.NOOP)

ACTION_LABELS: dict[Action, str] = {
    Action.MOVE_UP: "Move up",
    Action.MOVE_DOWN: "Move down",
    Action.MOVE_LEFT: "Move left",
    Action.MOVE_RIGHT: "Move right",
    Action.ENTER: "Open directory",
    Action.BACK: "Go back",
    Action.HOME: "Go home",
    Action.TOGGLE_HIDDEN: "Toggle hidden files",
    Action.TOGGLE_HELP: "Toggle this help",
    Action.TOGGLE_PREVIEW: "Toggle preview",
    Action.SCROLL_PREVIEW_UP: "Scroll preview up",
    Action.SCROLL_PREVIEW_DOWN: "Scroll preview down",
    Action.SCROLL_PREVIEW_FAST_UP: "Scroll preview up one page",
    Action.SCROLL_PREVIEW_FAST_DOWN: "Scroll preview down one page",
    Action.INCREASE_PREVIEW_HEIGHT: "Increase preview height",
    Action.DECREASE_PREVIEW_HEIGHT: "Decrease preview height",
    Action.SELECT: "Select (edit file or cd to dir)",
    Action.QUIT: "Quit",
}
