#!/usr/bin/env python3
# waste_inventory_ui.py

"""
Full‑screen terminal front end for the waste inventory editor.

Rendering is a pure function of ApplicationState (``render``); curses only
paints the resulting lines and turns key presses into InputEvents.
"""

import curses
import logging
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from waste_config import get_config
from waste_db import WasteDatabase
from waste_inventory import (
    Action,
    ApplicationState,
    CursorMode,
    InputEvent,
    InventoryEditor,
    Mode,
    StoreError,
)

logger = logging.getLogger(__name__)

PROMPT = "> "
ROW_FORMAT = "{:<10} | {:<10} | {:<8.2f} | {:<10} | {:<15}"
TABLE_HEADER = "Name | Type | Quantity | Location | Disposal Method"
BROWSING_HELP = "Press (a) to add, (d) to delete, up/down to move, (q) to quit"
FILLING_HELP = "Press (enter) to move to next field, (esc) to cancel"


# --------------------------------------------------------------------- #
#   Rendering
# --------------------------------------------------------------------- #
class Style(Enum):
    PLAIN = "plain"
    TITLE = "title"
    SELECTED = "selected"
    FOCUSED = "focused"
    BLURRED = "blurred"
    HELP = "help"
    ERROR = "error"


@dataclass
class Frame:
    lines: List[Tuple[str, Style]] = field(default_factory=list)
    cursor: Optional[Tuple[int, int]] = None  # (row, col) of the text cursor
    table: Tuple[int, int] = (0, 0)  # (first line, count) of the item rows
    anchor: int = 0  # item row that must stay visible

    def add(self, text: str = "", style: Style = Style.PLAIN) -> None:
        self.lines.append((text, style))

    def text(self) -> str:
        return "\n".join(line for line, _ in self.lines)

    def fit(self, height: int) -> "Frame":
        """
        Return a copy no taller than ``height``.

        Item rows scroll first, keeping ``anchor`` in view; if that is not
        enough the top lines are dropped so help and errors stay on screen.
        """
        lines = list(self.lines)
        cursor = self.cursor
        start, count = self.table

        overflow = len(lines) - height
        if overflow > 0 and count > 1:
            keep = max(1, count - overflow)
            first = min(max(0, self.anchor - keep // 2), count - keep)
            lines[start:start + count] = lines[start + first:start + first + keep]
            if cursor and cursor[0] >= start + count:
                cursor = (cursor[0] - (count - keep), cursor[1])

        overflow = len(lines) - max(0, height)
        if overflow > 0:
            lines = lines[overflow:]
            if cursor:
                cursor = (cursor[0] - overflow, cursor[1]) if cursor[0] >= overflow else None

        return Frame(lines, cursor)


def format_row(item) -> str:
    return ROW_FORMAT.format(item.name, item.waste_type, item.quantity, item.location, item.method)


def render(state: ApplicationState) -> Frame:
    """Build the screen for ``state``. No curses calls, no side effects."""
    frame = Frame()
    browsing = state.mode is Mode.BROWSING

    frame.add("Waste Management System", Style.TITLE)
    frame.add()

    if state.items:
        frame.add("Current Waste Items", Style.TITLE)
        frame.add(TABLE_HEADER, Style.TITLE)
        frame.table = (len(frame.lines), len(state.items))
        frame.anchor = state.cursor_index or 0
        for i, item in enumerate(state.items):
            selected = browsing and state.cursor_index == i
            frame.add(format_row(item), Style.SELECTED if selected else Style.PLAIN)
        frame.add()

    frame.add(f"Total Items: {len(state.items)} | Total Quantity: {state.total_quantity:.2f}")
    frame.add()

    if not browsing:
        frame.add("Add New Waste Item", Style.TITLE)
        for i, form_field in enumerate(state.fields):
            focused = i == state.focus_index
            if form_field.value:
                line = PROMPT + form_field.value
                style = Style.FOCUSED if focused else Style.PLAIN
            else:
                line = PROMPT + form_field.placeholder
                style = Style.BLURRED
            if focused and state.cursor_mode is not CursorMode.HIDE:
                frame.cursor = (len(frame.lines), len(PROMPT) + len(form_field.value))
            frame.add(line, style)

        frame.add()
        if state.focus_index >= len(state.fields) - 1:
            frame.add("[Submit]", Style.FOCUSED)
        else:
            frame.add("[ Submit ]", Style.BLURRED)
        frame.add()

    frame.add(f"cursor mode is {state.cursor_mode.value} (ctrl+r to change style)", Style.HELP)
    frame.add(BROWSING_HELP if browsing else FILLING_HELP, Style.HELP)

    if state.last_error:
        frame.add(f"Error: {state.last_error}", Style.ERROR)

    return frame


# --------------------------------------------------------------------- #
#   Key translation
# --------------------------------------------------------------------- #
Key = Union[str, int]

BROWSING_KEYS: Dict[Key, Action] = {
    "q": Action.QUIT,
    "\x03": Action.QUIT,  # ctrl+c
    "k": Action.MOVE_UP,
    "j": Action.MOVE_DOWN,
    curses.KEY_UP: Action.MOVE_UP,
    curses.KEY_DOWN: Action.MOVE_DOWN,
    "a": Action.ADD,
    "d": Action.DELETE,
    "\x12": Action.TOGGLE_CURSOR,  # ctrl+r
}

FILLING_KEYS: Dict[Key, Action] = {
    "\n": Action.CONFIRM,
    "\r": Action.CONFIRM,
    curses.KEY_ENTER: Action.CONFIRM,
    "\x1b": Action.CANCEL,  # esc
    "\x7f": Action.ERASE,
    "\b": Action.ERASE,
    curses.KEY_BACKSPACE: Action.ERASE,
    "\x12": Action.TOGGLE_CURSOR,
}


def translate_key(key: Key, mode: Mode) -> Optional[InputEvent]:
    """Map a key from ``get_wch`` to an InputEvent, or None if unbound."""
    if mode is Mode.BROWSING:
        action = BROWSING_KEYS.get(key)
        return InputEvent(action) if action else None

    action = FILLING_KEYS.get(key)
    if action:
        return InputEvent(action)
    if isinstance(key, str) and len(key) == 1 and key.isprintable():
        return InputEvent(Action.CHARACTER, key)
    return None


# --------------------------------------------------------------------- #
#   Curses front end
# --------------------------------------------------------------------- #
CURSOR_VISIBILITY = {
    CursorMode.BLINK: 1,
    CursorMode.STATIC: 2,
    CursorMode.HIDE: 0,
}


def init_styles() -> Dict[Style, int]:
    """Curses attributes per Style; call only after initscr."""
    attrs = {style: curses.A_NORMAL for style in Style}
    attrs[Style.TITLE] = curses.A_BOLD
    attrs[Style.SELECTED] = curses.A_REVERSE
    attrs[Style.BLURRED] = curses.A_DIM
    attrs[Style.HELP] = curses.A_DIM
    attrs[Style.ERROR] = curses.A_BOLD

    if curses.has_colors():
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, curses.COLOR_WHITE, curses.COLOR_MAGENTA)
        curses.init_pair(2, curses.COLOR_WHITE, curses.COLOR_BLUE)
        curses.init_pair(3, curses.COLOR_MAGENTA, -1)
        curses.init_pair(4, curses.COLOR_RED, -1)
        attrs[Style.TITLE] = curses.color_pair(1) | curses.A_BOLD
        attrs[Style.SELECTED] = curses.color_pair(2)
        attrs[Style.FOCUSED] = curses.color_pair(3)
        attrs[Style.ERROR] = curses.color_pair(4)
    return attrs


def draw(stdscr, frame: Frame, attrs: Dict[Style, int], cursor_mode: CursorMode) -> None:
    stdscr.erase()
    height, width = stdscr.getmaxyx()
    frame = frame.fit(height)
    for y, (line, style) in enumerate(frame.lines):
        try:
            stdscr.addnstr(y, 0, line, max(1, width - 1), attrs[style])
        except curses.error:
            pass  # last cell of the screen, or a shrunken terminal

    visibility = CURSOR_VISIBILITY[cursor_mode] if frame.cursor else 0
    try:
        curses.curs_set(visibility)
    except curses.error:  # pragma: no cover - some terminals
        pass
    if frame.cursor and frame.cursor[0] < height:
        try:
            stdscr.move(frame.cursor[0], min(frame.cursor[1], width - 1))
        except curses.error:
            pass
    stdscr.refresh()


def run(stdscr, editor: InventoryEditor, attrs: Optional[Dict[Style, int]] = None) -> ApplicationState:
    """Event loop: paint, read one key, feed the editor, until quit."""
    try:
        curses.raw()
    except curses.error:  # pragma: no cover - fake windows
        pass
    stdscr.keypad(True)
    if attrs is None:
        attrs = init_styles()

    state = editor.state
    while True:
        draw(stdscr, render(state), attrs, state.cursor_mode)
        if not state.running:
            break
        key = stdscr.get_wch()
        event = translate_key(key, state.mode)
        if event is None:
            continue
        logger.debug(f"{state.mode.value}: {event.action.value}")
        state = editor.handle(event)
    return state


def main() -> None:
    """Application entry point."""
    try:
        config = get_config()
    except (ValueError, OSError) as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        store = WasteDatabase(config.db_path, username=config.username)
        editor = InventoryEditor.from_store(store, char_limit=config.char_limit)
    except StoreError as e:
        logger.error(f"Startup failed: {e}")
        print(f"❌ Error loading waste items: {e}", file=sys.stderr)
        sys.exit(1)

    os.environ.setdefault("ESCDELAY", "25")
    curses.wrapper(run, editor)
    logger.info("Editor closed")


if __name__ == "__main__":
    main()
