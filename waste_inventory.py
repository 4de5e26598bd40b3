#!/usr/bin/env python3
# waste_inventory.py

"""
Core of the waste‑disposal inventory editor.

Features
--------
* WasteItem records (name, quantity, type, location, disposal method)
* A five‑field "add item" form with per‑field focus
* Browsing / filling state machine driven by abstract input events
* Quantity validation at confirm time (finite floats only)
* Store calls go through an injected Record Store, so the editor runs
  against SQLite in production and an in‑memory fake in tests
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Sequence


logger = logging.getLogger(__name__)

DEFAULT_CHAR_LIMIT = 64

FIELD_NAME = 0
FIELD_WASTE_TYPE = 2
FIELD_LOCATION = 3
FIELD_METHOD = 4


# --------------------------------------------------------------------- #
#   Errors
# --------------------------------------------------------------------- #
class WasteInventoryError(Exception):
    pass


class StoreError(WasteInventoryError):
    """Any failure reported by the Record Store."""


class StoreLoadError(StoreError):
    pass


class StoreInsertError(StoreError):
    pass


class StoreDeleteError(StoreError):
    pass


class InvalidQuantityError(WasteInventoryError, ValueError):
    pass


# --------------------------------------------------------------------- #
#   Data Models
# --------------------------------------------------------------------- #
@dataclass
class WasteItem:
    """
    A single waste record.

    ``id`` is 0 until the store has assigned one.
    """
    name: str
    quantity: float
    waste_type: str
    location: str
    method: str
    id: int = 0


@dataclass
class FormField:
    label: str
    placeholder: str
    numeric: bool = False
    value: str = ""


def default_fields() -> List[FormField]:
    return [
        FormField("name", "Waste Name"),
        FormField("quantity", "Waste Quantity", numeric=True),
        FormField("waste_type", "Waste Type"),
        FormField("location", "Waste Location"),
        FormField("method", "Disposal Method"),
    ]


class FieldSet:
    """
    Ordered form fields of the "add item" form.

    Holds raw text only; validation belongs to the editor.
    """

    def __init__(self, fields: Optional[Sequence[FormField]] = None,
                 char_limit: int = DEFAULT_CHAR_LIMIT) -> None:
        self._fields: List[FormField] = list(fields) if fields is not None else default_fields()
        self.char_limit = char_limit

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self):
        return iter(self._fields)

    def field(self, index: int) -> FormField:
        return self._fields[index]

    def get(self, index: int) -> str:
        return self._fields[index].value

    def set(self, index: int, value: str) -> None:
        self._fields[index].value = value[:self.char_limit]

    def append(self, index: int, text: str) -> bool:
        """Append ``text`` to a field; returns False when the limit is reached."""
        current = self._fields[index].value
        if len(current) + len(text) > self.char_limit:
            return False
        self._fields[index].value = current + text
        return True

    def erase(self, index: int) -> bool:
        """Drop the last character; returns False when the field was already empty."""
        if not self._fields[index].value:
            return False
        self._fields[index].value = self._fields[index].value[:-1]
        return True

    def clear_all(self) -> None:
        for f in self._fields:
            f.value = ""

    def values(self) -> List[str]:
        return [f.value for f in self._fields]


def parse_quantity(text: str) -> float:
    """Parse user text into a finite float or raise InvalidQuantityError."""
    try:
        value = float(text.strip())
    except ValueError:
        raise InvalidQuantityError(f"invalid quantity: {text!r} is not a number") from None
    if not math.isfinite(value):
        raise InvalidQuantityError(f"invalid quantity: {text!r} is not a finite number")
    return value


# --------------------------------------------------------------------- #
#   Record Store contract
# --------------------------------------------------------------------- #
class WasteStore(Protocol):
    def load_all(self) -> List[WasteItem]:
        ...

    def insert(self, item: WasteItem) -> int:
        ...

    def delete_by_id(self, item_id: int) -> None:
        ...


# --------------------------------------------------------------------- #
#   Input vocabulary
# --------------------------------------------------------------------- #
class Mode(Enum):
    BROWSING = "browsing"
    FILLING = "filling"


class Action(Enum):
    QUIT = "quit"
    MOVE_UP = "move-up"
    MOVE_DOWN = "move-down"
    ADD = "add"
    DELETE = "delete"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    CHARACTER = "character"
    ERASE = "erase"
    TOGGLE_CURSOR = "toggle-cursor"


@dataclass(frozen=True)
class InputEvent:
    action: Action
    char: str = ""


class CursorMode(Enum):
    BLINK = "blink"
    STATIC = "static"
    HIDE = "hide"

    def next(self) -> "CursorMode":
        order = list(CursorMode)
        return order[(order.index(self) + 1) % len(order)]


# --------------------------------------------------------------------- #
#   Application state
# --------------------------------------------------------------------- #
@dataclass
class ApplicationState:
    """
    Everything the renderer needs for one frame.

    ``cursor_index`` is None exactly when ``items`` is empty.
    ``focus_index`` is only meaningful in FILLING mode.
    """
    items: List[WasteItem] = field(default_factory=list)
    fields: FieldSet = field(default_factory=FieldSet)
    mode: Mode = Mode.BROWSING
    focus_index: int = 0
    cursor_index: Optional[int] = None
    last_error: Optional[str] = None
    cursor_mode: CursorMode = CursorMode.BLINK
    running: bool = True

    @property
    def selected_item(self) -> Optional[WasteItem]:
        if self.cursor_index is None:
            return None
        return self.items[self.cursor_index]

    @property
    def total_quantity(self) -> float:
        return round(sum(item.quantity for item in self.items), 2)


# --------------------------------------------------------------------- #
#   Editor (state machine)
# --------------------------------------------------------------------- #
class InventoryEditor:
    """
    Consumes one InputEvent at a time and mutates ApplicationState.

    Browsing: quit, move-up, move-down, add, delete.
    Filling:  character, erase, confirm, cancel.
    toggle-cursor is accepted in both modes.
    """

    def __init__(self, store: WasteStore, items: Optional[List[WasteItem]] = None,
                 char_limit: int = DEFAULT_CHAR_LIMIT) -> None:
        self.store = store
        items = list(items) if items is not None else []
        self.state = ApplicationState(
            items=items,
            fields=FieldSet(char_limit=char_limit),
            cursor_index=0 if items else None,
        )
        self._quantity: Optional[float] = None

    @classmethod
    def from_store(cls, store: WasteStore, char_limit: int = DEFAULT_CHAR_LIMIT) -> "InventoryEditor":
        """Load all items once; StoreLoadError propagates to the caller."""
        items = store.load_all()
        logger.info(f"Loaded {len(items)} waste items")
        return cls(store, items, char_limit=char_limit)

    def handle(self, event: InputEvent) -> ApplicationState:
        if event.action is Action.TOGGLE_CURSOR:
            self.state.cursor_mode = self.state.cursor_mode.next()
            self.state.last_error = None
        elif self.state.mode is Mode.BROWSING:
            self._handle_browsing(event)
        else:
            self._handle_filling(event)
        return self.state

    # ---- browsing ---- #
    def _handle_browsing(self, event: InputEvent) -> None:
        state = self.state
        action = event.action

        if action is Action.QUIT:
            state.running = False
        elif action is Action.MOVE_UP:
            if state.cursor_index is not None:
                self._move_cursor(max(0, state.cursor_index - 1))
        elif action is Action.MOVE_DOWN:
            if state.cursor_index is not None:
                self._move_cursor(min(len(state.items) - 1, state.cursor_index + 1))
        elif action is Action.ADD:
            state.fields.clear_all()
            self._quantity = None
            state.focus_index = 0
            state.mode = Mode.FILLING
            state.last_error = None
        elif action is Action.DELETE:
            self._delete_selected()

    def _move_cursor(self, index: int) -> None:
        if index != self.state.cursor_index:
            self.state.cursor_index = index
            self.state.last_error = None

    def _delete_selected(self) -> None:
        state = self.state
        item = state.selected_item
        if item is None:
            return
        try:
            self.store.delete_by_id(item.id)
        except StoreDeleteError as e:
            logger.error(f"Delete of item {item.id} failed: {e}")
            state.last_error = f"failed to delete item: {e}"
            return

        del state.items[state.cursor_index]
        if state.items:
            state.cursor_index = min(state.cursor_index, len(state.items) - 1)
        else:
            state.cursor_index = None
        state.last_error = None
        logger.info(f"Deleted waste item {item.id} ({item.name})")

    # ---- filling ---- #
    def _handle_filling(self, event: InputEvent) -> None:
        state = self.state
        action = event.action

        if action is Action.CHARACTER:
            if event.char and state.fields.append(state.focus_index, event.char):
                state.last_error = None
        elif action is Action.ERASE:
            if state.fields.erase(state.focus_index):
                state.last_error = None
        elif action is Action.CONFIRM:
            self._confirm()
        elif action is Action.CANCEL:
            state.fields.clear_all()
            self._quantity = None
            state.focus_index = 0
            state.mode = Mode.BROWSING
            state.last_error = None

    def _confirm(self) -> None:
        state = self.state

        if state.fields.field(state.focus_index).numeric:
            try:
                self._quantity = parse_quantity(state.fields.get(state.focus_index))
            except InvalidQuantityError as e:
                logger.warning(str(e))
                state.last_error = str(e)
                return

        if state.focus_index + 1 < len(state.fields):
            state.focus_index += 1
            state.last_error = None
            return

        self._submit()

    def _submit(self) -> None:
        state = self.state
        values = state.fields.values()
        item = WasteItem(
            name=values[FIELD_NAME],
            quantity=self._quantity,
            waste_type=values[FIELD_WASTE_TYPE],
            location=values[FIELD_LOCATION],
            method=values[FIELD_METHOD],
        )
        try:
            item.id = self.store.insert(item)
        except StoreInsertError as e:
            logger.error(f"Insert of {item.name!r} failed: {e}")
            state.last_error = f"failed to add item: {e}"
            return

        state.items.append(item)
        if state.cursor_index is None:
            state.cursor_index = 0
        state.fields.clear_all()
        self._quantity = None
        state.focus_index = 0
        state.mode = Mode.BROWSING
        state.last_error = None
        logger.info(f"Added waste item {item.id} ({item.name})")

