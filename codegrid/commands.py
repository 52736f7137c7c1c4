"""Typed command model.

Every mode primitive is one frozen dataclass tagged with a ``CommandType``.
Handlers dispatch on the tag, so adding a variant without a handler fails
loudly instead of being silently ignored.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Tuple


class CommandType(Enum):
    """Discriminant of the command union."""
    START = "start"                  # TABLE/GRID dimension declaration
    COLOR = "color"                  # TABLE absolute paint
    GRID_COLOR = "grid_color"        # GRID relative paint
    ROTATE = "rotate"                # MAZE turtle turn
    MOVE = "move"                    # MAZE turtle advance
    MATRIX_TOGGLE = "matrix_toggle"  # MATRIX row/column on/off
    PAINT = "paint"                  # PIXEL paint one cell
    SKIP = "skip"                    # PIXEL erase one cell
    LOOP = "loop"                    # PIXEL repetition, flattened at load time


@dataclass(frozen=True)
class Command:
    """Fields shared by all commands: 0-based source line and its text."""

    line_number: int
    original_line: str

    type: ClassVar[CommandType]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type.value}
        for item in dataclasses.fields(self):
            value = getattr(self, item.name)
            if isinstance(value, tuple):
                value = [entry.to_dict() if isinstance(entry, Command) else entry for entry in value]
            payload[item.name] = value
        return payload


@dataclass(frozen=True)
class Start(Command):
    rows: int
    cols: int

    type: ClassVar[CommandType] = CommandType.START


@dataclass(frozen=True)
class Color(Command):
    count: int
    color: str
    row: int
    col: int

    type: ClassVar[CommandType] = CommandType.COLOR


@dataclass(frozen=True)
class GridColor(Command):
    count: int
    color: str
    dx: int
    dy: int

    type: ClassVar[CommandType] = CommandType.GRID_COLOR


@dataclass(frozen=True)
class Rotate(Command):
    degrees: int

    type: ClassVar[CommandType] = CommandType.ROTATE


@dataclass(frozen=True)
class Move(Command):
    steps: int

    type: ClassVar[CommandType] = CommandType.MOVE


@dataclass(frozen=True)
class MatrixToggle(Command):
    op: str
    is_row: bool
    index: int

    type: ClassVar[CommandType] = CommandType.MATRIX_TOGGLE

    @property
    def turns_on(self) -> bool:
        return self.op == "+"


@dataclass(frozen=True)
class Paint(Command):
    color: str

    type: ClassVar[CommandType] = CommandType.PAINT


@dataclass(frozen=True)
class Skip(Command):
    type: ClassVar[CommandType] = CommandType.SKIP


@dataclass(frozen=True)
class Loop(Command):
    count: int
    body: Tuple[Command, ...]

    type: ClassVar[CommandType] = CommandType.LOOP


PIXEL_PRIMITIVES = (CommandType.PAINT, CommandType.SKIP)


__all__ = [
    "CommandType",
    "Command",
    "Start",
    "Color",
    "GridColor",
    "Rotate",
    "Move",
    "MatrixToggle",
    "Paint",
    "Skip",
    "Loop",
    "PIXEL_PRIMITIVES",
]
