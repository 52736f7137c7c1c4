"""Modes, color alphabet and grid helpers shared by every component."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

MAX_ROWS = 16
MAX_COLS = 16
MATRIX_SIZE = 8
PIXEL_SIZE = 16
MAZE_SIZE = 16

BASE_COLORS: Tuple[str, ...] = ("R", "G", "B")
EXTENDED_COLORS: Tuple[str, ...] = ("R", "G", "B", "W", "Y", "C", "M")
MATRIX_ON_COLOR = "W"

# Integer codes used when grids are compared as arrays; 0 is unlit.
COLOR_CODES: Dict[Optional[str], int] = {None: 0}
COLOR_CODES.update({color: index + 1 for index, color in enumerate(EXTENDED_COLORS)})

Cell = Optional[str]
Grid = List[List[Cell]]


class Mode(str, Enum):
    """Language modes; each selects a grammar and an execution semantics."""

    TABLE = "TABLE"
    GRID = "GRID"
    MAZE = "MAZE"
    MATRIX = "MATRIX"
    PIXEL = "PIXEL"

    @classmethod
    def parse(cls, value: "str | Mode") -> "Mode":
        if isinstance(value, Mode):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ValueError(f"Unknown mode: {value!r}") from exc

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @classmethod
    def from_path(cls, path: "str | Path") -> Optional["Mode"]:
        """Guess a mode from a program file extension, or None."""
        suffix = Path(path).suffix.lower().lstrip(".")
        for mode, extension in _EXTENSIONS.items():
            if extension == suffix:
                return mode
        return None

    @property
    def fixed_dimensions(self) -> Optional[Tuple[int, int]]:
        """Grid size for modes that never declare one, else None."""
        if self is Mode.MATRIX:
            return (MATRIX_SIZE, MATRIX_SIZE)
        if self is Mode.PIXEL:
            return (PIXEL_SIZE, PIXEL_SIZE)
        if self is Mode.MAZE:
            return (MAZE_SIZE, MAZE_SIZE)
        return None

    @property
    def declares_dimensions(self) -> bool:
        return self in (Mode.TABLE, Mode.GRID)


_EXTENSIONS: Dict[Mode, str] = {
    Mode.TABLE: "tbl",
    Mode.GRID: "grd",
    Mode.MAZE: "mze",
    Mode.MATRIX: "mtx",
    Mode.PIXEL: "pxl",
}


def mix_color(letters: str) -> Optional[str]:
    """Union of primary letters: RGB -> W, RG -> Y, GB -> C, RB -> M."""
    up = letters.upper()
    has_r, has_g, has_b = "R" in up, "G" in up, "B" in up
    if has_r and has_g and has_b:
        return "W"
    if has_r and has_g:
        return "Y"
    if has_g and has_b:
        return "C"
    if has_r and has_b:
        return "M"
    if has_r:
        return "R"
    if has_g:
        return "G"
    if has_b:
        return "B"
    return None


def create_empty_grid(rows: int, cols: int) -> Grid:
    if rows <= 0 or cols <= 0:
        raise ValueError("rows and cols must be positive")
    return [[None for _ in range(cols)] for _ in range(rows)]


def copy_grid(grid: Optional[Sequence[Sequence[Cell]]]) -> Optional[Grid]:
    if grid is None:
        return None
    return [list(row) for row in grid]


def grid_shape(grid: Sequence[Sequence[Cell]]) -> Tuple[int, int]:
    rows = len(grid)
    return rows, (len(grid[0]) if rows else 0)


def grid_to_array(grid: Sequence[Sequence[Cell]]) -> np.ndarray:
    """Encode a grid as an int8 array of color codes (0 = unlit)."""
    try:
        return np.array([[COLOR_CODES[cell] for cell in row] for row in grid], dtype=np.int8)
    except KeyError as exc:
        raise ValueError(f"Unknown cell color: {exc.args[0]!r}") from exc


def count_lit(grid: Sequence[Sequence[Cell]]) -> int:
    return int(np.count_nonzero(grid_to_array(grid))) if grid else 0


def row_is_empty(row: Sequence[Cell]) -> bool:
    return all(cell is None for cell in row)


def count_non_empty_rows(grid: Sequence[Sequence[Cell]]) -> int:
    return sum(1 for row in grid if not row_is_empty(row))


def normalize_grid(raw: object) -> Grid:
    """Coerce JSON-loaded grids (lists of str/None) into a validated Grid."""
    if not isinstance(raw, list) or not raw:
        raise ValueError("Grid payload must be a non-empty list of rows")
    grid: Grid = []
    width: Optional[int] = None
    for row in raw:
        if not isinstance(row, list):
            raise ValueError("Grid rows must be lists")
        cells: List[Cell] = []
        for value in row:
            if value is None or value == "":
                cells.append(None)
            elif isinstance(value, str) and value.upper() in EXTENDED_COLORS:
                cells.append(value.upper())
            else:
                raise ValueError(f"Unknown cell color: {value!r}")
        if width is None:
            width = len(cells)
        elif width != len(cells):
            raise ValueError("Grid rows must share one width")
        grid.append(cells)
    return grid


def grid_to_text(grid: Sequence[Sequence[Cell]]) -> str:
    """Compact textual rendering: one line per row, '.' for unlit."""
    return "\n".join("".join(cell or "." for cell in row) for row in grid)


__all__ = [
    "MAX_ROWS",
    "MAX_COLS",
    "MATRIX_SIZE",
    "PIXEL_SIZE",
    "MAZE_SIZE",
    "BASE_COLORS",
    "EXTENDED_COLORS",
    "MATRIX_ON_COLOR",
    "COLOR_CODES",
    "Cell",
    "Grid",
    "Mode",
    "mix_color",
    "create_empty_grid",
    "copy_grid",
    "grid_shape",
    "grid_to_array",
    "count_lit",
    "row_is_empty",
    "count_non_empty_rows",
    "normalize_grid",
    "grid_to_text",
]
