"""Maze state: walls, items, exit, visited cells and the turtle."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

ITEM_VALUES: Dict[str, int] = {"leaf": 1, "carrot": 2}

# Heading in degrees -> (row delta, col delta, wall crossed when leaving the cell)
HEADINGS: Dict[int, Tuple[int, int, str]] = {
    0: (0, 1, "right"),     # East
    90: (-1, 0, "top"),     # North
    180: (0, -1, "left"),   # West
    270: (1, 0, "bottom"),  # South
}

Position = Tuple[int, int]


@dataclass
class MazeWalls:
    top: bool = True
    right: bool = True
    bottom: bool = True
    left: bool = True

    def has_wall(self, side: str) -> bool:
        return bool(getattr(self, side))

    def to_dict(self) -> Dict[str, bool]:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


@dataclass
class MazeItem:
    row: int
    col: int
    kind: str
    collected: bool = False

    @property
    def value(self) -> int:
        return ITEM_VALUES[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        return {"r": self.row, "c": self.col, "type": self.kind, "collected": self.collected}


@dataclass
class Turtle:
    row: int
    col: int
    heading: int = 0

    @property
    def position(self) -> Position:
        return (self.row, self.col)

    def to_dict(self) -> Dict[str, int]:
        return {"r": self.row, "c": self.col, "heading": self.heading}


@dataclass
class MazeState:
    """Complete maze session state, serializable for save/restore."""

    rows: int
    cols: int
    cells: List[List[MazeWalls]]
    items: List[MazeItem] = field(default_factory=list)
    exit: Optional[Position] = None
    visited: Set[Position] = field(default_factory=set)
    turtle: Optional[Turtle] = None

    def __post_init__(self) -> None:
        if self.turtle is None:
            self.turtle = Turtle(*self.start_cell)
        if not self.visited:
            self.visited = {self.turtle.position}

    @property
    def start_cell(self) -> Position:
        return (self.rows // 2, self.cols // 2)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def walls_at(self, row: int, col: int) -> MazeWalls:
        return self.cells[row][col]

    def item_at(self, row: int, col: int) -> Optional[MazeItem]:
        for item in self.items:
            if item.row == row and item.col == col and not item.collected:
                return item
        return None

    @property
    def collected_value(self) -> int:
        return sum(item.value for item in self.items if item.collected)

    @property
    def max_score(self) -> int:
        return sum(item.value for item in self.items)

    def copy(self) -> "MazeState":
        return copy.deepcopy(self)

    def fresh(self) -> "MazeState":
        """Same layout with items restored and the turtle back at the start."""
        pristine = self.copy()
        for item in pristine.items:
            item.collected = False
        pristine.turtle = Turtle(*pristine.start_cell)
        pristine.visited = {pristine.turtle.position}
        return pristine

    def open_passages(self) -> int:
        """Number of carved interior edges (each counted once)."""
        count = 0
        for r in range(self.rows):
            for c in range(self.cols):
                walls = self.cells[r][c]
                if c + 1 < self.cols and not walls.right:
                    count += 1
                if r + 1 < self.rows and not walls.bottom:
                    count += 1
        return count

    def boundary_openings(self) -> List[Tuple[int, int, str]]:
        openings: List[Tuple[int, int, str]] = []
        for r in range(self.rows):
            for c in range(self.cols):
                walls = self.cells[r][c]
                if r == 0 and not walls.top:
                    openings.append((r, c, "top"))
                if r == self.rows - 1 and not walls.bottom:
                    openings.append((r, c, "bottom"))
                if c == 0 and not walls.left:
                    openings.append((r, c, "left"))
                if c == self.cols - 1 and not walls.right:
                    openings.append((r, c, "right"))
        return openings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "cells": [[walls.to_dict() for walls in row] for row in self.cells],
            "items": [item.to_dict() for item in self.items],
            "exit": {"r": self.exit[0], "c": self.exit[1]} if self.exit is not None else None,
            "visited": sorted([r, c] for r, c in self.visited),
            "turtle": self.turtle.to_dict() if self.turtle is not None else None,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "MazeState":
        try:
            rows = int(payload["rows"])
            cols = int(payload["cols"])
            cells = [
                [
                    MazeWalls(
                        top=bool(walls["top"]),
                        right=bool(walls["right"]),
                        bottom=bool(walls["bottom"]),
                        left=bool(walls["left"]),
                    )
                    for walls in row
                ]
                for row in payload["cells"]
            ]
            items = [
                MazeItem(
                    row=int(item["r"]),
                    col=int(item["c"]),
                    kind=str(item["type"]),
                    collected=bool(item.get("collected", False)),
                )
                for item in payload.get("items", [])
            ]
            raw_exit = payload.get("exit")
            exit_cell = (int(raw_exit["r"]), int(raw_exit["c"])) if raw_exit else None
            visited = {(int(r), int(c)) for r, c in payload.get("visited", [])}
            raw_turtle = payload.get("turtle")
            turtle = None
            if raw_turtle:
                turtle = Turtle(int(raw_turtle["r"]), int(raw_turtle["c"]), int(raw_turtle.get("heading", 0)) % 360)
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed maze payload: {exc}") from exc
        if len(cells) != rows or any(len(row) != cols for row in cells):
            raise ValueError("Maze cell matrix does not match declared dimensions")
        for item in items:
            if item.kind not in ITEM_VALUES:
                raise ValueError(f"Unknown maze item type: {item.kind!r}")

        state = cls(rows=rows, cols=cols, cells=cells, items=items, exit=exit_cell, visited=visited, turtle=turtle)
        positions = [("item", (item.row, item.col)) for item in state.items]
        positions += [("visited cell", cell) for cell in sorted(state.visited)]
        positions.append(("turtle", state.turtle.position))
        if state.exit is not None:
            positions.append(("exit", state.exit))
        for label, (row, col) in positions:
            if not state.in_bounds(row, col):
                raise ValueError(f"Maze {label} at ({row}, {col}) out of bounds")
        if state.turtle.heading not in HEADINGS:
            raise ValueError(f"Unsupported turtle heading: {state.turtle.heading}")
        return state


def save_maze_session(code: str, maze: MazeState) -> str:
    """Serialize program text plus maze state into the maze save document."""
    return json.dumps({"code": code, "maze": maze.to_dict()}, indent=2)


def load_maze_session(text: str) -> Tuple[str, MazeState]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Maze save document is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict) or "code" not in payload or "maze" not in payload:
        raise ValueError("Maze save document must contain 'code' and 'maze'")
    return str(payload["code"]), MazeState.from_dict(payload["maze"])


__all__ = [
    "ITEM_VALUES",
    "HEADINGS",
    "MazeWalls",
    "MazeItem",
    "Turtle",
    "MazeState",
    "save_maze_session",
    "load_maze_session",
]
