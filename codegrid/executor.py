"""Per-command semantics.

Handlers mutate a working ``ProgramState`` in place and raise
``ProgramRuntimeError`` on bounds violations or wall collisions. Callers
(the stepping engine and the silent replay) own the copy they pass in.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Sequence, Tuple

from .commands import (
    Color,
    Command,
    CommandType,
    GridColor,
    Loop,
    MatrixToggle,
    Move,
    Paint,
    Rotate,
    Start,
)
from .errors import MazeCollisionError, ProgramRuntimeError
from .grid import MATRIX_ON_COLOR, Mode, create_empty_grid
from .maze.state import HEADINGS
from .state import CompletionStatus, ProgramState

logger = logging.getLogger(__name__)


def begin_line(state: ProgramState, line_number: int) -> None:
    """Enter a new source line; PIXEL rows follow source lines."""
    state.current_line = line_number
    if state.mode is Mode.PIXEL:
        state.cursor = (line_number, 0)


def batch_end(commands: Sequence[Command], start: int) -> int:
    """Index one past the last command sharing the line of ``commands[start]``."""
    line_number = commands[start].line_number
    end = start
    while end < len(commands) and commands[end].line_number == line_number:
        end += 1
    return end


def iter_batches(commands: Sequence[Command]) -> List[Tuple[int, int]]:
    batches: List[Tuple[int, int]] = []
    index = 0
    while index < len(commands):
        end = batch_end(commands, index)
        batches.append((index, end))
        index = end
    return batches


def apply_command(state: ProgramState, command: Command) -> None:
    try:
        handler = _HANDLERS[command.type]
    except KeyError as exc:
        raise ProgramRuntimeError(f"Unsupported command {command.type}.", command.line_number) from exc
    handler(state, command)


# ---------------------------------------------------------------------------
# TABLE / GRID


def _start(state: ProgramState, command: Start) -> None:
    state.current_grid = create_empty_grid(command.rows, command.cols)
    state.last_position = (0, 0)


def _paint_strip(state: ProgramState, command: Command, count: int, color: str, row: int, col: int) -> None:
    grid = state.current_grid
    if grid is None:
        raise ProgramRuntimeError("Table not defined.", command.line_number)
    rows, cols = len(grid), len(grid[0])
    if row < 0 or row >= rows:
        raise ProgramRuntimeError(f"Row {row} out of bounds.", command.line_number)
    if col < 0 or col >= cols:
        raise ProgramRuntimeError(f"Column {col} out of bounds.", command.line_number)
    if col + count > cols:
        raise ProgramRuntimeError("Filling exceeds column bounds.", command.line_number)
    for offset in range(count):
        grid[row][col + offset] = color
    state.last_position = (row, col + max(count - 1, 0))


def _color(state: ProgramState, command: Color) -> None:
    _paint_strip(state, command, command.count, command.color, command.row, command.col)


def _grid_color(state: ProgramState, command: GridColor) -> None:
    last_row, last_col = state.last_position
    _paint_strip(
        state,
        command,
        command.count,
        command.color,
        last_row + command.dy,
        last_col + command.dx,
    )
    state.total_movements += abs(command.dx) + abs(command.dy) + max(command.count - 1, 0)


# ---------------------------------------------------------------------------
# MAZE


def _require_maze(state: ProgramState, command: Command):
    if state.maze is None or state.maze.turtle is None:
        raise ProgramRuntimeError("Maze not initialized.", command.line_number)
    return state.maze


def _rotate(state: ProgramState, command: Rotate) -> None:
    maze = _require_maze(state, command)
    maze.turtle.heading = (maze.turtle.heading + command.degrees) % 360


def _move(state: ProgramState, command: Move) -> None:
    maze = _require_maze(state, command)
    turtle = maze.turtle
    for _ in range(command.steps):
        dr, dc, side = HEADINGS[turtle.heading]
        if maze.walls_at(turtle.row, turtle.col).has_wall(side):
            raise MazeCollisionError(
                f"Collision with a wall at row {turtle.row}, column {turtle.col}.",
                command.line_number,
            )
        next_row, next_col = turtle.row + dr, turtle.col + dc
        if not maze.in_bounds(next_row, next_col):
            logger.debug("Turtle left the maze from %s", turtle.position)
            state.completion_status = CompletionStatus.SUCCESS
            state.is_running = False
            return
        turtle.row, turtle.col = next_row, next_col
        maze.visited.add((next_row, next_col))
        item = maze.item_at(next_row, next_col)
        if item is not None:
            item.collected = True
            state.maze_score += item.value


# ---------------------------------------------------------------------------
# MATRIX / PIXEL


def _matrix_toggle(state: ProgramState, command: MatrixToggle) -> None:
    grid = state.current_grid
    if grid is None:
        raise ProgramRuntimeError("Matrix not initialized.", command.line_number)
    value = MATRIX_ON_COLOR if command.turns_on else None
    if command.is_row:
        for col in range(len(grid[command.index])):
            grid[command.index][col] = value
    else:
        for row in grid:
            row[command.index] = value


def _put_pixel(state: ProgramState, command: Command, value) -> None:
    grid = state.current_grid
    if grid is None:
        raise ProgramRuntimeError("Screen not initialized.", command.line_number)
    row, col = state.cursor
    # Writes outside the 16x16 screen are dropped.
    if 0 <= row < len(grid) and 0 <= col < len(grid[row]):
        grid[row][col] = value
    state.cursor = (row, col + 1)


def _paint(state: ProgramState, command: Paint) -> None:
    _put_pixel(state, command, command.color)


def _skip(state: ProgramState, command: Command) -> None:
    _put_pixel(state, command, None)


def _loop(state: ProgramState, command: Loop) -> None:
    for _ in range(command.count):
        for op in command.body:
            apply_command(state, op)


_HANDLERS: Dict[CommandType, Callable[[ProgramState, Command], None]] = {
    CommandType.START: _start,
    CommandType.COLOR: _color,
    CommandType.GRID_COLOR: _grid_color,
    CommandType.ROTATE: _rotate,
    CommandType.MOVE: _move,
    CommandType.MATRIX_TOGGLE: _matrix_toggle,
    CommandType.PAINT: _paint,
    CommandType.SKIP: _skip,
    CommandType.LOOP: _loop,
}


__all__ = ["apply_command", "begin_line", "batch_end", "iter_batches"]
