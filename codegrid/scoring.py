"""Per-mode scoring of the current grid against the target."""

from __future__ import annotations

import math
from typing import Optional, Sequence, Union

import numpy as np

from .grid import Cell, Mode, grid_to_array, row_is_empty
from .state import ProgramState

Score = Union[int, float]
GridLike = Optional[Sequence[Sequence[Cell]]]

MATRIX_CELL_WEIGHT = 0.25
PIXEL_MAX_SCORE = 10.0


def score_rows(target: GridLike, current: GridLike) -> int:
    """TABLE/GRID: target rows with at least one colored cell matched exactly.

    Rows that are entirely unlit in the target count neither way.
    """
    if not target or not current:
        return 0
    score = 0
    for index, target_row in enumerate(target):
        if row_is_empty(target_row) or index >= len(current):
            continue
        if list(current[index]) == list(target_row):
            score += 1
    return score


def max_row_score(target: GridLike) -> int:
    if not target:
        return 0
    return sum(1 for row in target if not row_is_empty(row))


def _same_shape_arrays(target: GridLike, current: GridLike):
    if not target or not current:
        return None
    target_arr = grid_to_array(target)
    current_arr = grid_to_array(current)
    if target_arr.shape != current_arr.shape:
        return None
    return target_arr, current_arr


def score_matrix(target: GridLike, current: GridLike) -> float:
    """+0.25 per correctly lit cell, -0.25 per wrongly lit one, floored at 0."""
    arrays = _same_shape_arrays(target, current)
    if arrays is None:
        return 0.0
    target_on = arrays[0] != 0
    current_on = arrays[1] != 0
    hits = int(np.count_nonzero(target_on & current_on))
    false_hits = int(np.count_nonzero(~target_on & current_on))
    return max(0.0, (hits - false_hits) * MATRIX_CELL_WEIGHT)


def max_matrix_score(target: GridLike) -> float:
    if not target:
        return 0.0
    return int(np.count_nonzero(grid_to_array(target))) * MATRIX_CELL_WEIGHT


def pixel_matches(target: GridLike, current: GridLike) -> int:
    arrays = _same_shape_arrays(target, current)
    if arrays is None:
        return 0
    return int(np.count_nonzero(arrays[0] == arrays[1]))


def score_pixel(target: GridLike, current: GridLike) -> float:
    """Exact color matches (unlit counts) in quarter-point steps, max 10."""
    return math.floor(pixel_matches(target, current) * 5 / 32) / 4


def score_state(state: ProgramState) -> Score:
    mode = state.mode
    if mode in (Mode.TABLE, Mode.GRID):
        return score_rows(state.target_grid, state.current_grid)
    if mode is Mode.MAZE:
        return state.maze_score
    if mode is Mode.MATRIX:
        return score_matrix(state.target_grid, state.current_grid)
    return score_pixel(state.target_grid, state.current_grid)


def max_score(state: ProgramState) -> Score:
    mode = state.mode
    if mode in (Mode.TABLE, Mode.GRID):
        return max_row_score(state.target_grid)
    if mode is Mode.MAZE:
        return state.maze.max_score if state.maze is not None else 0
    if mode is Mode.MATRIX:
        return max_matrix_score(state.target_grid)
    return PIXEL_MAX_SCORE if state.target_grid else 0.0


__all__ = [
    "score_rows",
    "max_row_score",
    "score_matrix",
    "max_matrix_score",
    "pixel_matches",
    "score_pixel",
    "score_state",
    "max_score",
]
