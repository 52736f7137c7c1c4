"""Goal grids (and reproducing code) for free play and timed challenges."""

from __future__ import annotations

import argparse
import logging
import random
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..base import AbstractGoalGenerator, PathLike
from ..config import DEFAULT_MAZE_TIME_BUDGET, DEFAULT_SECONDS_PER_ROW
from ..grid import (
    BASE_COLORS,
    MATRIX_ON_COLOR,
    MATRIX_SIZE,
    PIXEL_SIZE,
    Grid,
    Mode,
    count_lit,
    count_non_empty_rows,
    create_empty_grid,
    mix_color,
)
from ..maze.generator import MazeGenerator, generate_maze
from ..maze.state import MazeState
from ..render import render_grid, save_image
from ..scoring import max_matrix_score, max_row_score, PIXEL_MAX_SCORE

logger = logging.getLogger(__name__)

MATRIX_TARGET_LIT = 40
CHALLENGE_MIN_ROWS = 10


@dataclass
class Goal:
    """A generated objective; ``code`` is set when it is guaranteed to reproduce ``grid``."""

    mode: Mode
    grid: Optional[Grid]
    code: Optional[str] = None
    time_budget: Optional[int] = None
    maze: Optional[MazeState] = None


def _random_strip(rng: random.Random, grid: Grid, row: int, col: int, max_len: int) -> None:
    color = rng.choice(BASE_COLORS)
    count = rng.randrange(max_len) + 1
    for offset in range(count):
        grid[row][col + offset] = color


def generate_random_target(rng: Optional[random.Random] = None) -> Grid:
    """TABLE/GRID free play: 3-12 x 3-12 grid with 3-7 random strips."""
    rng = rng or random.Random()
    rows = rng.randint(3, 12)
    cols = rng.randint(3, 12)
    grid = create_empty_grid(rows, cols)
    for _ in range(rng.randint(3, 7)):
        row = rng.randrange(rows)
        col = rng.randrange(cols)
        _random_strip(rng, grid, row, col, cols - col)
    return grid


def generate_challenge_target(
    rng: Optional[random.Random] = None,
    *,
    seconds_per_row: int = DEFAULT_SECONDS_PER_ROW,
) -> Tuple[Grid, int]:
    """TABLE/GRID challenge: at least 10 non-empty rows; returns (grid, seconds)."""
    rng = rng or random.Random()
    rows = rng.randint(CHALLENGE_MIN_ROWS, 14)
    cols = rng.randint(7, 14)
    grid = create_empty_grid(rows, cols)

    for row in rng.sample(range(rows), CHALLENGE_MIN_ROWS):
        position = 0
        for _ in range(rng.randint(1, 2)):
            available = cols - position
            if available < 2:
                break
            start_col = position + rng.randrange(available - 1)
            count = rng.randrange(min(cols - start_col, 3)) + 1
            color = rng.choice(BASE_COLORS)
            for offset in range(count):
                grid[row][start_col + offset] = color
            position = start_col + count

    for _ in range(rng.randint(0, 2)):
        row = rng.randrange(rows)
        col = rng.randrange(cols)
        _random_strip(rng, grid, row, col, cols - col)

    return grid, seconds_per_row * count_non_empty_rows(grid)


def generate_matrix_target(
    rng: Optional[random.Random] = None,
    *,
    lit_cells: int = MATRIX_TARGET_LIT,
    max_attempts: int = 100_000,
) -> Tuple[Grid, str]:
    """Rejection-sample 30-60 random toggles until exactly ``lit_cells`` are on."""
    rng = rng or random.Random()
    for attempt in range(1, max_attempts + 1):
        grid = create_empty_grid(MATRIX_SIZE, MATRIX_SIZE)
        lines: List[str] = []
        for _ in range(rng.randint(30, 60)):
            is_row = rng.random() < 0.5
            index = rng.randrange(MATRIX_SIZE)
            op = "+" if rng.random() < 0.5 else "-"
            target = str(index + 1) if is_row else chr(ord("A") + index)
            lines.append(f"{op} {target}")
            value = MATRIX_ON_COLOR if op == "+" else None
            if is_row:
                for col in range(MATRIX_SIZE):
                    grid[index][col] = value
            else:
                for row in range(MATRIX_SIZE):
                    grid[row][index] = value
        if count_lit(grid) == lit_cells:
            logger.debug("Matrix target accepted after %d attempts", attempt)
            return grid, "\n".join(lines)
    raise RuntimeError(f"No matrix target with {lit_cells} lit cells after {max_attempts} attempts")


_FULL_ROW_COLORS = ("R", "G", "B", "RG", "GB", "RB", "RGB")
_ALTERNATE_FIRST = ("R", "G", "B", "RG")
_ALTERNATE_SECOND = ("GB", "RB", "RGB", "O")
_CHUNK_COLORS = ("R", "G", "B", "RG", "GB", "RB", "O")
_SPLIT_FIRST = ("R", "G", "B")
_SPLIT_SECOND = ("GB", "RB", "RG")  # cyan, magenta, yellow


def _pixel_token(letters: str) -> str:
    return "Off" if letters == "O" else letters


def _pixel_color(letters: str) -> Optional[str]:
    return None if letters == "O" else mix_color(letters)


def generate_pixel_target(rng: Optional[random.Random] = None) -> Tuple[Grid, str]:
    """One of four row templates per row, with the PIXEL code that draws it."""
    rng = rng or random.Random()
    grid = create_empty_grid(PIXEL_SIZE, PIXEL_SIZE)
    lines: List[str] = []

    for row in range(PIXEL_SIZE):
        pattern = rng.random()
        if pattern < 0.25:
            letters = rng.choice(_FULL_ROW_COLORS)
            grid[row] = [mix_color(letters)] * PIXEL_SIZE
            lines.append(f"16 * ( {letters} )")
        elif pattern < 0.5:
            first = rng.choice(_ALTERNATE_FIRST)
            second = rng.choice(_ALTERNATE_SECOND)
            grid[row] = [_pixel_color(first), _pixel_color(second)] * (PIXEL_SIZE // 2)
            lines.append(f"8 * ( {first} + {_pixel_token(second)} )")
        elif pattern < 0.75:
            chunk = [rng.choice(_CHUNK_COLORS) for _ in range(4)]
            grid[row] = [_pixel_color(letters) for letters in chunk] * (PIXEL_SIZE // 4)
            lines.append("4 * ( " + " + ".join(_pixel_token(letters) for letters in chunk) + " )")
        else:
            first = rng.choice(_SPLIT_FIRST)
            second = rng.choice(_SPLIT_SECOND)
            half = PIXEL_SIZE // 2
            grid[row] = [mix_color(first)] * half + [mix_color(second)] * half
            lines.append(f"8 * ( {first} ) + 8 * ( {second} )")

    return grid, "\n".join(lines)


def generate_goal(mode: "Mode | str", rng: Optional[random.Random] = None) -> Goal:
    """Free-play "new goal" for any mode."""
    mode = Mode.parse(mode)
    rng = rng or random.Random()
    if mode in (Mode.TABLE, Mode.GRID):
        return Goal(mode=mode, grid=generate_random_target(rng))
    if mode is Mode.MATRIX:
        grid, code = generate_matrix_target(rng)
        return Goal(mode=mode, grid=grid, code=code)
    if mode is Mode.PIXEL:
        grid, code = generate_pixel_target(rng)
        return Goal(mode=mode, grid=grid, code=code)
    return Goal(mode=mode, grid=None, maze=generate_maze(rng=rng))


def generate_challenge(
    mode: "Mode | str",
    rng: Optional[random.Random] = None,
    *,
    seconds_per_row: int = DEFAULT_SECONDS_PER_ROW,
    maze_time_budget: int = DEFAULT_MAZE_TIME_BUDGET,
) -> Goal:
    """Challenge goal with its time budget in seconds."""
    mode = Mode.parse(mode)
    rng = rng or random.Random()
    if mode in (Mode.TABLE, Mode.GRID):
        grid, seconds = generate_challenge_target(rng, seconds_per_row=seconds_per_row)
        return Goal(mode=mode, grid=grid, time_budget=seconds)
    goal = generate_goal(mode, rng)
    if goal.grid is not None:
        goal.time_budget = seconds_per_row * count_non_empty_rows(goal.grid)
    else:
        goal.time_budget = maze_time_budget
    return goal


def goal_max_score(mode: Mode, grid: Optional[Grid]) -> float:
    if grid is None:
        return 0
    if mode in (Mode.TABLE, Mode.GRID):
        return max_row_score(grid)
    if mode is Mode.MATRIX:
        return max_matrix_score(grid)
    return PIXEL_MAX_SCORE


@dataclass
class TargetRecord:
    """Serializable metadata for one generated goal."""

    id: str
    mode: str
    target_grid: Grid
    code: Optional[str]
    time_budget: Optional[int]
    max_score: float
    image: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mode": self.mode,
            "target_grid": self.target_grid,
            "code": self.code,
            "time_budget": self.time_budget,
            "max_score": self.max_score,
            "image": self.image,
        }


class TargetGenerator(AbstractGoalGenerator[TargetRecord]):
    """Generate TABLE/GRID/MATRIX/PIXEL goals with a rendered target image."""

    DEFAULT_OUTPUT_DIR: PathLike = "data/targets"
    DEFAULT_CELL_SIZE = 24

    def __init__(
        self,
        output_dir: Optional[PathLike] = None,
        *,
        mode: "Mode | str" = Mode.TABLE,
        challenge: bool = False,
        cell_size: int = DEFAULT_CELL_SIZE,
        seconds_per_row: int = DEFAULT_SECONDS_PER_ROW,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(output_dir if output_dir is not None else self.DEFAULT_OUTPUT_DIR)
        self.mode = Mode.parse(mode)
        if self.mode is Mode.MAZE:
            raise ValueError("MAZE goals are produced by MazeGenerator")
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.challenge = challenge
        self.cell_size = cell_size
        self.seconds_per_row = seconds_per_row
        self._rng = random.Random(seed)
        self.puzzle_dir = self.output_dir / "puzzles"
        self.puzzle_dir.mkdir(parents=True, exist_ok=True)

    @property
    def rng(self) -> random.Random:
        return self._rng

    def create_puzzle(self, *, puzzle_id: Optional[str] = None) -> TargetRecord:
        record_id = puzzle_id or str(uuid.uuid4())
        if self.challenge:
            goal = generate_challenge(self.mode, self.rng, seconds_per_row=self.seconds_per_row)
        else:
            goal = generate_goal(self.mode, self.rng)
        image_path = self.puzzle_dir / f"{record_id}_target.png"
        save_image(render_grid(goal.grid, cell_size=self.cell_size), image_path)
        return TargetRecord(
            id=record_id,
            mode=self.mode.value,
            target_grid=goal.grid,
            code=goal.code,
            time_budget=goal.time_budget,
            max_score=goal_max_score(self.mode, goal.grid),
            image=self.relativize_path(image_path),
        )


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate goal datasets for every mode")
    parser.add_argument("mode", type=str, help="TABLE, GRID, MAZE, MATRIX or PIXEL")
    parser.add_argument("count", type=int, help="Number of goals to generate")
    parser.add_argument("--output-dir", type=Path, default=None)
    parser.add_argument("--challenge", action="store_true", help="Generate timed challenge goals")
    parser.add_argument("--cell-size", type=int, default=TargetGenerator.DEFAULT_CELL_SIZE)
    parser.add_argument("--seconds-per-row", type=int, default=DEFAULT_SECONDS_PER_ROW)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    mode = Mode.parse(args.mode)
    if mode is Mode.MAZE:
        generator = MazeGenerator(output_dir=args.output_dir, cell_size=args.cell_size, seed=args.seed)
    else:
        generator = TargetGenerator(
            output_dir=args.output_dir,
            mode=mode,
            challenge=args.challenge,
            cell_size=args.cell_size,
            seconds_per_row=args.seconds_per_row,
            seed=args.seed,
        )
    records = generator.generate_dataset(
        max(1, args.count),
        metadata_path=generator.output_dir / "data.json",
        progress=True,
    )
    print(f"Wrote {len(records)} {mode.value} records to {generator.output_dir / 'data.json'}")


__all__ = [
    "Goal",
    "TargetRecord",
    "TargetGenerator",
    "generate_random_target",
    "generate_challenge_target",
    "generate_matrix_target",
    "generate_pixel_target",
    "generate_goal",
    "generate_challenge",
    "goal_max_score",
    "main",
]


if __name__ == "__main__":
    main()
