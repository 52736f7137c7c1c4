"""Perfect-maze generator with collectible item placement."""

from __future__ import annotations

import argparse
import logging
import random
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..base import AbstractGoalGenerator, PathLike
from ..grid import MAZE_SIZE
from ..render import save_image
from .render import render_maze
from .state import MazeItem, MazeState, MazeWalls, Turtle

logger = logging.getLogger(__name__)

LEAF_COUNT = 4
CARROT_COUNT = 2

_OPPOSITE = {"top": "bottom", "bottom": "top", "left": "right", "right": "left"}


def generate_maze(
    rows: int = MAZE_SIZE,
    cols: int = MAZE_SIZE,
    rng: Optional[random.Random] = None,
) -> MazeState:
    """Carve a perfect maze by iterative randomized depth-first search.

    Carving starts at the grid center. One exit is opened at a uniformly
    chosen edge midpoint, then 4 leaves and 2 carrots are dropped on
    distinct cells other than the start and the exit. Every cell of a
    perfect maze is reachable, so every item is too.
    """
    if rows < 2 or cols < 2:
        raise ValueError("maze needs at least 2 rows and 2 cols")
    if rows * cols - 2 < LEAF_COUNT + CARROT_COUNT:
        raise ValueError("maze too small to place every item")
    rng = rng or random.Random()
    cells = [[MazeWalls() for _ in range(cols)] for _ in range(rows)]
    visited = [[False] * cols for _ in range(rows)]

    start = (rows // 2, cols // 2)
    visited[start[0]][start[1]] = True
    stack: List[Tuple[int, int]] = [start]

    while stack:
        r, c = stack[-1]
        neighbors: List[Tuple[int, int, str]] = []
        if r > 0 and not visited[r - 1][c]:
            neighbors.append((r - 1, c, "top"))
        if r < rows - 1 and not visited[r + 1][c]:
            neighbors.append((r + 1, c, "bottom"))
        if c > 0 and not visited[r][c - 1]:
            neighbors.append((r, c - 1, "left"))
        if c < cols - 1 and not visited[r][c + 1]:
            neighbors.append((r, c + 1, "right"))

        if not neighbors:
            stack.pop()
            continue
        next_r, next_c, side = neighbors[rng.randrange(len(neighbors))]
        setattr(cells[r][c], side, False)
        setattr(cells[next_r][next_c], _OPPOSITE[side], False)
        visited[next_r][next_c] = True
        stack.append((next_r, next_c))

    exits = [
        (0, cols // 2, "top"),
        (rows - 1, cols // 2, "bottom"),
        (rows // 2, 0, "left"),
        (rows // 2, cols - 1, "right"),
    ]
    exit_r, exit_c, exit_side = exits[rng.randrange(len(exits))]
    setattr(cells[exit_r][exit_c], exit_side, False)

    candidates = [
        (r, c)
        for r in range(rows)
        for c in range(cols)
        if (r, c) != start and (r, c) != (exit_r, exit_c)
    ]
    # Fisher-Yates, then pop from the tail.
    for i in range(len(candidates) - 1, 0, -1):
        j = rng.randrange(i + 1)
        candidates[i], candidates[j] = candidates[j], candidates[i]
    items: List[MazeItem] = []
    for _ in range(LEAF_COUNT):
        r, c = candidates.pop()
        items.append(MazeItem(r, c, "leaf"))
    for _ in range(CARROT_COUNT):
        r, c = candidates.pop()
        items.append(MazeItem(r, c, "carrot"))

    logger.debug("Generated %dx%d maze with exit %s", rows, cols, (exit_r, exit_c))
    return MazeState(
        rows=rows,
        cols=cols,
        cells=cells,
        items=items,
        exit=(exit_r, exit_c),
        visited={start},
        turtle=Turtle(*start),
    )


@dataclass
class MazeRecord:
    """Serializable metadata for one generated maze."""

    id: str
    mode: str
    maze: Dict[str, Any]
    max_score: int
    image: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mode": self.mode,
            "maze": self.maze,
            "max_score": self.max_score,
            "image": self.image,
        }


class MazeGenerator(AbstractGoalGenerator[MazeRecord]):
    """Generate MAZE-mode layouts together with a rendered preview image."""

    DEFAULT_OUTPUT_DIR: PathLike = "data/maze"
    DEFAULT_CELL_SIZE = 24

    def __init__(
        self,
        output_dir: Optional[PathLike] = None,
        *,
        rows: int = MAZE_SIZE,
        cols: int = MAZE_SIZE,
        cell_size: int = DEFAULT_CELL_SIZE,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__(output_dir if output_dir is not None else self.DEFAULT_OUTPUT_DIR)
        if rows < 2 or cols < 2:
            raise ValueError("rows and cols must be at least 2")
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self.rows = rows
        self.cols = cols
        self.cell_size = cell_size
        self._rng = random.Random(seed)
        self.puzzle_dir = self.output_dir / "puzzles"
        self.puzzle_dir.mkdir(parents=True, exist_ok=True)

    @property
    def rng(self) -> random.Random:
        return self._rng

    def create_puzzle(self, *, puzzle_id: Optional[str] = None) -> MazeRecord:
        record_id = puzzle_id or str(uuid.uuid4())
        maze = generate_maze(self.rows, self.cols, self.rng)
        image_path = self.puzzle_dir / f"{record_id}_maze.png"
        save_image(render_maze(maze, cell_size=self.cell_size), image_path)
        return MazeRecord(
            id=record_id,
            mode="MAZE",
            maze=maze.to_dict(),
            max_score=maze.max_score,
            image=self.relativize_path(image_path),
        )

    @classmethod
    def _parse_args(cls, argv: Optional[List[str]] = None) -> argparse.Namespace:
        parser = argparse.ArgumentParser(description="Generate MAZE-mode layouts")
        parser.add_argument("count", type=int, help="Number of mazes to generate")
        parser.add_argument("--output-dir", type=Path, default=None)
        parser.add_argument("--rows", type=int, default=MAZE_SIZE)
        parser.add_argument("--cols", type=int, default=MAZE_SIZE)
        parser.add_argument("--cell-size", type=int, default=cls.DEFAULT_CELL_SIZE)
        parser.add_argument("--seed", type=int, default=None)
        return parser.parse_args(argv)

    @classmethod
    def main(cls, argv: Optional[List[str]] = None) -> None:
        args = cls._parse_args(argv)
        generator = cls(
            output_dir=args.output_dir,
            rows=args.rows,
            cols=args.cols,
            cell_size=args.cell_size,
            seed=args.seed,
        )
        generator.generate_dataset(
            max(1, args.count),
            metadata_path=generator.output_dir / "data.json",
            progress=True,
        )


__all__ = ["generate_maze", "MazeGenerator", "MazeRecord", "LEAF_COUNT", "CARROT_COUNT"]


if __name__ == "__main__":
    MazeGenerator.main()
