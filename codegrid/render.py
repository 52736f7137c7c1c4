"""Pillow rendering of grids for generated goal assets."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Sequence, Tuple

from PIL import Image, ImageDraw

from .base import PathLike
from .grid import Cell

PALETTE: Dict[Cell, Tuple[int, int, int]] = {
    None: (39, 39, 42),
    "R": (239, 68, 68),
    "G": (34, 197, 94),
    "B": (59, 130, 246),
    "W": (250, 250, 250),
    "Y": (250, 204, 21),
    "C": (34, 211, 238),
    "M": (217, 70, 239),
}

GRID_LINE_COLOR = (63, 63, 70)


def render_grid(grid: Sequence[Sequence[Cell]], *, cell_size: int = 24, gap: int = 1) -> Image.Image:
    """Draw a grid as colored squares separated by thin grid lines."""
    if cell_size <= 0:
        raise ValueError("cell_size must be positive")
    rows = len(grid)
    cols = len(grid[0]) if rows else 0
    width = cols * cell_size + (cols + 1) * gap
    height = rows * cell_size + (rows + 1) * gap
    canvas = Image.new("RGB", (max(1, width), max(1, height)), GRID_LINE_COLOR)
    draw = ImageDraw.Draw(canvas)
    for r, row in enumerate(grid):
        for c, cell in enumerate(row):
            left = gap + c * (cell_size + gap)
            top = gap + r * (cell_size + gap)
            draw.rectangle((left, top, left + cell_size - 1, top + cell_size - 1), fill=PALETTE[cell])
    return canvas


def save_image(image: Image.Image, path: PathLike) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    image.save(path)


__all__ = ["PALETTE", "render_grid", "save_image"]
