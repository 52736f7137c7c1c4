"""Pillow rendering of maze layouts and turtle position."""

from __future__ import annotations

from typing import Tuple

from PIL import Image, ImageDraw

from .state import HEADINGS, MazeState

MAZE_BACKGROUND = (250, 250, 250)
WALL_COLOR = (0, 0, 0)
VISITED_COLOR = (219, 234, 254)
EXIT_COLOR = (187, 247, 208)
ITEM_COLORS = {"leaf": (34, 197, 94), "carrot": (249, 115, 22)}
TURTLE_COLOR = (220, 0, 0)


def render_maze(
    maze: MazeState,
    *,
    cell_size: int = 24,
    wall_width: int = 2,
    show_turtle: bool = True,
) -> Image.Image:
    """Draw walls, visited cells, the exit, uncollected items and the turtle."""
    if cell_size <= 0:
        raise ValueError("cell_size must be positive")
    pad = wall_width
    canvas = Image.new(
        "RGB",
        (maze.cols * cell_size + 2 * pad, maze.rows * cell_size + 2 * pad),
        MAZE_BACKGROUND,
    )
    draw = ImageDraw.Draw(canvas)

    def box(r: int, c: int) -> Tuple[int, int, int, int]:
        left = pad + c * cell_size
        top = pad + r * cell_size
        return left, top, left + cell_size, top + cell_size

    for r, c in maze.visited:
        if maze.in_bounds(r, c):
            left, top, right, bottom = box(r, c)
            draw.rectangle((left, top, right - 1, bottom - 1), fill=VISITED_COLOR)
    if maze.exit is not None:
        left, top, right, bottom = box(*maze.exit)
        draw.rectangle((left, top, right - 1, bottom - 1), fill=EXIT_COLOR)

    for r in range(maze.rows):
        for c in range(maze.cols):
            walls = maze.walls_at(r, c)
            left, top, right, bottom = box(r, c)
            if walls.top:
                draw.line((left, top, right, top), fill=WALL_COLOR, width=wall_width)
            if walls.bottom:
                draw.line((left, bottom, right, bottom), fill=WALL_COLOR, width=wall_width)
            if walls.left:
                draw.line((left, top, left, bottom), fill=WALL_COLOR, width=wall_width)
            if walls.right:
                draw.line((right, top, right, bottom), fill=WALL_COLOR, width=wall_width)

    radius = max(2, cell_size // 4)
    for item in maze.items:
        if item.collected:
            continue
        left, top, right, bottom = box(item.row, item.col)
        cx, cy = (left + right) / 2, (top + bottom) / 2
        draw.ellipse((cx - radius, cy - radius, cx + radius, cy + radius), fill=ITEM_COLORS[item.kind])

    if show_turtle and maze.turtle is not None and maze.in_bounds(*maze.turtle.position):
        _draw_turtle(draw, box(*maze.turtle.position), maze.turtle.heading)
    return canvas


def _draw_turtle(
    draw: ImageDraw.ImageDraw,
    bbox: Tuple[int, int, int, int],
    heading: int,
) -> None:
    left, top, right, bottom = bbox
    cx, cy = (left + right) / 2, (top + bottom) / 2
    half = (right - left) * 0.35
    dr, dc, _ = HEADINGS[heading % 360]
    tip = (cx + dc * half, cy + dr * half)
    # Base corners sit behind the center, perpendicular to the heading.
    back_x, back_y = cx - dc * half * 0.6, cy - dr * half * 0.6
    base_a = (back_x - dr * half * 0.6, back_y + dc * half * 0.6)
    base_b = (back_x + dr * half * 0.6, back_y - dc * half * 0.6)
    draw.polygon([tip, base_a, base_b], fill=TURTLE_COLOR)


__all__ = ["render_maze"]
