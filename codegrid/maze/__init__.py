"""MAZE mode: layout generation, session state and rendering."""

__all__ = [
    "generate_maze",
    "render_maze",
    "MazeGenerator",
    "MazeRecord",
    "MazeState",
    "MazeWalls",
    "MazeItem",
    "Turtle",
    "save_maze_session",
    "load_maze_session",
]

from .state import MazeItem, MazeState, MazeWalls, Turtle, load_maze_session, save_maze_session
from .render import render_maze
from .generator import MazeGenerator, MazeRecord, generate_maze
