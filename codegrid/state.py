"""ProgramState: the single value every engine transition reads and returns."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .commands import Command
from .grid import Grid, Mode, copy_grid
from .maze.state import MazeState


class CompletionStatus(str, Enum):
    IDLE = "idle"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class ProgramState:
    """Aggregate of everything the renderer needs to draw one moment of a run.

    ``pc`` indexes the flattened command stream, not the source lines.
    ``cursor`` is the PIXEL write position, ``last_position`` the GRID/TABLE
    anchor (row, col) of the last painted cell.
    """

    mode: Mode
    source_code: str = ""
    commands: List[Command] = field(default_factory=list)
    pc: int = 0
    current_grid: Optional[Grid] = None
    target_grid: Optional[Grid] = None
    target_code: Optional[str] = None
    maze: Optional[MazeState] = None
    last_position: Tuple[int, int] = (0, 0)
    total_movements: int = 0
    maze_score: int = 0
    cursor: Tuple[int, int] = (0, 0)
    current_line: Optional[int] = None
    is_running: bool = False
    error: Optional[str] = None
    completion_status: CompletionStatus = CompletionStatus.IDLE

    def copy(self) -> "ProgramState":
        """Independent copy; commands are immutable and shared."""
        return dataclasses.replace(
            self,
            commands=list(self.commands),
            current_grid=copy_grid(self.current_grid),
            target_grid=copy_grid(self.target_grid),
            maze=self.maze.copy() if self.maze is not None else None,
        )

    @property
    def is_finished(self) -> bool:
        return self.pc >= len(self.commands)

    @property
    def is_halted(self) -> bool:
        return self.error is not None or self.completion_status is not CompletionStatus.IDLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "pc": self.pc,
            "command_count": len(self.commands),
            "current_grid": self.current_grid,
            "target_grid": self.target_grid,
            "maze": self.maze.to_dict() if self.maze is not None else None,
            "last_position": list(self.last_position),
            "total_movements": self.total_movements,
            "maze_score": self.maze_score,
            "is_running": self.is_running,
            "error": self.error,
            "completion_status": self.completion_status.value,
        }


__all__ = ["CompletionStatus", "ProgramState"]
