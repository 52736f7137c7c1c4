"""Program error taxonomy.

Errors are raised inside the parser, loader and engine and are turned into
the single human-readable ``ProgramState.error`` string at the controller
boundary. Line numbers are stored 0-based and rendered 1-based.
"""

from __future__ import annotations

from typing import Optional


class ProgramError(Exception):
    """Base class for every error a student program can produce."""

    prefix = "Error"

    def __init__(self, detail: str, line_number: Optional[int] = None) -> None:
        self.detail = detail
        self.line_number = line_number
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.line_number is None:
            return f"{self.prefix}: {self.detail}"
        return f"{self.prefix} on line {self.line_number + 1}: {self.detail}"

    def __str__(self) -> str:
        return self.message


class ProgramSyntaxError(ProgramError):
    """A line matches no grammar production of the active mode."""

    prefix = "Syntax Error"


class ProgramStructureError(ProgramError):
    """A cross-line rule is violated (dimensions declared twice, etc.)."""

    prefix = "Error"


class ProgramRuntimeError(ProgramError):
    """Raised while stepping: bounds violations and collisions."""

    prefix = "Runtime Error"


class MazeCollisionError(ProgramRuntimeError):
    """The turtle tried to cross a wall."""


__all__ = [
    "ProgramError",
    "ProgramSyntaxError",
    "ProgramStructureError",
    "ProgramRuntimeError",
    "MazeCollisionError",
]
