"""Whole-program loading: parse, validate, flatten and optionally replay."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .commands import Command, CommandType, Loop, Start
from .errors import ProgramRuntimeError, ProgramStructureError
from .executor import apply_command, begin_line, iter_batches
from .grid import MAX_COLS, MAX_ROWS, PIXEL_SIZE, Grid, Mode, copy_grid, create_empty_grid
from .parser import parse_line
from .state import ProgramState

logger = logging.getLogger(__name__)


@dataclass
class LoadedProgram:
    """A validated, flattened command stream ready for execution."""

    mode: Mode
    source_code: str
    commands: List[Command] = field(default_factory=list)
    dimensions: Optional[Tuple[int, int]] = None

    @property
    def line_count(self) -> int:
        return len({command.line_number for command in self.commands})


def flatten_ops(ops: Iterable[Command], limit: Optional[int] = None) -> List[Command]:
    """Expand nested loops into their repeated primitive operations.

    With ``limit`` the expansion stops once that many primitives exist.
    """
    flat: List[Command] = []
    for op in ops:
        remaining = None if limit is None else limit - len(flat)
        if remaining is not None and remaining <= 0:
            break
        if isinstance(op, Loop):
            body = flatten_ops(op.body, remaining)
            if not body:
                continue
            repeats = op.count
            if remaining is not None:
                repeats = min(repeats, -(-remaining // len(body)))
            for _ in range(repeats):
                flat.extend(body)
        else:
            flat.append(op)
    return flat if limit is None else flat[:limit]


def load_program(code: str, mode: "Mode | str") -> LoadedProgram:
    """Parse every line and enforce the cross-line rules.

    Raises ``ProgramSyntaxError`` or ``ProgramStructureError`` on the first
    offending line.
    """
    mode = Mode.parse(mode)
    commands: List[Command] = []
    dimensions: Optional[Tuple[int, int]] = mode.fixed_dimensions

    for line_number, line in enumerate(code.split("\n")):
        parsed = parse_line(line, line_number, mode)
        if not parsed:
            continue
        if mode.declares_dimensions:
            _check_table_rules(parsed, dimensions, line_number)
            for command in parsed:
                if isinstance(command, Start):
                    dimensions = (command.rows, command.cols)
        if mode is Mode.PIXEL:
            # Each line paints one screen row; primitives past its width are no-ops.
            parsed = flatten_ops(parsed, PIXEL_SIZE)
        commands.extend(parsed)

    logger.debug("Loaded %s program with %d commands", mode.value, len(commands))
    return LoadedProgram(mode=mode, source_code=code, commands=commands, dimensions=dimensions)


def _check_table_rules(
    parsed: List[Command],
    dimensions: Optional[Tuple[int, int]],
    line_number: int,
) -> None:
    for command in parsed:
        if command.type is CommandType.START:
            if dimensions is not None:
                raise ProgramStructureError("Multiple definition of table dimensions.", line_number)
            if command.rows > MAX_ROWS or command.cols > MAX_COLS:
                raise ProgramStructureError(
                    f"Table dimensions exceed max {MAX_ROWS}x{MAX_COLS}.", line_number
                )
        elif dimensions is None:
            raise ProgramStructureError("Color command before table definition.", line_number)


def initial_grid(program: LoadedProgram) -> Optional[Grid]:
    """Visible grid right after load/reset: declared or fixed size, all unlit."""
    if program.mode is Mode.MAZE or program.dimensions is None:
        return None
    rows, cols = program.dimensions
    return create_empty_grid(rows, cols)


def silent_replay(program: LoadedProgram) -> Optional[Grid]:
    """Best-effort grid derivation: failing commands are skipped.

    Each command is applied to a scratch copy first, so a command that
    fails halfway leaves no partial effect behind.
    """
    if program.mode is Mode.MAZE:
        return None
    state = ProgramState(mode=program.mode, commands=program.commands)
    state.current_grid = initial_grid(program)
    for start, end in iter_batches(program.commands):
        begin_line(state, program.commands[start].line_number)
        for command in program.commands[start:end]:
            scratch_grid = copy_grid(state.current_grid)
            scratch_position = state.last_position
            scratch_cursor = state.cursor
            try:
                apply_command(state, command)
            except ProgramRuntimeError as exc:
                logger.debug("Silent replay skipped command: %s", exc)
                state.current_grid = scratch_grid
                state.last_position = scratch_position
                state.cursor = scratch_cursor
    return state.current_grid


__all__ = ["LoadedProgram", "load_program", "flatten_ops", "initial_grid", "silent_replay"]
