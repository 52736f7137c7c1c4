"""Stepped execution engine.

Every transition is a pure function ``(state, event) -> state``: the input
state is never mutated, and the returned state shares nothing mutable
with it. Program errors never escape; they land in ``state.error``.

Lifecycle::

    idle --load--> loaded --step/run--> stepping --> halted(success|failure)
                     ^                                   |
                     +---------------reset---------------+
"""

from __future__ import annotations

import logging
from typing import Optional

from .commands import CommandType
from .errors import ProgramError, ProgramRuntimeError
from .executor import apply_command, batch_end, begin_line
from .grid import Mode
from .loader import LoadedProgram, initial_grid, load_program, silent_replay
from .maze.state import MazeState
from .state import CompletionStatus, ProgramState

logger = logging.getLogger(__name__)


def new_state(mode: "Mode | str", maze: Optional[MazeState] = None) -> ProgramState:
    """Empty, unloaded state for a mode."""
    mode = Mode.parse(mode)
    state = ProgramState(mode=mode, maze=maze)
    return _rewind(state, LoadedProgram(mode=mode, source_code="", dimensions=mode.fixed_dimensions))


def load_state(state: ProgramState, code: str, *, update_target: bool = False) -> ProgramState:
    """Parse ``code`` and return a freshly loaded state.

    On a syntax or structural error the previous program is kept and only
    ``error`` changes. With ``update_target`` the target grid is replaced
    by a silent replay of the code (ignored for MAZE).
    """
    try:
        program = load_program(code, state.mode)
    except ProgramError as exc:
        failed = state.copy()
        failed.error = str(exc)
        failed.is_running = False
        logger.debug("Load failed: %s", exc)
        return failed

    loaded = state.copy()
    loaded.source_code = code
    loaded.commands = list(program.commands)
    loaded = _rewind(loaded, program)
    if update_target and state.mode is not Mode.MAZE:
        loaded.target_grid = silent_replay(program)
        loaded.target_code = code
    return loaded


def reset_state(state: ProgramState, maze: Optional[MazeState] = None) -> ProgramState:
    """Back to the just-loaded state; ``maze`` replaces the layout when given."""
    program = LoadedProgram(
        mode=state.mode,
        source_code=state.source_code,
        commands=list(state.commands),
        dimensions=_declared_dimensions(state),
    )
    rewound = state.copy()
    if maze is not None:
        rewound.maze = maze.copy()
    return _rewind(rewound, program)


def step_state(state: ProgramState) -> ProgramState:
    """Execute every command of the next source line as one batch.

    A failing command halts the run where it stands; effects of the
    commands before it in the same batch stay applied.
    """
    nxt = state.copy()
    if nxt.is_halted:
        nxt.is_running = False
        return nxt

    commands = nxt.commands
    # Dimension declarations already sized the grid at load time.
    while nxt.pc < len(commands) and commands[nxt.pc].type is CommandType.START:
        apply_command(nxt, commands[nxt.pc])
        nxt.pc += 1
    if nxt.pc >= len(commands):
        return _finish(nxt)

    end = batch_end(commands, nxt.pc)
    begin_line(nxt, commands[nxt.pc].line_number)
    for index in range(nxt.pc, end):
        try:
            apply_command(nxt, commands[index])
        except ProgramRuntimeError as exc:
            nxt.pc = index
            nxt.error = str(exc)
            nxt.completion_status = CompletionStatus.FAILURE
            nxt.is_running = False
            logger.debug("Run halted: %s", exc)
            return nxt
        if nxt.completion_status is CompletionStatus.SUCCESS:
            nxt.pc = index + 1
            nxt.is_running = False
            return nxt
    nxt.pc = end
    if nxt.pc >= len(commands):
        return _finish(nxt)
    return nxt


def run_state(state: ProgramState) -> ProgramState:
    """Raise the running flag; pacing belongs to the caller."""
    running = state.copy()
    running.is_running = not running.is_halted and not running.is_finished
    return running


def stop_state(state: ProgramState) -> ProgramState:
    stopped = state.copy()
    stopped.is_running = False
    return stopped


def run_to_halt(state: ProgramState, max_steps: int = 10_000) -> ProgramState:
    """Step until the program ends or halts, or ``max_steps`` batches pass."""
    if max_steps <= 0:
        raise ValueError("max_steps must be positive")
    current = run_state(state)
    steps = 0
    while current.is_running and steps < max_steps:
        current = step_state(current)
        steps += 1
    if current.is_running:
        logger.warning("Stopped after %d steps without halting", steps)
        current = stop_state(current)
    return current


def _finish(state: ProgramState) -> ProgramState:
    state.is_running = False
    if (
        state.mode is not Mode.MAZE
        and state.target_grid is not None
        and state.current_grid is not None
        and state.current_grid == state.target_grid
    ):
        state.completion_status = CompletionStatus.SUCCESS
    return state


def _rewind(state: ProgramState, program: LoadedProgram) -> ProgramState:
    state.pc = 0
    state.current_grid = initial_grid(program)
    state.last_position = (0, 0)
    state.total_movements = 0
    state.maze_score = 0
    state.cursor = (0, 0)
    state.current_line = None
    state.is_running = False
    state.error = None
    state.completion_status = CompletionStatus.IDLE
    if state.maze is not None:
        state.maze = state.maze.fresh()
    return state


def _declared_dimensions(state: ProgramState):
    for command in state.commands:
        if command.type is CommandType.START:
            return (command.rows, command.cols)
    return state.mode.fixed_dimensions


__all__ = [
    "new_state",
    "load_state",
    "reset_state",
    "step_state",
    "run_state",
    "stop_state",
    "run_to_halt",
]
