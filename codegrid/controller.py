"""Single owner of the program state, wrapping the pure engine transitions."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from .challenge import ChallengeSession
from .config import EngineConfig
from .engine import (
    load_state,
    new_state,
    reset_state,
    run_state,
    run_to_halt,
    step_state,
    stop_state,
)
from .grid import Grid, Mode, grid_shape, normalize_grid
from .maze.generator import generate_maze
from .maze.state import load_maze_session, save_maze_session
from .scoring import Score, max_score, score_state
from .state import ProgramState
from .targets.generator import Goal, generate_challenge, generate_goal

logger = logging.getLogger(__name__)


class ProgramController:
    """Load, step and score programs for one mode at a time.

    Callers drive pacing themselves: ``run()`` only raises the running
    flag, after which ``step()`` is expected every ``config.step_interval_ms``
    while ``snapshot().is_running`` holds. Challenge countdowns advance
    through ``tick()``, once per second.
    """

    def __init__(
        self,
        mode: "Mode | str" = Mode.TABLE,
        *,
        config: Optional[EngineConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._rng = rng or random.Random(seed)
        self.challenge = ChallengeSession(self.config.lockout_seconds)
        self.source = ""
        self._state = self._fresh_state(Mode.parse(mode))

    @property
    def rng(self) -> random.Random:
        return self._rng

    @property
    def mode(self) -> Mode:
        return self._state.mode

    @property
    def state(self) -> ProgramState:
        """Live state, read-only for callers; keep ``snapshot()`` results instead."""
        return self._state

    def snapshot(self) -> ProgramState:
        """Deep copy safe to keep across later steps."""
        return self._state.copy()

    def _fresh_state(self, mode: Mode) -> ProgramState:
        maze = generate_maze(rng=self.rng) if mode is Mode.MAZE else None
        return new_state(mode, maze)

    # ------------------------------------------------------------------
    # Engine API

    def load(self, code: Optional[str] = None, *, update_target: bool = False) -> ProgramState:
        if code is not None:
            self.source = code
        self._state = load_state(self._state, self.source, update_target=update_target)
        return self.snapshot()

    def step(self) -> ProgramState:
        self._state = step_state(self._state)
        return self.snapshot()

    def run(self) -> ProgramState:
        self._state = run_state(self._state)
        return self.snapshot()

    def stop(self) -> ProgramState:
        self._state = stop_state(self._state)
        return self.snapshot()

    def reset(self, force_regenerate: bool = False) -> ProgramState:
        """Rewind to the loaded program; MAZE can also draw a new layout."""
        maze = None
        if force_regenerate and self.mode is Mode.MAZE:
            maze = generate_maze(rng=self.rng)
        self._state = reset_state(self._state, maze)
        return self.snapshot()

    def run_until_halt(self, max_steps: int = 10_000) -> ProgramState:
        """Headless run: step until the program ends, halts or ``max_steps`` batches pass."""
        self._state = run_to_halt(self._state, max_steps)
        return self.snapshot()

    def score(self) -> Score:
        return score_state(self._state)

    def max_score(self) -> Score:
        return max_score(self._state)

    # ------------------------------------------------------------------
    # Mode, source and goal

    def _refuse_during_challenge(self, action: str) -> None:
        if self.challenge.active:
            raise RuntimeError(f"Cannot {action} during an active challenge")

    def set_mode(self, mode: "Mode | str") -> ProgramState:
        """Switch language; program text and target are cleared."""
        self._refuse_during_challenge("change mode")
        self.source = ""
        self._state = self._fresh_state(Mode.parse(mode))
        return self.snapshot()

    def set_source(self, code: str) -> None:
        """Replace the editor text without loading it."""
        self.source = code

    def set_target(self, grid: Optional[Grid], code: Optional[str] = None) -> ProgramState:
        if self.mode is Mode.MAZE:
            raise ValueError("MAZE mode has no target grid")
        target = normalize_grid(grid) if grid is not None else None
        expected = self.mode.fixed_dimensions
        if target is not None and expected is not None and grid_shape(target) != expected:
            raise ValueError(f"{self.mode.value} targets must be {expected[0]}x{expected[1]}")
        self._state = self._state.copy()
        self._state.target_grid = target
        self._state.target_code = code
        return self.snapshot()

    def _apply_goal(self, goal: Goal) -> None:
        if goal.maze is not None:
            self._state = reset_state(self._state, goal.maze)
        else:
            self.set_target(goal.grid, goal.code)

    def new_goal(self) -> ProgramState:
        """Fresh mode-appropriate objective; MAZE draws a new layout."""
        self._refuse_during_challenge("pick a new goal")
        self._apply_goal(generate_goal(self.mode, self.rng))
        return self.snapshot()

    # ------------------------------------------------------------------
    # Timed challenges

    def start_challenge(self) -> Goal:
        if self.challenge.active:
            raise RuntimeError("A challenge is already active")
        if self.challenge.locked_out:
            raise RuntimeError(f"New challenge available in {self.challenge.lockout_left} seconds")
        goal = generate_challenge(
            self.mode,
            self.rng,
            seconds_per_row=self.config.seconds_per_row,
            maze_time_budget=self.config.maze_time_budget,
        )
        self._apply_goal(goal)
        self.challenge.start(goal.time_budget)
        logger.info("Started %s challenge with %d seconds", self.mode.value, goal.time_budget)
        return goal

    def stop_challenge(self) -> None:
        self.challenge.stop()
        self._state = stop_state(self._state)

    def tick(self) -> bool:
        """One second of challenge time. True when the challenge just expired."""
        expired = self.challenge.tick()
        if expired:
            logger.info("Challenge time is up")
            self._state = stop_state(self._state)
        return expired

    # ------------------------------------------------------------------
    # Maze sessions and reporting

    def save_maze_session(self) -> str:
        if self.mode is not Mode.MAZE or self._state.maze is None:
            raise RuntimeError("Maze sessions can only be saved in MAZE mode")
        return save_maze_session(self.source, self._state.maze)

    def restore_maze_session(self, text: str) -> ProgramState:
        """Load a saved document: its code, then its exact maze progress."""
        self._refuse_during_challenge("restore a maze session")
        code, maze = load_maze_session(text)
        if self.mode is not Mode.MAZE:
            self._state = new_state(Mode.MAZE, maze)
        self.source = code
        self._state = load_state(self._state, code)
        self._state.maze = maze.copy()
        self._state.maze_score = maze.collected_value
        return self.snapshot()

    def report(self) -> Dict[str, Any]:
        """Figures an external certificate renderer consumes."""
        state = self._state
        return {
            "mode": state.mode.value,
            "score": self.score(),
            "max_score": self.max_score(),
            "total_movements": state.total_movements,
            "completion_status": state.completion_status.value,
            "error": state.error,
            "program": self.source,
            "challenge_active": self.challenge.active,
            "time_left": self.challenge.time_left,
        }


__all__ = ["ProgramController"]
