"""Runtime settings for the controller."""

import os
from dataclasses import dataclass, field

DEFAULT_STEP_INTERVAL_MS = 300
DEFAULT_SECONDS_PER_ROW = 60
DEFAULT_LOCKOUT_SECONDS = 300
DEFAULT_MAZE_TIME_BUDGET = 600


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass
class EngineConfig:
    """Pacing and challenge timing."""

    # Delay between automatic steps while running; the caller owns the timer.
    step_interval_ms: int = field(
        default_factory=lambda: _env_int("CODEGRID_STEP_INTERVAL_MS", DEFAULT_STEP_INTERVAL_MS)
    )
    seconds_per_row: int = field(
        default_factory=lambda: _env_int("CODEGRID_SECONDS_PER_ROW", DEFAULT_SECONDS_PER_ROW)
    )
    lockout_seconds: int = field(
        default_factory=lambda: _env_int("CODEGRID_LOCKOUT_SECONDS", DEFAULT_LOCKOUT_SECONDS)
    )
    maze_time_budget: int = field(
        default_factory=lambda: _env_int("CODEGRID_MAZE_TIME_BUDGET", DEFAULT_MAZE_TIME_BUDGET)
    )

    def __post_init__(self) -> None:
        if self.step_interval_ms <= 0:
            raise ValueError("step_interval_ms must be positive")
        if self.seconds_per_row <= 0 or self.maze_time_budget <= 0:
            raise ValueError("challenge time budgets must be positive")
        if self.lockout_seconds < 0:
            raise ValueError("lockout_seconds must be non-negative")


__all__ = [
    "EngineConfig",
    "DEFAULT_STEP_INTERVAL_MS",
    "DEFAULT_SECONDS_PER_ROW",
    "DEFAULT_LOCKOUT_SECONDS",
    "DEFAULT_MAZE_TIME_BUDGET",
]
