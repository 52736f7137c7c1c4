"""Interpreter, generators and scoring for the five grid programming languages."""

__all__ = [
    "AbstractGoalGenerator",
    "AbstractGoalEvaluator",
    "Mode",
    "Command",
    "CommandType",
    "ProgramError",
    "ProgramSyntaxError",
    "ProgramStructureError",
    "ProgramRuntimeError",
    "MazeCollisionError",
    "parse_line",
    "LoadedProgram",
    "load_program",
    "silent_replay",
    "CompletionStatus",
    "ProgramState",
    "new_state",
    "load_state",
    "reset_state",
    "step_state",
    "run_state",
    "stop_state",
    "run_to_halt",
    "score_state",
    "max_score",
    "EngineConfig",
    "ChallengeSession",
    "ProgramController",
    "MazeState",
    "MazeGenerator",
    "MazeRecord",
    "generate_maze",
    "save_maze_session",
    "load_maze_session",
    "Goal",
    "TargetGenerator",
    "TargetRecord",
    "generate_goal",
    "generate_challenge",
    "ProgramEvaluator",
    "ProgramEvaluationResult",
]

from .base import AbstractGoalEvaluator, AbstractGoalGenerator
from .grid import Mode
from .commands import Command, CommandType
from .errors import (
    MazeCollisionError,
    ProgramError,
    ProgramRuntimeError,
    ProgramStructureError,
    ProgramSyntaxError,
)
from .parser import parse_line
from .loader import LoadedProgram, load_program, silent_replay
from .state import CompletionStatus, ProgramState
from .engine import (
    load_state,
    new_state,
    reset_state,
    run_state,
    run_to_halt,
    step_state,
    stop_state,
)
from .scoring import max_score, score_state
from .config import EngineConfig
from .challenge import ChallengeSession
from .controller import ProgramController
from .maze import MazeGenerator, MazeRecord, MazeState, generate_maze, load_maze_session, save_maze_session
from .targets import Goal, TargetGenerator, TargetRecord, generate_challenge, generate_goal
from .evaluator import ProgramEvaluationResult, ProgramEvaluator
