"""Score candidate programs against generated goal records."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import AbstractGoalEvaluator, PathLike
from .engine import load_state, new_state, run_to_halt
from .grid import Grid, Mode, normalize_grid
from .maze.state import MazeState
from .scoring import Score, max_score, score_state
from .state import CompletionStatus


@dataclass
class ProgramEvaluationResult:
    puzzle_id: str
    mode: str
    score: Score
    max_score: Score
    is_correct: bool
    completion_status: str
    error: Optional[str]
    total_movements: int
    final_grid: Optional[Grid]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "puzzle_id": self.puzzle_id,
            "mode": self.mode,
            "score": self.score,
            "max_score": self.max_score,
            "is_correct": self.is_correct,
            "completion_status": self.completion_status,
            "error": self.error,
            "total_movements": self.total_movements,
            "final_grid": self.final_grid,
        }


class ProgramEvaluator(AbstractGoalEvaluator):
    """Run a program headlessly against a record's target grid or maze.

    A candidate is correct when it reaches the maximum score without an
    error; for MAZE the turtle must also have left through the exit.
    """

    DEFAULT_MAX_STEPS = 10_000

    def evaluate(
        self,
        puzzle_id: str,
        program: Optional[str] = None,
        *,
        program_path: Optional[PathLike] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> ProgramEvaluationResult:
        record = self.get_record(puzzle_id)
        if program_path is not None:
            path = Path(program_path)
            if not path.exists():
                raise FileNotFoundError(f"Program not found: {path}")
            program = path.read_text(encoding="utf-8")
        if program is None:
            raise ValueError("Either program or program_path is required")

        mode = Mode.parse(record.get("mode", ""))
        if mode is Mode.MAZE:
            if "maze" not in record:
                raise ValueError("Maze record missing 'maze'")
            state = new_state(mode, MazeState.from_dict(record["maze"]))
        else:
            if "target_grid" not in record:
                raise ValueError("Goal record missing 'target_grid'")
            state = new_state(mode)
            state.target_grid = normalize_grid(record["target_grid"])

        state = load_state(state, program)
        if state.error is None:
            state = run_to_halt(state, max_steps)

        score = score_state(state)
        best = max_score(state)
        is_correct = state.error is None and score >= best
        if mode is Mode.MAZE:
            is_correct = is_correct and state.completion_status is CompletionStatus.SUCCESS

        return ProgramEvaluationResult(
            puzzle_id=puzzle_id,
            mode=mode.value,
            score=score,
            max_score=best,
            is_correct=is_correct,
            completion_status=state.completion_status.value,
            error=state.error,
            total_movements=state.total_movements,
            final_grid=state.current_grid,
        )


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Score a program against a generated goal")
    parser.add_argument("metadata", type=Path, help="Path to data.json")
    parser.add_argument("puzzle_id", type=str)
    parser.add_argument("program", type=Path, help="Program source file")
    parser.add_argument("--max-steps", type=int, default=ProgramEvaluator.DEFAULT_MAX_STEPS)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    evaluator = ProgramEvaluator(args.metadata)
    result = evaluator.evaluate(args.puzzle_id, program_path=args.program, max_steps=args.max_steps)
    print(json.dumps(result.to_dict(), indent=2))


__all__ = ["ProgramEvaluator", "ProgramEvaluationResult", "main"]


if __name__ == "__main__":
    main()
