import json
import tempfile
import unittest
from pathlib import Path

import pytest

from codegrid.evaluator import ProgramEvaluator
from codegrid.grid import Mode
from codegrid.maze import MazeGenerator
from codegrid.targets import TargetGenerator


class ProgramEvaluatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.output_dir = Path(self.tmp.name) / "pixel"
        self.generator = TargetGenerator(output_dir=self.output_dir, mode=Mode.PIXEL, seed=123)
        self.record = self.generator.create_puzzle(puzzle_id="pixel-test")

        metadata_path = self.output_dir / "data.json"
        metadata_path.write_text(json.dumps([self.record.to_dict()]), encoding="utf-8")
        self.metadata_path = metadata_path
        self.evaluator = ProgramEvaluator(metadata_path)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_reference_code_scores_full_marks(self) -> None:
        result = self.evaluator.evaluate(self.record.id, self.record.code)
        self.assertEqual(result.score, 10.0)
        self.assertEqual(result.max_score, 10.0)
        self.assertTrue(result.is_correct)
        self.assertEqual(result.completion_status, "success")
        self.assertIsNone(result.error)

    def test_program_from_file(self) -> None:
        program_path = Path(self.tmp.name) / "attempt.pxl"
        program_path.write_text(self.record.code, encoding="utf-8")
        result = self.evaluator.evaluate(self.record.id, program_path=program_path)
        self.assertTrue(result.is_correct)

    def test_blank_screen_is_partial(self) -> None:
        result = self.evaluator.evaluate(self.record.id, "")
        self.assertLess(result.score, 10.0)
        self.assertFalse(result.is_correct)
        self.assertEqual(result.completion_status, "idle")

    def test_syntax_error_is_reported(self) -> None:
        result = self.evaluator.evaluate(self.record.id, "16 * ( R")
        self.assertFalse(result.is_correct)
        self.assertEqual(result.error, "Syntax Error on line 1: Unbalanced parentheses.")
        self.assertEqual(result.to_dict()["puzzle_id"], "pixel-test")

    def test_unknown_record_and_missing_program(self) -> None:
        with self.assertRaises(KeyError):
            self.evaluator.evaluate("missing", "R")
        with self.assertRaises(FileNotFoundError):
            self.evaluator.evaluate(self.record.id, program_path=Path(self.tmp.name) / "nope.pxl")
        with self.assertRaises(ValueError):
            self.evaluator.evaluate(self.record.id)


def test_maze_evaluation_requires_exit(tmp_path):
    generator = MazeGenerator(tmp_path / "maze", seed=5)
    records = generator.generate_dataset(1, metadata_path=tmp_path / "maze" / "data.json")
    evaluator = ProgramEvaluator(tmp_path / "maze" / "data.json")

    result = evaluator.evaluate(records[0].id, "ruota 1\nruota 1")

    assert result.mode == "MAZE"
    assert result.error is None
    assert result.score == 0
    assert result.max_score == 8
    assert result.is_correct is False
    assert result.final_grid is None


def test_metadata_rewrite_replaces_matching_ids(tmp_path):
    generator = TargetGenerator(tmp_path / "goals", mode=Mode.TABLE, seed=8)
    metadata_path = tmp_path / "goals" / "data.json"
    first = generator.create_puzzle(puzzle_id="goal-a")
    generator.write_metadata([first, generator.create_puzzle(puzzle_id="goal-b")], metadata_path)

    replacement = generator.create_puzzle(puzzle_id="goal-a")
    generator.write_metadata([replacement], metadata_path)

    evaluator = ProgramEvaluator(metadata_path)
    assert list(evaluator.records) == ["goal-a", "goal-b"]
    assert evaluator.get_record("goal-a")["target_grid"] == replacement.target_grid
    assert len(evaluator.records_for_mode("table")) == 2
    assert evaluator.records_for_mode(Mode.PIXEL) == []


def test_metadata_with_unknown_mode_is_rejected(tmp_path):
    metadata_path = tmp_path / "data.json"
    metadata_path.write_text(json.dumps([{"id": "x", "mode": "CIRCLE"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        ProgramEvaluator(metadata_path)


def test_evaluate_main_prints_result(tmp_path, capsys):
    from codegrid.evaluator import main

    generator = TargetGenerator(tmp_path / "matrix", mode=Mode.MATRIX, seed=2)
    record = generator.create_puzzle(puzzle_id="m1")
    generator.write_metadata([record], tmp_path / "matrix" / "data.json")
    program = tmp_path / "answer.mtx"
    program.write_text(record.code, encoding="utf-8")

    main([str(tmp_path / "matrix" / "data.json"), "m1", str(program)])

    result = json.loads(capsys.readouterr().out)
    assert result["is_correct"] is True
    assert result["score"] == 10.0


def test_missing_metadata(tmp_path):
    with pytest.raises(FileNotFoundError):
        ProgramEvaluator(tmp_path / "absent.json")


if __name__ == "__main__":
    unittest.main()
