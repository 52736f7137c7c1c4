import unittest

from codegrid.engine import (
    load_state,
    new_state,
    reset_state,
    run_state,
    run_to_halt,
    step_state,
    stop_state,
)
from codegrid.grid import Mode, create_empty_grid
from codegrid.state import CompletionStatus


class TableEngineTests(unittest.TestCase):
    def test_two_steps_paint_two_strips(self) -> None:
        state = load_state(new_state(Mode.TABLE), "5#5\n3 R 0 0\n2 G 3 3")
        self.assertEqual(state.current_grid, create_empty_grid(5, 5))

        state = step_state(step_state(state))

        expected = create_empty_grid(5, 5)
        expected[0][0:3] = ["R", "R", "R"]
        expected[3][3:5] = ["G", "G"]
        self.assertEqual(state.current_grid, expected)
        self.assertIsNone(state.error)
        self.assertIs(state.completion_status, CompletionStatus.IDLE)
        self.assertTrue(state.is_finished)

    def test_overflow_halts_and_keeps_grid(self) -> None:
        state = load_state(new_state(Mode.TABLE), "5#5\n2 R 0 0\n6 G 1 0")
        state = step_state(state)
        before = [list(row) for row in state.current_grid]

        state = step_state(state)

        self.assertEqual(state.current_grid, before)
        self.assertEqual(state.error, "Runtime Error on line 3: Filling exceeds column bounds.")
        self.assertIs(state.completion_status, CompletionStatus.FAILURE)
        self.assertEqual(state.pc, 2)

        again = step_state(state)
        self.assertEqual(again.pc, 2)
        self.assertEqual(again.current_grid, before)

    def test_out_of_bounds_row(self) -> None:
        state = run_to_halt(load_state(new_state(Mode.TABLE), "3#3\n1 B 3 0"))
        self.assertEqual(state.error, "Runtime Error on line 2: Row 3 out of bounds.")

    def test_transitions_do_not_mutate_input(self) -> None:
        loaded = load_state(new_state(Mode.TABLE), "2#2\n2 B 1 0")
        stepped = step_state(loaded)
        self.assertEqual(loaded.current_grid, create_empty_grid(2, 2))
        self.assertEqual(loaded.pc, 0)
        self.assertEqual(stepped.current_grid[1], ["B", "B"])

    def test_load_error_keeps_previous_program(self) -> None:
        loaded = load_state(new_state(Mode.TABLE), "2#2\n1 R 0 0")
        failed = load_state(loaded, "2#2\n1 Q 0 0")
        self.assertEqual(failed.error, "Syntax Error on line 2: Invalid command format.")
        self.assertEqual(failed.source_code, "2#2\n1 R 0 0")
        self.assertEqual(len(failed.commands), 2)

    def test_reset_returns_to_loaded_state(self) -> None:
        state = load_state(new_state(Mode.TABLE), "3#3\n1 R 0 0\n9 G 0 0")
        state = run_to_halt(state)
        self.assertIsNotNone(state.error)

        state = reset_state(state)
        self.assertEqual(state.pc, 0)
        self.assertIsNone(state.error)
        self.assertIs(state.completion_status, CompletionStatus.IDLE)
        self.assertEqual(state.current_grid, create_empty_grid(3, 3))

    def test_success_when_target_matches(self) -> None:
        state = new_state(Mode.TABLE)
        state = load_state(state, "2#3\n3 G 1 0", update_target=True)
        self.assertEqual(state.target_grid, [[None, None, None], ["G", "G", "G"]])
        state = run_to_halt(state)
        self.assertIs(state.completion_status, CompletionStatus.SUCCESS)

    def test_run_and_stop_only_toggle_flag(self) -> None:
        state = load_state(new_state(Mode.TABLE), "2#2\n1 R 0 0")
        running = run_state(state)
        self.assertTrue(running.is_running)
        self.assertEqual(running.pc, 0)
        self.assertFalse(stop_state(running).is_running)

    def test_run_to_halt_respects_step_limit(self) -> None:
        state = load_state(new_state(Mode.TABLE), "4#4\n1 R 0 0\n1 R 1 0\n1 R 2 0")
        state = run_to_halt(state, max_steps=1)
        self.assertFalse(state.is_running)
        self.assertEqual(state.pc, 2)
        self.assertFalse(state.is_finished)


class GridEngineTests(unittest.TestCase):
    def test_relative_paint_counts_movements(self) -> None:
        state = step_state(load_state(new_state(Mode.GRID), "5#5\n2 G 1 0"))
        self.assertEqual(state.total_movements, 2)
        self.assertEqual(state.current_grid[0][1:3], ["G", "G"])
        self.assertEqual(state.last_position, (0, 2))

    def test_anchor_follows_last_painted_cell(self) -> None:
        state = run_to_halt(load_state(new_state(Mode.GRID), "5#5\n1 R 0 0\n1 B 1 1\n2 G -1 +2"))
        self.assertIsNone(state.error)
        self.assertEqual(state.current_grid[0][0], "R")
        self.assertEqual(state.current_grid[1][1], "B")
        self.assertEqual(state.current_grid[3][0:2], ["G", "G"])
        self.assertEqual(state.total_movements, 0 + 2 + 4)

    def test_negative_target_column_fails(self) -> None:
        state = run_to_halt(load_state(new_state(Mode.GRID), "3#3\n1 R -1 0"))
        self.assertEqual(state.error, "Runtime Error on line 2: Column -1 out of bounds.")


class MatrixPixelEngineTests(unittest.TestCase):
    def test_matrix_starts_blank_and_toggles(self) -> None:
        state = new_state(Mode.MATRIX)
        self.assertEqual(state.current_grid, create_empty_grid(8, 8))

        state = run_to_halt(load_state(state, "+ 1\n+ A\n- 1"))
        self.assertEqual(state.current_grid[0], [None] * 8)
        self.assertEqual([row[0] for row in state.current_grid[1:]], ["W"] * 7)

    def test_matrix_success_against_replayed_target(self) -> None:
        state = load_state(new_state(Mode.MATRIX), "+ 2\n+ H", update_target=True)
        state = run_to_halt(state)
        self.assertIs(state.completion_status, CompletionStatus.SUCCESS)

    def test_pixel_line_is_one_batch(self) -> None:
        state = load_state(new_state(Mode.PIXEL), "16 * ( R )\n2 * ( G + Off )")
        state = step_state(state)
        self.assertEqual(state.current_grid[0], ["R"] * 16)
        self.assertEqual(state.pc, 16)
        self.assertEqual(state.cursor, (0, 16))

        state = step_state(state)
        self.assertEqual(state.current_grid[1][:5], ["G", None, "G", None, None])
        self.assertEqual(state.cursor, (1, 4))
        self.assertTrue(state.is_finished)

    def test_loop_equals_literal_ops(self) -> None:
        looped = run_to_halt(load_state(new_state(Mode.PIXEL), "16 * ( R )"))
        literal = run_to_halt(load_state(new_state(Mode.PIXEL), " ".join(["R"] * 16)))
        self.assertEqual(looped.current_grid, literal.current_grid)

    def test_deeply_nested_pixel_loop_loads_one_row(self) -> None:
        state = load_state(new_state(Mode.PIXEL), "300 * ( 300 * ( 300 * ( R ) ) )")
        self.assertIsNone(state.error)
        self.assertEqual(len(state.commands), 16)
        state = step_state(state)
        self.assertEqual(state.current_grid[0], ["R"] * 16)
        self.assertTrue(state.is_finished)

    def test_blank_lines_leave_rows_untouched(self) -> None:
        state = run_to_halt(load_state(new_state(Mode.PIXEL), "B\n\nGB"))
        self.assertEqual(state.current_grid[0][0], "B")
        self.assertEqual(state.current_grid[1], [None] * 16)
        self.assertEqual(state.current_grid[2][0], "C")


if __name__ == "__main__":
    unittest.main()
