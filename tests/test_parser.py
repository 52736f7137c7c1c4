import unittest

from codegrid.commands import CommandType, Loop, Paint, Skip
from codegrid.errors import ProgramSyntaxError
from codegrid.grid import Mode
from codegrid.loader import flatten_ops
from codegrid.parser import parse_line, tokenize_pixel


class TableGridParserTests(unittest.TestCase):
    def test_table_color_command(self) -> None:
        (command,) = parse_line("3 R 0 0", 1, Mode.TABLE)
        self.assertIs(command.type, CommandType.COLOR)
        self.assertEqual((command.count, command.color, command.row, command.col), (3, "R", 0, 0))
        self.assertEqual(command.line_number, 1)

    def test_colors_are_case_insensitive(self) -> None:
        (command,) = parse_line("  2 g 1 4 ", 0, "table")
        self.assertEqual(command.color, "G")
        self.assertEqual((command.row, command.col), (1, 4))

    def test_start_allows_spaces_around_hash(self) -> None:
        (command,) = parse_line("5 # 7", 0, Mode.GRID)
        self.assertIs(command.type, CommandType.START)
        self.assertEqual((command.rows, command.cols), (5, 7))

    def test_zero_dimensions_are_rejected(self) -> None:
        with self.assertRaises(ProgramSyntaxError):
            parse_line("0#5", 0, Mode.TABLE)

    def test_invalid_table_line_reports_one_based_line(self) -> None:
        with self.assertRaises(ProgramSyntaxError) as ctx:
            parse_line("3 X 0 0", 3, Mode.TABLE)
        self.assertEqual(str(ctx.exception), "Syntax Error on line 4: Invalid command format.")

    def test_table_rejects_signed_coordinates(self) -> None:
        with self.assertRaises(ProgramSyntaxError):
            parse_line("1 R -1 0", 0, Mode.TABLE)

    def test_grid_offsets_accept_signs(self) -> None:
        (command,) = parse_line("2 B -1 +2", 0, Mode.GRID)
        self.assertIs(command.type, CommandType.GRID_COLOR)
        self.assertEqual((command.count, command.color, command.dx, command.dy), (2, "B", -1, 2))

    def test_blank_line_yields_nothing(self) -> None:
        for mode in Mode:
            self.assertEqual(parse_line("   \t", 0, mode), [])


class MazeMatrixParserTests(unittest.TestCase):
    def test_rotate_is_quarter_turns(self) -> None:
        (command,) = parse_line("RUOTA 3", 0, Mode.MAZE)
        self.assertIs(command.type, CommandType.ROTATE)
        self.assertEqual(command.degrees, 270)

    def test_move(self) -> None:
        (command,) = parse_line("muovi 4", 0, Mode.MAZE)
        self.assertEqual(command.steps, 4)

    def test_invalid_maze_commands(self) -> None:
        for line in ("ruota 4", "ruota", "muovi -1", "avanti 2"):
            with self.assertRaises(ProgramSyntaxError):
                parse_line(line, 0, Mode.MAZE)

    def test_matrix_row_and_column(self) -> None:
        (row_on,) = parse_line("+ 3", 0, Mode.MATRIX)
        self.assertTrue(row_on.is_row)
        self.assertEqual(row_on.index, 2)
        self.assertTrue(row_on.turns_on)

        (col_off,) = parse_line("-c", 0, Mode.MATRIX)
        self.assertFalse(col_off.is_row)
        self.assertEqual(col_off.index, 2)
        self.assertFalse(col_off.turns_on)

    def test_matrix_out_of_range(self) -> None:
        for line in ("+ 9", "- I", "* 1", "+ 0"):
            with self.assertRaises(ProgramSyntaxError):
                parse_line(line, 0, Mode.MATRIX)


class PixelParserTests(unittest.TestCase):
    def test_color_words_mix_letters(self) -> None:
        ops = parse_line("RG B Off o GBR", 2, Mode.PIXEL)
        self.assertEqual([op.type for op in ops], [
            CommandType.PAINT,
            CommandType.PAINT,
            CommandType.SKIP,
            CommandType.SKIP,
            CommandType.PAINT,
        ])
        self.assertEqual(ops[0].color, "Y")
        self.assertEqual(ops[1].color, "B")
        self.assertEqual(ops[4].color, "W")
        self.assertTrue(all(op.line_number == 2 for op in ops))

    def test_nested_loops(self) -> None:
        (loop,) = parse_line("2 * ( R + 3 * ( G ) )", 0, Mode.PIXEL)
        self.assertIsInstance(loop, Loop)
        self.assertEqual(loop.count, 2)
        self.assertIsInstance(loop.body[0], Paint)
        self.assertIsInstance(loop.body[1], Loop)
        self.assertEqual(loop.body[1].count, 3)

        flat = flatten_ops([loop])
        self.assertEqual([op.color for op in flat], ["R", "G", "G", "G"] * 2)

    def test_flatten_limit_truncates_nested_loops(self) -> None:
        (loop,) = parse_line("5 * ( R + 3 * ( G ) )", 0, Mode.PIXEL)
        self.assertEqual([op.color for op in flatten_ops([loop], 6)], ["R", "G", "G", "G", "R", "G"])
        self.assertEqual(len(flatten_ops([loop])), 20)

    def test_plus_is_optional_between_items(self) -> None:
        with_plus = parse_line("R + G + Off", 0, Mode.PIXEL)
        without_plus = parse_line("R G Off", 0, Mode.PIXEL)
        self.assertEqual(
            [(op.type, getattr(op, "color", None)) for op in with_plus],
            [(op.type, getattr(op, "color", None)) for op in without_plus],
        )

    def test_unbalanced_parentheses(self) -> None:
        for line in ("2 * ( R", "R )", "2 * ( ( R )"):
            with self.assertRaises(ProgramSyntaxError) as ctx:
                parse_line(line, 0, Mode.PIXEL)
            self.assertIn("Unbalanced parentheses", str(ctx.exception))

    def test_unknown_word(self) -> None:
        with self.assertRaises(ProgramSyntaxError) as ctx:
            parse_line("R X", 5, Mode.PIXEL)
        self.assertEqual(str(ctx.exception), "Syntax Error on line 6: Unknown token 'X'.")

    def test_empty_loop_body_and_missing_star(self) -> None:
        with self.assertRaises(ProgramSyntaxError):
            parse_line("2 * ( )", 0, Mode.PIXEL)
        with self.assertRaises(ProgramSyntaxError):
            parse_line("2 ( R )", 0, Mode.PIXEL)

    def test_unexpected_character(self) -> None:
        with self.assertRaises(ProgramSyntaxError):
            tokenize_pixel("R, G", 0)

    def test_zero_count_loop_is_allowed(self) -> None:
        (loop,) = parse_line("0 * ( R )", 0, Mode.PIXEL)
        self.assertEqual(flatten_ops([loop]), [])
        self.assertIsInstance(parse_line("Off", 0, Mode.PIXEL)[0], Skip)


if __name__ == "__main__":
    unittest.main()
