import json
import random
import unittest
from collections import deque

from codegrid.engine import load_state, new_state, run_to_halt, step_state
from codegrid.grid import Mode
from codegrid.maze import (
    MazeItem,
    MazeState,
    MazeWalls,
    generate_maze,
    load_maze_session,
    render_maze,
    save_maze_session,
)
from codegrid.state import CompletionStatus


def _corridor_maze() -> MazeState:
    """3x3 maze whose only passage runs east from the center out of the grid."""
    cells = [[MazeWalls() for _ in range(3)] for _ in range(3)]
    cells[1][1].right = False
    cells[1][2].left = False
    cells[1][2].right = False
    cells[1][1].top = False
    cells[0][1].bottom = False
    return MazeState(
        rows=3,
        cols=3,
        cells=cells,
        items=[MazeItem(1, 2, "leaf"), MazeItem(0, 1, "carrot")],
        exit=(1, 2),
    )


def _reachable(maze: MazeState):
    start = maze.start_cell
    seen = {start}
    queue = deque([start])
    moves = {"top": (-1, 0), "bottom": (1, 0), "left": (0, -1), "right": (0, 1)}
    while queue:
        r, c = queue.popleft()
        for side, (dr, dc) in moves.items():
            nr, nc = r + dr, c + dc
            if maze.in_bounds(nr, nc) and not maze.walls_at(r, c).has_wall(side) and (nr, nc) not in seen:
                seen.add((nr, nc))
                queue.append((nr, nc))
    return seen


class MazeGenerationTests(unittest.TestCase):
    def test_generated_maze_is_perfect_with_one_exit(self) -> None:
        for seed in range(5):
            maze = generate_maze(rng=random.Random(seed))
            self.assertEqual(maze.open_passages(), maze.rows * maze.cols - 1)
            self.assertEqual(len(_reachable(maze)), maze.rows * maze.cols)

            openings = maze.boundary_openings()
            self.assertEqual(len(openings), 1)
            self.assertEqual(openings[0][:2], maze.exit)

    def test_items_placed_on_distinct_free_cells(self) -> None:
        maze = generate_maze(rng=random.Random(11))
        positions = [(item.row, item.col) for item in maze.items]
        self.assertEqual(len(set(positions)), 6)
        self.assertNotIn(maze.start_cell, positions)
        self.assertNotIn(maze.exit, positions)
        self.assertEqual(sorted(item.kind for item in maze.items), ["carrot"] * 2 + ["leaf"] * 4)
        self.assertEqual(maze.max_score, 8)

    def test_same_seed_same_maze(self) -> None:
        first = generate_maze(rng=random.Random(3)).to_dict()
        second = generate_maze(rng=random.Random(3)).to_dict()
        self.assertEqual(first, second)

    def test_turtle_starts_at_center_facing_east(self) -> None:
        maze = generate_maze(rng=random.Random(1))
        self.assertEqual(maze.turtle.position, (8, 8))
        self.assertEqual(maze.turtle.heading, 0)
        self.assertEqual(maze.visited, {(8, 8)})

    def test_too_small_maze_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            generate_maze(1, 5)


class MazeExecutionTests(unittest.TestCase):
    def test_collision_halts_without_moving(self) -> None:
        state = load_state(new_state(Mode.MAZE, _corridor_maze()), "ruota 2\nmuovi 1")
        state = run_to_halt(state)
        self.assertEqual(state.error, "Runtime Error on line 2: Collision with a wall at row 1, column 1.")
        self.assertIs(state.completion_status, CompletionStatus.FAILURE)
        self.assertEqual(state.maze.turtle.position, (1, 1))
        self.assertEqual(state.maze.turtle.heading, 180)

    def test_leaving_through_exit_succeeds_and_collects(self) -> None:
        state = load_state(new_state(Mode.MAZE, _corridor_maze()), "muovi 2\nruota 1")
        state = step_state(state)
        self.assertIs(state.completion_status, CompletionStatus.SUCCESS)
        self.assertEqual(state.maze_score, 1)
        self.assertEqual(state.maze.turtle.position, (1, 2))
        self.assertIn((1, 2), state.maze.visited)
        self.assertFalse(state.is_running)

        after = step_state(state)
        self.assertEqual(after.pc, state.pc)

    def test_rotation_is_counter_clockwise_quarter_turns(self) -> None:
        state = run_to_halt(load_state(new_state(Mode.MAZE, _corridor_maze()), "ruota 1\nmuovi 1"))
        self.assertIsNone(state.error)
        self.assertEqual(state.maze.turtle.position, (0, 1))
        self.assertEqual(state.maze_score, 2)

    def test_item_collected_once(self) -> None:
        state = run_to_halt(
            load_state(new_state(Mode.MAZE, _corridor_maze()), "ruota 1\nmuovi 1\nruota 2\nmuovi 1\nruota 2\nmuovi 1")
        )
        self.assertIsNone(state.error)
        self.assertEqual(state.maze_score, 2)

    def test_maze_handed_out_is_a_copy(self) -> None:
        maze = _corridor_maze()
        state = run_to_halt(load_state(new_state(Mode.MAZE, maze), "muovi 1"))
        self.assertEqual(state.maze.turtle.position, (1, 2))
        self.assertEqual(maze.turtle.position, (1, 1))
        self.assertFalse(maze.items[0].collected)


class MazeSessionTests(unittest.TestCase):
    def test_save_and_load_round_trip(self) -> None:
        maze = _corridor_maze()
        maze.items[0].collected = True
        maze.visited.add((1, 2))
        text = save_maze_session("muovi 1", maze)

        payload = json.loads(text)
        self.assertEqual(set(payload), {"code", "maze"})

        code, restored = load_maze_session(text)
        self.assertEqual(code, "muovi 1")
        self.assertEqual(restored.to_dict(), maze.to_dict())
        self.assertEqual(restored.collected_value, 1)

    def test_malformed_documents(self) -> None:
        for text in ("not json", json.dumps({"code": "x"}), json.dumps({"code": "", "maze": {"rows": 2}})):
            with self.assertRaises(ValueError):
                load_maze_session(text)

    def test_out_of_bounds_positions_are_rejected(self) -> None:
        def tampered(section, value):
            payload = json.loads(save_maze_session("muovi 1", _corridor_maze()))
            payload["maze"][section] = value
            return json.dumps(payload)

        cases = [
            tampered("turtle", {"r": 3, "c": 0, "heading": 0}),
            tampered("turtle", {"r": -1, "c": 1, "heading": 0}),
            tampered("turtle", {"r": 1, "c": 1, "heading": 45}),
            tampered("exit", {"r": 0, "c": 7}),
            tampered("items", [{"r": 5, "c": 5, "type": "leaf"}]),
            tampered("visited", [[1, 1], [-2, 0]]),
        ]
        for text in cases:
            with self.assertRaises(ValueError):
                load_maze_session(text)

    def test_negative_heading_is_normalized(self) -> None:
        payload = json.loads(save_maze_session("", _corridor_maze()))
        payload["maze"]["turtle"]["heading"] = -90
        _, restored = load_maze_session(json.dumps(payload))
        self.assertEqual(restored.turtle.heading, 270)

    def test_render_maze_dimensions(self) -> None:
        image = render_maze(_corridor_maze(), cell_size=10, wall_width=2)
        self.assertEqual(image.size, (34, 34))


if __name__ == "__main__":
    unittest.main()
