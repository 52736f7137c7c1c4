"""``codegrid-run``: execute a program file headlessly and print the outcome."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .controller import ProgramController
from .grid import Mode, grid_to_text

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a grid-language program to completion")
    parser.add_argument("program", type=Path, help="Program file (.tbl, .grd, .mze, .mtx, .pxl)")
    parser.add_argument("--mode", type=str, default=None, help="Overrides the mode implied by the file extension")
    parser.add_argument("--target", type=Path, default=None, help="JSON file holding a target grid")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the generated maze")
    parser.add_argument("--max-steps", type=int, default=10_000)
    parser.add_argument("--show-grid", action="store_true", help="Also print the final grid as text to stderr")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def _resolve_mode(args: argparse.Namespace) -> Mode:
    if args.mode:
        return Mode.parse(args.mode)
    mode = Mode.from_path(args.program)
    if mode is None:
        raise SystemExit(f"Cannot infer mode from {args.program.name}; pass --mode")
    return mode


def run_program(
    controller: ProgramController,
    text: str,
    *,
    max_steps: int,
) -> Dict[str, Any]:
    """Load ``text`` (a maze save document in MAZE mode, when it is one) and run it."""
    if controller.mode is Mode.MAZE and text.lstrip().startswith("{"):
        controller.restore_maze_session(text)
    else:
        controller.load(text)
    state = controller.snapshot()
    if state.error is None:
        state = controller.run_until_halt(max_steps)
    summary = controller.report()
    summary["state"] = state.to_dict()
    return summary


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    if not args.program.exists():
        raise SystemExit(f"Program not found: {args.program}")

    controller = ProgramController(_resolve_mode(args), seed=args.seed)
    if args.target is not None:
        controller.set_target(json.loads(args.target.read_text(encoding="utf-8")))

    summary = run_program(
        controller,
        args.program.read_text(encoding="utf-8"),
        max_steps=args.max_steps,
    )
    logger.debug("Finished with status %s", summary["completion_status"])
    print(json.dumps(summary, indent=2))

    grid = controller.snapshot().current_grid
    if args.show_grid and grid is not None:
        print(grid_to_text(grid), file=sys.stderr)


__all__ = ["run_program", "main"]


if __name__ == "__main__":
    main()
