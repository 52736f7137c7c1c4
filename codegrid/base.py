"""Shared scaffolding for goal dataset generators and program evaluators.

Generators emit records with a ``to_dict()`` method and persist them in a
``data.json`` list; evaluators read that list back keyed by record id.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar, Union

from tqdm import tqdm

from .grid import Mode

PathLike = Union[str, Path]
RecordT = TypeVar("RecordT")

logger = logging.getLogger(__name__)


def read_records(metadata_path: PathLike) -> List[Dict[str, Any]]:
    """Load a metadata list; every entry needs an ``id`` and a known ``mode``."""
    path = Path(metadata_path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path} must hold a list of goal records")
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get("id"):
            raise ValueError(f"{path}: every goal record needs an 'id'")
        Mode.parse(entry.get("mode", ""))
    return raw


class AbstractGoalGenerator(ABC, Generic[RecordT]):
    """Dataset builder writing one record (plus image assets) per goal."""

    def __init__(self, output_dir: PathLike) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def create_puzzle(self, *, puzzle_id: Optional[str] = None) -> RecordT:
        """Generate one goal and its assets."""

    def generate_dataset(
        self,
        count: int,
        *,
        metadata_path: Optional[PathLike] = None,
        append: bool = True,
        progress: bool = False,
    ) -> List[RecordT]:
        iterator: Iterable[int] = range(count)
        if progress:
            iterator = tqdm(iterator, total=count, desc=type(self).__name__)
        records = [self.create_puzzle() for _ in iterator]
        logger.info("Generated %d records with %s", len(records), type(self).__name__)
        if metadata_path is not None:
            self.write_metadata(records, metadata_path, append=append)
        return records

    def write_metadata(
        self,
        records: Iterable[RecordT],
        metadata_path: PathLike,
        *,
        append: bool = True,
    ) -> None:
        """Write records to ``metadata_path``.

        With ``append`` the existing list is kept and entries sharing an id
        with a new record are replaced in place.
        """
        path = Path(metadata_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fresh = [record.to_dict() for record in records]
        merged: List[Dict[str, Any]] = []
        if append and path.exists():
            fresh_by_id = {entry["id"]: entry for entry in fresh}
            for entry in read_records(path):
                merged.append(fresh_by_id.pop(entry["id"], entry))
            fresh = [entry for entry in fresh if entry["id"] in fresh_by_id]
        path.write_text(json.dumps(merged + fresh, indent=2), encoding="utf-8")

    def relativize_path(self, path: Path) -> str:
        """Asset path relative to the output directory, for portable metadata."""
        try:
            return path.relative_to(self.output_dir).as_posix()
        except ValueError:
            return path.as_posix()


class AbstractGoalEvaluator(ABC):
    """Evaluator backed by a generator's ``data.json``."""

    def __init__(self, metadata_path: PathLike) -> None:
        self.metadata_path = Path(metadata_path)
        if not self.metadata_path.exists():
            raise FileNotFoundError(f"Metadata file not found: {self.metadata_path}")
        self._records = {str(entry["id"]): entry for entry in read_records(self.metadata_path)}

    @property
    def records(self) -> Dict[str, Dict[str, Any]]:
        return self._records

    def records_for_mode(self, mode: "Mode | str") -> List[Dict[str, Any]]:
        mode = Mode.parse(mode)
        return [entry for entry in self._records.values() if Mode.parse(entry["mode"]) is mode]

    def get_record(self, puzzle_id: str) -> Dict[str, Any]:
        try:
            return self._records[puzzle_id]
        except KeyError as exc:
            raise KeyError(f"Goal id '{puzzle_id}' not found in metadata") from exc

    @abstractmethod
    def evaluate(self, puzzle_id: str, *args, **kwargs):
        """Evaluate a candidate program for the given record."""


__all__ = [
    "AbstractGoalGenerator",
    "AbstractGoalEvaluator",
    "PathLike",
    "read_records",
]
