"""Line parser for the five program grammars.

``parse_line`` is a pure function of (line text, line number, mode). It
returns the commands a single line contributes, or raises
``ProgramSyntaxError`` naming the line.

PIXEL lines are tokenized and parsed by recursive descent::

    sequence := item (["+"] item)*
    item     := NUMBER "*" "(" sequence ")" | COLOR | OFF
    COLOR    := one or more of R, G, B (union of the letters present)
    OFF      := "OFF" | "O"
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .commands import Color, Command, GridColor, Loop, MatrixToggle, Move, Paint, Rotate, Skip, Start
from .errors import ProgramSyntaxError
from .grid import Mode, mix_color

INVALID_FORMAT = "Invalid command format."

_START_RE = re.compile(r"^(\d+)\s*#\s*(\d+)$")
_TABLE_RE = re.compile(r"^(\d+)\s+([RGB])\s+(\d+)\s+(\d+)$", re.IGNORECASE)
_GRID_RE = re.compile(r"^(\d+)\s+([RGB])\s+([+-]?\d+)\s+([+-]?\d+)$", re.IGNORECASE)
_ROTATE_RE = re.compile(r"^ruota\s+([123])$", re.IGNORECASE)
_MOVE_RE = re.compile(r"^muovi\s+(\d+)$", re.IGNORECASE)
_MATRIX_RE = re.compile(r"^([+-])\s*([1-8A-H])$", re.IGNORECASE)


def parse_line(line: str, line_number: int, mode: "Mode | str") -> List[Command]:
    """Parse one source line; blank lines yield no commands."""
    trimmed = line.strip()
    if not trimmed:
        return []
    handler = _LINE_PARSERS[Mode.parse(mode)]
    return handler(line, trimmed, line_number)


def _parse_start(line: str, trimmed: str, line_number: int) -> Optional[Start]:
    match = _START_RE.match(trimmed)
    if not match:
        return None
    rows, cols = int(match.group(1)), int(match.group(2))
    if rows < 1 or cols < 1:
        raise ProgramSyntaxError("Table dimensions must be positive.", line_number)
    return Start(line_number=line_number, original_line=line, rows=rows, cols=cols)


def _parse_table(line: str, trimmed: str, line_number: int) -> List[Command]:
    start = _parse_start(line, trimmed, line_number)
    if start is not None:
        return [start]
    match = _TABLE_RE.match(trimmed)
    if not match:
        raise ProgramSyntaxError(INVALID_FORMAT, line_number)
    return [
        Color(
            line_number=line_number,
            original_line=line,
            count=int(match.group(1)),
            color=match.group(2).upper(),
            row=int(match.group(3)),
            col=int(match.group(4)),
        )
    ]


def _parse_grid(line: str, trimmed: str, line_number: int) -> List[Command]:
    start = _parse_start(line, trimmed, line_number)
    if start is not None:
        return [start]
    match = _GRID_RE.match(trimmed)
    if not match:
        raise ProgramSyntaxError(INVALID_FORMAT, line_number)
    return [
        GridColor(
            line_number=line_number,
            original_line=line,
            count=int(match.group(1)),
            color=match.group(2).upper(),
            dx=int(match.group(3)),
            dy=int(match.group(4)),
        )
    ]


def _parse_maze(line: str, trimmed: str, line_number: int) -> List[Command]:
    match = _ROTATE_RE.match(trimmed)
    if match:
        return [Rotate(line_number=line_number, original_line=line, degrees=int(match.group(1)) * 90)]
    match = _MOVE_RE.match(trimmed)
    if match:
        return [Move(line_number=line_number, original_line=line, steps=int(match.group(1)))]
    raise ProgramSyntaxError("Invalid maze command (use 'ruota 1|2|3' or 'muovi n').", line_number)


def _parse_matrix(line: str, trimmed: str, line_number: int) -> List[Command]:
    match = _MATRIX_RE.match(trimmed)
    if not match:
        raise ProgramSyntaxError("Invalid matrix command (use '+|- 1-8' or '+|- A-H').", line_number)
    op, target = match.group(1), match.group(2).upper()
    if target.isdigit():
        is_row, index = True, int(target) - 1
    else:
        is_row, index = False, ord(target) - ord("A")
    return [MatrixToggle(line_number=line_number, original_line=line, op=op, is_row=is_row, index=index)]


# ---------------------------------------------------------------------------
# PIXEL grammar


@dataclass(frozen=True)
class Token:
    kind: str  # NUMBER, WORD, STAR, LPAREN, RPAREN, PLUS
    text: str
    position: int


_PUNCTUATION = {"*": "STAR", "(": "LPAREN", ")": "RPAREN", "+": "PLUS"}


def tokenize_pixel(text: str, line_number: int) -> List[Token]:
    """Split a PIXEL line into tokens while tracking parenthesis balance."""
    tokens: List[Token] = []
    depth = 0
    index = 0
    while index < len(text):
        char = text[index]
        if char.isspace():
            index += 1
            continue
        if char in _PUNCTUATION:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth < 0:
                    raise ProgramSyntaxError("Unbalanced parentheses.", line_number)
            tokens.append(Token(_PUNCTUATION[char], char, index))
            index += 1
            continue
        if char.isdigit():
            end = index
            while end < len(text) and text[end].isdigit():
                end += 1
            tokens.append(Token("NUMBER", text[index:end], index))
            index = end
            continue
        if char.isalpha():
            end = index
            while end < len(text) and text[end].isalpha():
                end += 1
            tokens.append(Token("WORD", text[index:end], index))
            index = end
            continue
        raise ProgramSyntaxError(f"Unexpected character '{char}'.", line_number)
    if depth != 0:
        raise ProgramSyntaxError("Unbalanced parentheses.", line_number)
    return tokens


class PixelParser:
    """Recursive-descent parser producing (possibly nested) PIXEL operations."""

    def __init__(self, line: str, line_number: int) -> None:
        self.line = line
        self.line_number = line_number
        self.tokens = tokenize_pixel(line, line_number)
        self.index = 0

    def parse(self) -> List[Command]:
        ops = self._sequence()
        if self._peek() is not None:
            token = self._peek()
            raise self._error(f"Unexpected '{token.text}'.")
        if not ops:
            raise self._error(INVALID_FORMAT)
        return ops

    def _peek(self) -> Optional[Token]:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _expect(self, kind: str, description: str) -> Token:
        token = self._peek()
        if token is None or token.kind != kind:
            raise self._error(f"Expected {description}.")
        return self._advance()

    def _error(self, detail: str) -> ProgramSyntaxError:
        return ProgramSyntaxError(detail, self.line_number)

    def _sequence(self) -> List[Command]:
        ops: List[Command] = []
        while True:
            token = self._peek()
            if token is None or token.kind == "RPAREN":
                return ops
            if token.kind == "PLUS":
                self._advance()
                continue
            ops.append(self._item())

    def _item(self) -> Command:
        token = self._advance()
        if token.kind == "NUMBER":
            count = int(token.text)
            self._expect("STAR", "'*' after loop count")
            self._expect("LPAREN", "'(' to open loop body")
            body = self._sequence()
            self._expect("RPAREN", "')' to close loop body")
            if not body:
                raise self._error("Empty loop body.")
            return Loop(
                line_number=self.line_number,
                original_line=self.line,
                count=count,
                body=tuple(body),
            )
        if token.kind == "WORD":
            return self._word(token)
        raise self._error(f"Unexpected '{token.text}'.")

    def _word(self, token: Token) -> Command:
        word = token.text.upper()
        if word in ("OFF", "O"):
            return Skip(line_number=self.line_number, original_line=self.line)
        if set(word) <= set("RGB"):
            return Paint(line_number=self.line_number, original_line=self.line, color=mix_color(word))
        raise self._error(f"Unknown token '{token.text}'.")


def _parse_pixel(line: str, trimmed: str, line_number: int) -> List[Command]:
    return PixelParser(line, line_number).parse()


_LINE_PARSERS: Dict[Mode, Callable[[str, str, int], List[Command]]] = {
    Mode.TABLE: _parse_table,
    Mode.GRID: _parse_grid,
    Mode.MAZE: _parse_maze,
    Mode.MATRIX: _parse_matrix,
    Mode.PIXEL: _parse_pixel,
}


__all__ = ["parse_line", "tokenize_pixel", "PixelParser", "Token"]
