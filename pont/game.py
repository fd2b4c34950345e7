"""Tiles, the bag, and the rules for placing and scoring tiles on the grid."""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from itertools import count
from typing import Callable, Iterable, Optional, Sequence


class Shape(Enum):
    CLOVER = 0
    STAR = 1
    SQUARE = 2
    DIAMOND = 3
    CROSS = 4
    CIRCLE = 5


class Color(Enum):
    ORANGE = 0
    YELLOW = 1
    GREEN = 2
    RED = 3
    BLUE = 4
    PURPLE = 5


Piece = tuple[Shape, Color]
Pos = tuple[int, int]
Placement = tuple[Piece, int, int]

COPIES_PER_PIECE = 3
FULL_LINE = 6
FULL_LINE_BONUS = 6


def full_bag() -> list[Piece]:
    """Every piece of a new game, three copies of each, in a fixed order."""
    return [
        (shape, color)
        for color in Color
        for shape in Shape
        for _ in range(COPIES_PER_PIECE)
    ]


def _shuffled_bag() -> list[Piece]:
    bag = full_bag()
    random.shuffle(bag)
    return bag


def _explore_from(
    board: dict[Pos, Piece], step: Callable[[int], Pos]
) -> list[tuple[Piece, Pos]]:
    """Collect the unbroken run through step(0), forwards then backwards."""
    out = []
    for direction in (count(0), count(-1, -1)):
        for i in direction:
            pos = step(i)
            piece = board.get(pos)
            if piece is None:
                break
            out.append((piece, pos))
    return out


def _line_score(line: list[tuple[Piece, Pos]], seen: set[Pos]) -> int:
    if len(line) <= 1:
        return 0
    first = min(pos for _, pos in line)
    if first in seen:
        return 0
    seen.add(first)
    return len(line) + (FULL_LINE_BONUS if len(line) == FULL_LINE else 0)


def _valid_line(line: list[tuple[Piece, Pos]]) -> bool:
    pieces = [piece for piece, _ in line]
    if len(set(pieces)) != len(pieces):
        return False
    shapes = {shape for shape, _ in pieces}
    colors = {color for _, color in pieces}
    return len(shapes) == 1 or len(colors) == 1


def _connected(board: dict[Pos, Piece]) -> bool:
    todo = list(board)[:1]
    seen: set[Pos] = set()
    while todo:
        x, y = todo.pop()
        if (x, y) in seen:
            continue
        seen.add((x, y))
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            neighbour = (x + dx, y + dy)
            if neighbour in board:
                todo.append(neighbour)
    return len(seen) == len(board)


@dataclass
class Game:
    """The grid of placed pieces and the bag of undealt ones."""

    board: dict[Pos, Piece] = field(default_factory=dict)
    bag: list[Piece] = field(default_factory=_shuffled_bag)

    def play(self, ps: Sequence[Placement]) -> Optional[int]:
        """Place pieces and return the score, or None if a square is taken."""
        for piece, x, y in ps:
            if (x, y) in self.board:
                return None
            self.board[(x, y)] = piece

        score = 0
        seen_rows: set[Pos] = set()
        seen_cols: set[Pos] = set()
        for _, x, y in ps:
            row = _explore_from(self.board, lambda i: (x + i, y))
            score += _line_score(row, seen_rows)
            col = _explore_from(self.board, lambda i: (x, y + i))
            score += _line_score(col, seen_cols)
        return score

    def shuffle(self) -> None:
        random.shuffle(self.bag)

    def deal(self, n: int) -> Counter:
        """Take up to n pieces from the end of the bag, counted by piece."""
        out: Counter = Counter()
        for _ in range(n):
            if not self.bag:
                break
            out[self.bag.pop()] += 1
        return out

    def swap(self, pieces: Sequence[Piece]) -> Optional[list[Piece]]:
        """Trade pieces for as many from the bag, or None if the bag is short."""
        if len(pieces) > len(self.bag):
            return None
        out = [self.bag.pop() for _ in pieces]
        self.bag.extend(pieces)
        self.shuffle()
        return out

    @staticmethod
    def is_linear_connected(
        board: dict[Pos, Piece], played: Iterable[Pos]
    ) -> bool:
        """Check that the played squares lie in a single row or column."""
        played = list(played)
        if not played:
            return True
        xs = [x for x, _ in played]
        ys = [y for _, y in played]
        return min(xs) == max(xs) or min(ys) == max(ys)

    @staticmethod
    def invalid(board: dict[Pos, Piece]) -> set[Pos]:
        """Return the positions of every piece that breaks the rules."""
        if not board:
            return set()
        if not _connected(board):
            return set(board)

        checked_h: set[Pos] = set()
        checked_v: set[Pos] = set()
        out: set[Pos] = set()
        for x, y in board:
            for checked, step in (
                (checked_h, lambda i: (x + i, y)),
                (checked_v, lambda i: (x, y + i)),
            ):
                if (x, y) in checked:
                    continue
                line = _explore_from(board, step)
                checked.update(pos for _, pos in line)
                if not _valid_line(line):
                    out.update(pos for _, pos in line)
        return out