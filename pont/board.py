"""The client's view of the board: grid, staged tiles, hand and drop rules."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from pont.anim import HAND_MARGIN, HAND_SPACING, HAND_Y, hand_position
from pont.anim import Pos as FPos
from pont.game import Game, Piece, Pos
from pont.protocol import Play, Swap

VIEW_MAX = 190.0
HAND_TOP = 175.0
GRID_BOTTOM = 165.0
RACK_RIGHT = 87.0
EXCHANGE_LEFT = 95.0
EXCHANGE_RIGHT = 140.0
CELL = 10.0
DEALT_START_Y = 220.0
EXCHANGED_START_Y = 200.0

# A tile moving to a hand slot: (hand index, start position, end position).
HandMove = tuple[int, FPos, FPos]

_DRAG_HERE = "<p>Drag here<br>to swap</p>"
_NO_PIECES = "<p>No pieces<br>left in bag</p>"


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class DropKind(Enum):
    DROP_TO_GRID = auto()
    RETURN_TO_GRID = auto()
    EXCHANGE = auto()
    RETURN_TO_HAND = auto()


@dataclass(frozen=True)
class DropTarget:
    """Where a dragged tile would land: a grid cell, a hand slot or the swap box."""

    kind: DropKind
    cell: Optional[Pos] = None
    hand_index: Optional[int] = None


@dataclass
class BoardModel:
    """Placed pieces, tiles staged on the grid or for a swap, and the hand."""

    grid: dict[Pos, Piece] = field(default_factory=dict)
    tentative: dict[Pos, int] = field(default_factory=dict)
    exchange_list: list[int] = field(default_factory=list)
    hand: list[Piece] = field(default_factory=list)
    my_turn: bool = False
    pieces_remaining: int = 0
    pan_offset: FPos = (0.0, 0.0)

    def drop_target(
        self,
        pos: FPos,
        offset: FPos,
        hand_index: int,
        grid_origin: Optional[Pos],
    ) -> tuple[FPos, DropTarget]:
        """Clamp a dragged tile's position and decide where it would drop.

        pos is the pointer in SVG coordinates, offset the pointer's offset
        within the tile; grid_origin is the cell the tile was lifted from.
        """
        x = min(max(pos[0] - offset[0], 0.0), VIEW_MAX)
        y = min(max(pos[1] - offset[1], 0.0), VIEW_MAX)

        # Off-turn, tiles may only be rearranged within the rack.
        if not self.my_turn:
            y = max(y, HAND_TOP)
            x = min(x, RACK_RIGHT)
        # Once a swap is staged, the grid is out of reach.
        if self.exchange_list and y < HAND_TOP:
            y = HAND_TOP
        clamped = (x, y)

        if y >= GRID_BOTTOM:
            if (
                not self.tentative
                and EXCHANGE_LEFT <= x <= EXCHANGE_RIGHT
                and len(self.exchange_list) < self.pieces_remaining
            ):
                return clamped, DropTarget(DropKind.EXCHANGE)
            slot = int((x + HAND_MARGIN / 2) / HAND_SPACING)
            return clamped, DropTarget(DropKind.RETURN_TO_HAND, hand_index=slot)

        pan_x, pan_y = self.pan_offset
        tx = _round_half_away((x - pan_x) / CELL)
        ty = _round_half_away((y - pan_y) / CELL)

        sx = tx * CELL + pan_x
        sy = ty * CELL + pan_y
        offboard = sx < 0.0 or sy < 0.0 or sy > GRID_BOTTOM or sx >= VIEW_MAX
        overlapping = (tx, ty) in self.grid or (tx, ty) in self.tentative
        if not overlapping and not offboard:
            return clamped, DropTarget(DropKind.DROP_TO_GRID, cell=(tx, ty))

        if grid_origin is None:
            return clamped, DropTarget(DropKind.RETURN_TO_HAND, hand_index=hand_index)
        return clamped, DropTarget(DropKind.RETURN_TO_GRID, cell=tuple(grid_origin))

    def _staged_placements(self) -> list[tuple[Piece, int, int]]:
        return [(self.hand[i], x, y) for (x, y), i in self.tentative.items()]

    def get_score(self) -> Optional[int]:
        """The score the staged tiles would earn, or None if a cell is taken."""
        game = Game(board=dict(self.grid), bag=[])
        return game.play(self._staged_placements())

    def mark_invalid(self) -> set[Pos]:
        """Positions that break the rules with the staged tiles in place.

        Every staged tile is included if the staged tiles do not share a
        single row or column. An empty result means the board is valid.
        """
        board = dict(self.grid)
        for pos, i in self.tentative.items():
            board[pos] = self.hand[i]
        invalid = Game.invalid(board)
        if not Game.is_linear_connected(board, list(self.tentative)):
            invalid.update(self.tentative)
        return invalid

    def invalid_hand_indexes(self) -> set[int]:
        """Hand indexes of staged tiles that should be shown as invalid."""
        invalid = self.mark_invalid()
        return {i for pos, i in self.tentative.items() if pos in invalid}

    def estimated_score_text(self, valid: bool) -> str:
        score = self.get_score()
        if valid and score is not None and score > 0:
            return f" [+{score}]"
        return ""

    def exchange_text(self, my_turn: bool) -> tuple[str, bool]:
        """The swap box's markup and whether it is disabled.

        A staged swap that the bag can no longer cover is cancelled first.
        """
        if self.pieces_remaining < len(self.exchange_list):
            self.reject_all()
            my_turn = True

        if self.pieces_remaining == 0:
            return _NO_PIECES, True
        if not my_turn or self.tentative:
            return _DRAG_HERE, True

        n = len(self.exchange_list)
        if n == 0:
            return _DRAG_HERE, False
        plural = "s" if n > 1 else " "
        suffix = " (max)" if n == self.pieces_remaining else ""
        return f"<p>Swap {n} piece{plural}{suffix}</p>", False

    def count_text(self) -> str:
        n = self.pieces_remaining
        return f"<p>{n} piece{'' if n == 1 else 's'} left in the bag</p>"

    def make_move(self) -> Play | Swap:
        """The message for the staged move; the turn passes until the server replies."""
        if not self.tentative and not self.exchange_list:
            raise ValueError("no move is staged")
        self.my_turn = False
        if self.tentative:
            return Play(self._staged_placements())
        return Swap([self.hand[i] for i in self.exchange_list])

    def on_move_accepted(self, dealt: list[Piece]) -> list[HandMove]:
        """Commit the staged move, close up the hand and add the dealt pieces.

        Returns the slides needed to show the new hand.
        """
        placed = {i: pos for pos, i in self.tentative.items()}
        exchanged = set(self.exchange_list)
        self.tentative = {}
        self.exchange_list = []

        moves: list[HandMove] = []
        new_hand: list[Piece] = []
        for i, piece in enumerate(self.hand):
            if i in placed:
                self.grid[placed[i]] = piece
            elif i not in exchanged:
                if len(new_hand) != i:
                    moves.append((len(new_hand), hand_position(i), hand_position(len(new_hand))))
                new_hand.append(piece)
        for piece in dealt:
            x, _ = hand_position(len(new_hand))
            moves.append((len(new_hand), (x, DEALT_START_Y), (x, HAND_Y)))
            new_hand.append(piece)
        self.hand = new_hand
        return moves

    def reject_all(self) -> list[HandMove]:
        """Return every staged tile to the hand; returns the slides to show it."""
        if self.tentative:
            pan_x, pan_y = self.pan_offset
            staged, self.tentative = self.tentative, {}
            return [
                (i, (tx * CELL + pan_x, ty * CELL + pan_y), hand_position(i))
                for (tx, ty), i in staged.items()
            ]
        if self.exchange_list:
            staged_swap, self.exchange_list = self.exchange_list, []
            return [
                (i, (hand_position(i)[0], EXCHANGED_START_Y), hand_position(i))
                for i in staged_swap
            ]
        return []