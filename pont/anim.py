"""Tile positions as SVG transforms, and the timing of tile slide animations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ANIM_LENGTH_MS = 100.0
HAND_Y = 185.0
HAND_SPACING = 15
HAND_MARGIN = 5

Pos = tuple[float, float]

_TRANSFORM_CHARS = set("0123456789 .-")


def _format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_transform(x: float, y: float) -> str:
    """Render a translation as an SVG transform attribute."""
    return f"translate({_format_number(x)} {_format_number(y)})"


def parse_transform(text: str) -> Pos:
    """Read the (x, y) offset out of a "translate(x y)" transform attribute."""
    kept = "".join(c for c in text if c in _TRANSFORM_CHARS)
    parts = kept.split()
    if len(parts) < 2:
        raise ValueError(f"no translation in transform {text!r}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise ValueError(f"malformed transform {text!r}") from exc


def hand_position(index: int) -> Pos:
    """Where the tile in the given hand slot rests."""
    return float(index * HAND_SPACING + HAND_MARGIN), HAND_Y


@dataclass(frozen=True)
class TileAnimation:
    """A tile sliding in a straight line from start to end, starting at t0 (ms)."""

    target: Any
    start: Pos
    end: Pos
    t0: float

    def _fraction(self, t: float) -> float:
        return min((t - self.t0) / ANIM_LENGTH_MS, 1.0)

    def position(self, t: float) -> Pos:
        """The tile's position at time t."""
        frac = self._fraction(t)
        x = self.start[0] * (1.0 - frac) + self.end[0] * frac
        y = self.start[1] * (1.0 - frac) + self.end[1] * frac
        return x, y

    def transform(self, t: float) -> str:
        """The tile's transform attribute at time t."""
        return format_transform(*self.position(t))

    def running(self, t: float) -> bool:
        """Whether the animation should keep running after time t."""
        return self._fraction(t) < 1.0