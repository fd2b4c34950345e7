"""SVG markup for tiles: the tile background, its shape, and accessibility carets."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from pont.game import Color, Piece, Shape

TILE_SIZE = "9.5"
TILE_INSET = "0.25"

_COLOR_CLASSES = {
    Color.ORANGE: "shape-orange",
    Color.YELLOW: "shape-yellow",
    Color.GREEN: "shape-green",
    Color.RED: "shape-red",
    Color.BLUE: "shape-blue",
    Color.PURPLE: "shape-purple",
}

# Each corner caret is shown for two colours, so that colours can be told
# apart without relying on hue alone.
_CORNERS = (
    ({Color.ORANGE, Color.YELLOW}, "0.5,0.5 3,0.5 0.5,3"),
    ({Color.ORANGE, Color.GREEN}, "9.5,9.5 7,9.5 9.5,7"),
    ({Color.RED, Color.BLUE}, "0.5,9.5 3,9.5 0.5,7"),
    ({Color.RED, Color.PURPLE}, "9.5,0.5 7,0.5 9.5,3"),
)

_CLOVER_LOBES = ((5.0, 3.0), (5.0, 7.0), (3.0, 5.0), (7.0, 5.0))


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _add_class(element: ET.Element, name: str) -> None:
    classes = element.get("class", "").split()
    if name not in classes:
        classes.append(name)
    element.set("class", " ".join(classes))


def _element(tag: str, **attrs: str) -> ET.Element:
    return ET.Element(tag, {key: str(value) for key, value in attrs.items()})


def _polygon(points: str) -> ET.Element:
    return _element("polygon", points=points)


def color_class(color: Color) -> str:
    """The CSS class that colours a tile's shape."""
    try:
        return _COLOR_CLASSES[color]
    except (KeyError, TypeError):
        raise ValueError(f"unknown color {color!r}") from None


def corner_points(color: Color) -> list[str]:
    """Polygon point lists for the corner carets that mark the given colour."""
    if color not in _COLOR_CLASSES:
        raise ValueError(f"unknown color {color!r}")
    return [points for colors, points in _CORNERS if color in colors]


def shape_element(shape: Shape) -> ET.Element:
    """The SVG element drawing a shape within a 10x10 tile."""
    if shape is Shape.CIRCLE:
        return _element("circle", r="3.0", cx="5.0", cy="5.0")
    if shape is Shape.SQUARE:
        return _element("rect", width="6.0", height="6.0", x="2.0", y="2.0")
    if shape is Shape.CLOVER:
        group = _element("g")
        for x, y in _CLOVER_LOBES:
            group.append(_element("circle", r="1.5", cx=_number(x), cy=_number(y)))
        group.append(_element("rect", width="4.0", height="3.0", x="3.0", y="3.5"))
        group.append(_element("rect", width="3.0", height="4.0", x="3.5", y="3.0"))
        return group
    if shape is Shape.DIAMOND:
        return _polygon("2,5 5,8 8,5 5,2")
    if shape is Shape.CROSS:
        return _polygon("2,2 3.5,5 2,8 5,6.5 8,8 6.5,5 8,2 5,3.5")
    if shape is Shape.STAR:
        group = _element("g")
        group.append(_polygon("3,3 4,5 3,7 5,6 7,7 6,5 7,3 5,4"))
        group.append(_polygon("1,5 4,6 5,9 6,6 9,5 6,4 5,1 4,4"))
        return group
    raise ValueError(f"unknown shape {shape!r}")


def new_piece(piece: Piece) -> ET.Element:
    """A <g> group drawing the given piece: tile, shape and corner carets."""
    shape, color = piece
    group = _element("g")

    tile = _element(
        "rect", width=TILE_SIZE, height=TILE_SIZE, x=TILE_INSET, y=TILE_INSET
    )
    _add_class(tile, "tile")

    drawn = shape_element(shape)
    _add_class(drawn, "color")

    group.append(tile)
    group.append(drawn)
    _add_class(group, color_class(color))

    for points in corner_points(color):
        corner = _polygon(points)
        _add_class(corner, "corner")
        _add_class(corner, "color")
        group.append(corner)
    return group