"""Shared constants, small vector/colour types and layout helpers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Iterator, Protocol

DISPLAY_WINDOW_NAME = "Bad Apple!!"
WINDOW_TITLE = "Bad Apple!! but it's quadtrees"
VIDEO_FILE_NAME = "Assets/BadApple.mp4"
AUDIO_FILE_NAME = "Assets/BadApple.wav"

QUAD_TREE_MAX_DEPTH = 10
"""Maximum depth of the quadtree space."""

QUAD_TREE_COLOR_PER_LEVEL_SCALE = 0.95
"""Colour scale applied once per level below the first."""

QUAD_TREE_COLOR_FRAME_THICKNESS = 0.5
"""Thickness of the outline drawn around coloured nodes."""


@dataclass(frozen=True)
class Vec2:
    """An immutable 2D vector."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Vec2:
        return Vec2(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> Vec2:
        return Vec2(self.x / divisor, self.y / divisor)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def scale(self, other: Vec2) -> Vec2:
        """Multiply component-wise by another vector."""
        return Vec2(self.x * other.x, self.y * other.y)


@dataclass(frozen=True)
class Color:
    """An RGBA colour with float components in the range 0..1."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def scaled(self, factor: float) -> Color:
        """Return the colour with every component multiplied by ``factor``."""
        return Color(self.r * factor, self.g * factor, self.b * factor, self.a * factor)

    def to_rgb255(self) -> tuple[int, int, int]:
        """Return the RGB components as clamped 8-bit integers."""
        return tuple(
            round(min(max(c, 0.0), 1.0) * 255) for c in (self.r, self.g, self.b)
        )  # type: ignore[return-value]


QUAD_TREE_COLORS: tuple[Color, ...] = (
    Color(0.42, 0.45, 0.50, 1.0),
    Color(0.43, 0.91, 0.72, 1.0),
    Color(0.95, 0.65, 0.69, 1.0),
    Color(0.99, 0.83, 0.30, 1.0),
)
"""Palette used to tell quadtree spaces apart."""


class _NodeLike(Protocol):
    level: int
    id: int
    position: Vec2
    size: Vec2


@lru_cache(maxsize=None)
def quad_spaces(depth: int) -> tuple[int, ...]:
    """Return the index at which each level starts in a linear quadtree.

    Entry ``n`` equals ``(4**n - 1) // 3`` for ``n`` in ``0..depth``.
    """
    if depth < 0:
        raise ValueError("depth must not be negative")
    return tuple((4**n - 1) // 3 for n in range(depth + 1))


def remap(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Map ``value`` linearly from one range onto another."""
    if in_max == in_min:
        raise ValueError("input range must not be empty")
    return out_min + (value - in_min) * (out_max - out_min) / (in_max - in_min)


def node_color(node: _NodeLike) -> Color:
    """Return the display colour for a quadtree node from its id and level."""
    spaces = quad_spaces(QUAD_TREE_MAX_DEPTH)
    index = node.id + spaces[node.level]
    color = QUAD_TREE_COLORS[index % len(QUAD_TREE_COLORS)]
    if node.level < 2:
        return color
    color = color.scaled(QUAD_TREE_COLOR_PER_LEVEL_SCALE ** (node.level - 1))
    return replace(color, a=1.0)


def node_display_rect(
    node: _NodeLike, size: Vec2, rect_min: Vec2, rect_max: Vec2
) -> tuple[Vec2, Vec2]:
    """Map a node from frame space onto a display rectangle.

    Returns the node's display position and display size.
    """
    display = rect_max - rect_min
    position = Vec2(
        remap(node.position.x, 0.0, size.x, rect_min.x, rect_min.x + display.x),
        remap(node.position.y, 0.0, size.y, rect_min.y, rect_min.y + display.y),
    )
    extent = Vec2(
        remap(node.size.x, 0.0, size.x, 0.0, display.x),
        remap(node.size.y, 0.0, size.y, 0.0, display.y),
    )
    return position, extent


def fit_display_size(
    rect_width: float, rect_height: float, image_width: float, image_height: float
) -> Vec2:
    """Largest size that fits the rectangle while keeping the image's aspect ratio."""
    aspect_rect = rect_width / rect_height
    aspect_image = image_width / image_height
    if aspect_image > aspect_rect:
        return Vec2(rect_width, image_height * (rect_width / image_width))
    return Vec2(image_width * (rect_height / image_height), rect_height)