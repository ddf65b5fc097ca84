"""Linear quadtree over a 1-bit image, reducing it to maximal white squares."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from quadplay.common import Vec2, quad_spaces

_ODD_BITS = 0x55555555
_EVEN_BITS = 0xAAAAAAAA


class SpaceColor(enum.Enum):
    """Colour state of a quadtree space."""

    INDETERMINATE = 0
    WHITE = 1
    BLACK = 2


@dataclass(frozen=True)
class QuadTreeNode:
    """One space of the quadtree: its level, Morton id, top-left corner and size."""

    level: int
    id: int
    position: Vec2
    size: Vec2


def _extract_bits(value: int, mask: int) -> int:
    result = 0
    out_bit = 0
    while mask:
        lowest = mask & -mask
        if value & lowest:
            result |= 1 << out_bit
        out_bit += 1
        mask &= mask - 1
    return result


def morton_to_position(code: int) -> Vec2:
    """Decode a 32-bit Morton code into grid coordinates (x from even, y from odd bits)."""
    if not 0 <= code < 1 << 32:
        raise ValueError(f"Morton code out of 32-bit range: {code}")
    return Vec2(float(_extract_bits(code, _ODD_BITS)), float(_extract_bits(code, _EVEN_BITS)))


def pixel_color(bits: bytes, x: int, y: int, width: int) -> SpaceColor:
    """Read one pixel of an MSB-first packed 1-bit image."""
    index = y * width + x
    bit = (bits[index // 8] >> (7 - index % 8)) & 1
    return SpaceColor.WHITE if bit else SpaceColor.BLACK


class QuadTree:
    """A full quadtree of the given depth laid out in Morton order, level by level."""

    def __init__(self, size: Vec2 | tuple[float, float], depth: int = 3) -> None:
        if depth < 0:
            raise ValueError("depth must not be negative")
        self.size = size if isinstance(size, Vec2) else Vec2(*size)
        self.depth = depth
        nodes: list[QuadTreeNode] = []
        for level in range(depth):
            node_size = self.size / float(1 << level)
            nodes.extend(
                QuadTreeNode(
                    level=level,
                    id=n,
                    position=node_size.scale(morton_to_position(n)),
                    size=node_size,
                )
                for n in range(1 << (2 * level))
            )
        self.nodes: tuple[QuadTreeNode, ...] = tuple(nodes)

    def white_nodes(self, bits: bytes) -> list[QuadTreeNode]:
        """Return the maximal uniformly white nodes of a packed 1-bit image."""
        if not self.nodes:
            return []

        spaces = quad_spaces(self.depth)
        colors = [SpaceColor.INDETERMINATE] * len(self.nodes)
        width = int(self.size.x)

        bottom = spaces[self.depth - 1]
        for i in range(bottom, bottom + (1 << (2 * (self.depth - 1)))):
            node = self.nodes[i]
            center = node.position + node.size * 0.5
            colors[i] = pixel_color(bits, int(center.x), int(center.y), width)

        white: list[QuadTreeNode] = []
        for level in range(self.depth - 2, -1, -1):
            begin = spaces[level]
            for i in range(begin, begin + (1 << (2 * level))):
                children = range(4 * i + 1, 4 * i + 5)
                child_colors = {colors[c] for c in children}
                if len(child_colors) == 1 and SpaceColor.INDETERMINATE not in child_colors:
                    colors[i] = child_colors.pop()
                else:
                    colors[i] = SpaceColor.INDETERMINATE
                    white.extend(
                        self.nodes[c] for c in children if colors[c] is SpaceColor.WHITE
                    )

        if colors[0] is SpaceColor.WHITE:
            return [self.nodes[0]]
        return white