"""Drawing quadtree white nodes as filled rectangles on a pygame surface."""

from __future__ import annotations

from typing import Iterable, Sequence

import pygame

from quadplay.common import (
    QUAD_TREE_COLOR_FRAME_THICKNESS,
    Vec2,
    fit_display_size,
    node_color,
    node_display_rect,
)
from quadplay.quadtree import QuadTreeNode

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)

_OUTLINE_WIDTH = max(1, round(QUAD_TREE_COLOR_FRAME_THICKNESS))


def _vec(value: Vec2 | Sequence[float]) -> Vec2:
    return value if isinstance(value, Vec2) else Vec2(*value)


def fit_rect(
    window_min: Vec2 | Sequence[float],
    window_max: Vec2 | Sequence[float],
    image_size: Vec2 | Sequence[float],
    keep_aspect: bool = True,
) -> tuple[Vec2, Vec2]:
    """Return the display position and size of an image inside a window.

    With ``keep_aspect`` the image is scaled to fit and centred; otherwise it
    stretches over the whole window.
    """
    lo, hi, image = _vec(window_min), _vec(window_max), _vec(image_size)
    window_size = hi - lo
    if not keep_aspect:
        return lo, window_size
    size = fit_display_size(window_size.x, window_size.y, image.x, image.y)
    return lo + (window_size - size) * 0.5, size


def outside_rects(
    window_min: Vec2 | Sequence[float],
    window_max: Vec2 | Sequence[float],
    display_pos: Vec2 | Sequence[float],
    display_size: Vec2 | Sequence[float],
) -> list[tuple[Vec2, Vec2]]:
    """Return the (min, max) corners of four rectangles covering the window outside the display."""
    lo, hi = _vec(window_min), _vec(window_max)
    pos, size = _vec(display_pos), _vec(display_size)
    right_top = pos + Vec2(size.x, 0.0)
    return [
        (lo, Vec2(pos.x, hi.y)),
        (right_top, hi),
        (lo, right_top),
        (pos + Vec2(0.0, size.y), hi),
    ]


def _to_rect(lo: Vec2, hi: Vec2) -> pygame.Rect:
    x0, y0 = round(lo.x), round(lo.y)
    x1, y1 = round(hi.x), round(hi.y)
    return pygame.Rect(x0, y0, max(x1 - x0, 0), max(y1 - y0, 0))


class RectangleRenderer:
    """Draws white nodes as rectangles, optionally coloured by quadtree space."""

    def __init__(
        self, keep_aspect: bool = True, fill_outside: bool = True, show_tree: bool = False
    ) -> None:
        self.keep_aspect = keep_aspect
        self.fill_outside = fill_outside
        self.show_tree = show_tree
        self.background_color: tuple[int, int, int] = (48, 48, 48)

    def draw(
        self,
        surface: pygame.Surface,
        nodes: Iterable[QuadTreeNode],
        frame_size: Vec2 | Sequence[float],
    ) -> list[pygame.Rect]:
        """Draw one frame onto ``surface`` and return the rectangles drawn for the nodes."""
        width, height = surface.get_size()
        frame = _vec(frame_size)
        if width <= 0 or height <= 0:
            return []
        if frame.x <= 0 or frame.y <= 0:
            surface.fill(self.background_color)
            return []

        window_min = Vec2(0.0, 0.0)
        window_max = Vec2(float(width), float(height))
        display_pos, display_size = fit_rect(window_min, window_max, frame, self.keep_aspect)

        surface.fill(BLACK)
        if self.keep_aspect and self.fill_outside:
            for lo, hi in outside_rects(window_min, window_max, display_pos, display_size):
                pygame.draw.rect(surface, self.background_color, _to_rect(lo, hi))

        display_max = display_pos + display_size
        drawn: list[pygame.Rect] = []
        for node in nodes:
            node_pos, node_size = node_display_rect(node, frame, display_pos, display_max)
            rect = _to_rect(node_pos, node_pos + node_size)
            if self.show_tree:
                pygame.draw.rect(surface, node_color(node).to_rgb255(), rect)
                pygame.draw.rect(surface, BLACK, rect, _OUTLINE_WIDTH)
            else:
                pygame.draw.rect(surface, WHITE, rect)
            drawn.append(rect)
        return drawn