"""Glyph outline extraction.

Turns a text string into closed planar contours, one group per character,
with each character's horizontal cursor offset and the total advance of the
run.  Contours are in millimetres in the glyph's own frame (baseline at
``y = 0``); placing the run is left to the caller:

    outline = extract_text_outline(font, "23", size=28.0)
    start_x = outline.start_x(center_x=50.0)
    for placed in outline.glyphs:
        # glyph origin goes to (start_x + placed.offset, baseline_y)
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

from plaquecad.curves import BEZIER_STEPS, sample_cubic, sample_quadratic
from plaquecad.fonts import Font, PathCommand
from plaquecad.geom import Point2D, Polygon, point_in_polygon, polygon_area

logger = logging.getLogger(__name__)

# Advance used when a glyph reports none, as a fraction of the font size.
FALLBACK_ADVANCE = 0.6


@dataclass(frozen=True)
class PlacedGlyph:
    """Contours of one character and its cursor offset along the run."""

    char: str
    offset: float
    contours: Tuple[Polygon, ...]


@dataclass(frozen=True)
class TextOutline:
    """Contours of a text run plus its total advance width (mm)."""

    glyphs: Tuple[PlacedGlyph, ...] = ()
    advance: float = 0.0

    @property
    def contours(self) -> List[Polygon]:
        return [c for g in self.glyphs for c in g.contours]

    @property
    def is_empty(self) -> bool:
        return not any(g.contours for g in self.glyphs)

    def start_x(self, center_x: float) -> float:
        """X of the run's origin when its advance is centred on ``center_x``."""

        return center_x - self.advance / 2.0


def _flush(current: List[Point2D], contours: List[Polygon]) -> None:
    pts = list(current)
    # drop the explicit closing point; polygons are implicitly closed
    while len(pts) > 1 and pts[-1] == pts[0]:
        pts.pop()
    if len(pts) >= 3:
        contours.append(pts)
    elif pts:
        logger.debug("discarding degenerate contour with %d points", len(pts))


def path_to_contours(commands: Iterable[PathCommand], scale: float = 1.0,
                     steps: int = BEZIER_STEPS) -> List[Polygon]:
    """Convert outline commands into closed contours.

    Coordinates are multiplied by ``scale``.  Curves are flattened with the
    Bezier samplers.  Contours with fewer than three points are dropped.
    """

    contours: List[Polygon] = []
    current: List[Point2D] = []
    cx, cy = 0.0, 0.0

    def _append(p: Point2D) -> None:
        if not current or current[-1] != p:
            current.append(p)

    for cmd in commands:
        kind = cmd.kind
        pts = [(x * scale, y * scale) for x, y in cmd.points]
        if kind == 'M':
            _flush(current, contours)
            current = []
            cx, cy = pts[-1]
            current.append((cx, cy))
        elif kind == 'L':
            cx, cy = pts[-1]
            _append((cx, cy))
        elif kind == 'Q':
            for p in sample_quadratic((cx, cy), pts[0], pts[1], steps):
                _append(p)
            cx, cy = pts[1]
        elif kind == 'C':
            for p in sample_cubic((cx, cy), pts[0], pts[1], pts[2], steps):
                _append(p)
            cx, cy = pts[2]
        elif kind == 'Z':
            _flush(current, contours)
            current = []
        else:
            raise ValueError(f"unknown path command {kind!r}")
    _flush(current, contours)
    return contours


def extract_text_outline(font: Font, text: str, size: float) -> TextOutline:
    """Lay out ``text`` in ``font`` at ``size`` millimetres per em.

    The cursor advances by each glyph's advance width, then by the kerning
    between that glyph and the next.  Empty or whitespace-only text gives an
    empty outline with zero advance.
    """

    if not text or not text.strip() or size <= 0:
        return TextOutline()

    scale = size / font.units_per_em
    cursor = 0.0
    placed: List[PlacedGlyph] = []

    for i, char in enumerate(text):
        glyph = font.glyph(char)
        contours = path_to_contours(glyph.commands, scale)
        placed.append(PlacedGlyph(char, cursor, tuple(contours)))

        advance = glyph.advance * scale if glyph.advance else size * FALLBACK_ADVANCE
        cursor += advance
        if i < len(text) - 1:
            cursor += font.kerning(char, text[i + 1]) * scale

    return TextOutline(tuple(placed), cursor)


@dataclass
class ContourGroup:
    """An outline contour and the hole contours directly inside it."""

    outer: Polygon
    holes: List[Polygon] = field(default_factory=list)


def group_contours(contours: Sequence[Polygon]) -> List[ContourGroup]:
    """Pair glyph contours into outlines with holes by nesting depth.

    A contour enclosed by an odd number of other contours is a hole of the
    smallest contour that encloses it; everything else is an outline.  This
    does not depend on winding, so TrueType and PostScript outlines group
    the same way.
    """

    areas = [polygon_area(c) for c in contours]
    parents: List[List[int]] = []
    for i, c in enumerate(contours):
        probe = c[0]
        enclosing = [j for j, other in enumerate(contours)
                     if j != i and areas[j] > areas[i] and point_in_polygon(probe, other)]
        parents.append(enclosing)

    groups: dict = {}
    order: List[int] = []
    for i, enclosing in enumerate(parents):
        if len(enclosing) % 2 == 0:
            groups[i] = ContourGroup(list(contours[i]))
            order.append(i)

    for i, enclosing in enumerate(parents):
        if len(enclosing) % 2 == 1:
            owner = min(enclosing, key=lambda j: areas[j])
            if owner in groups:
                groups[owner].holes.append(list(contours[i]))
            else:  # pragma: no cover - nesting always alternates
                groups[i] = ContourGroup(list(contours[i]))
                order.append(i)

    return [groups[i] for i in order]


__all__ = [
    'FALLBACK_ADVANCE',
    'PlacedGlyph',
    'TextOutline',
    'ContourGroup',
    'path_to_contours',
    'extract_text_outline',
    'group_contours',
]
