"""Inward polygon offsetting by angle-bisector (miter) displacement.

Each vertex moves along the normalised sum of the inward unit normals of its
two incident edges.  By default it moves exactly ``distance``; with
``miter=True`` the displacement is stretched so that both incident edges end
up ``distance`` away (capped at :data:`MITER_LIMIT` times the distance).
The inward side is picked from the polygon's signed area, so either winding
works.

Limitation: this is a local method.  It does not detect or resolve the
self-intersections that appear when a concave region or a tightly curved
stretch is offset further than its local feature size.  Without ``miter``
the offset edges at a corner are also closer than ``distance`` to the
originals (by a factor of the sine of half the corner angle), which is
negligible on finely sampled curves but visible on sharp corners.  Callers
feeding concave outlines should pass ``validate=True``, which rejects
results that are not simple, flip orientation or fail to shrink.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from plaquecad.errors import OffsetError
from plaquecad.geom import Point2D, Polygon, clean_polygon, is_simple, signed_area

logger = logging.getLogger(__name__)

MITER_LIMIT = 4.0


def _unit(x: float, y: float) -> Point2D:
    length = math.hypot(x, y) or 1.0
    return x / length, y / length


def offset_polygon(polygon: Sequence[Point2D], distance: float,
                   validate: bool = False, miter: bool = False) -> Polygon:
    """Shrink ``polygon`` inward by ``distance``.

    Repeated and collinear vertices are removed first, so the result can
    have fewer points than the input.  Zero length edges are treated as
    length one instead of producing NaN.

    Raises:
        OffsetError: the cleaned polygon is degenerate, or ``validate`` is
            set and the result is not a simple, same-orientation polygon of
            strictly smaller area.
    """

    pts = clean_polygon(polygon)
    if len(pts) < 3:
        raise OffsetError("cannot offset a polygon with fewer than three distinct points")

    area = signed_area(pts)
    # rotate edges towards the interior: left for CCW, right for CW
    side = 1.0 if area > 0 else -1.0
    n = len(pts)
    result: Polygon = []
    for i, (px, py) in enumerate(pts):
        prev = pts[i - 1]
        nxt = pts[(i + 1) % n]
        e1x, e1y = px - prev[0], py - prev[1]
        e2x, e2y = nxt[0] - px, nxt[1] - py
        n1x, n1y = _unit(-e1y * side, e1x * side)
        n2x, n2y = _unit(-e2y * side, e2x * side)
        bx, by = _unit(n1x + n2x, n1y + n2y)
        step = distance
        if miter:
            cos_half = bx * n1x + by * n1y
            step = distance / max(cos_half, 1.0 / MITER_LIMIT)
        result.append((px + bx * step, py + by * step))

    if validate:
        new_area = signed_area(result)
        if new_area * area <= 0:
            raise OffsetError(f"offset by {distance} collapsed or inverted the polygon")
        if abs(new_area) >= abs(area):
            raise OffsetError(f"offset by {distance} did not shrink the polygon")
        if not is_simple(result):
            raise OffsetError(f"offset by {distance} produced a self-intersecting polygon")

    logger.debug("offset %d-point polygon by %.3f mm", n, distance)
    return result


__all__ = ['MITER_LIMIT', 'offset_polygon']
