"""Planar polygon and small vector helpers shared by the geometry modules.

Points are plain ``(x, y)`` tuples in millimetres and 3D vertices are
``(x, y, z)`` tuples.  Polygons are implicitly closed: the last point
connects back to the first and is never repeated.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

Point2D = Tuple[float, float]
Polygon = List[Point2D]
Vec3 = Tuple[float, float, float]

epsilon = 1e-9


def signed_area(poly: Sequence[Point2D]) -> float:
    """Shoelace area; positive for counter-clockwise in a y-up frame."""

    total = 0.0
    n = len(poly)
    for i in range(n):
        x0, y0 = poly[i]
        x1, y1 = poly[(i + 1) % n]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def polygon_area(poly: Sequence[Point2D]) -> float:
    return abs(signed_area(poly))


def is_ccw(poly: Sequence[Point2D]) -> bool:
    return signed_area(poly) > 0.0


def oriented(poly: Sequence[Point2D], ccw: bool = True) -> Polygon:
    """Return a copy of ``poly`` wound counter-clockwise (or clockwise)."""

    pts = list(poly)
    if (signed_area(pts) > 0.0) != ccw:
        pts.reverse()
    return pts


def _near(a: Point2D, b: Point2D, tol: float) -> bool:
    return abs(a[0] - b[0]) <= tol and abs(a[1] - b[1]) <= tol


def _cross2(o: Point2D, a: Point2D, b: Point2D) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def clean_polygon(poly: Sequence[Point2D], tol: float = epsilon) -> Polygon:
    """Drop repeated points and collinear vertices from a closed polygon.

    Collinear vertices include "spikes" where a boundary doubles back on
    itself along a line; those enclose no area and break extrusion.  The
    result may have fewer than three points, in which case the polygon is
    degenerate and callers must drop it.
    """

    pts: Polygon = []
    for p in poly:
        p = (float(p[0]), float(p[1]))
        if pts and _near(pts[-1], p, tol):
            continue
        pts.append(p)
    while len(pts) > 1 and _near(pts[0], pts[-1], tol):
        pts.pop()

    changed = True
    while changed and len(pts) >= 3:
        changed = False
        for i in range(len(pts)):
            prev = pts[i - 1]
            nxt = pts[(i + 1) % len(pts)]
            cur = pts[i]
            scale = max(math.hypot(cur[0] - prev[0], cur[1] - prev[1]),
                        math.hypot(nxt[0] - cur[0], nxt[1] - cur[1]), 1.0)
            if abs(_cross2(prev, cur, nxt)) <= tol * scale or _near(prev, nxt, tol):
                del pts[i]
                changed = True
                break
    return pts


def point_in_polygon(pt: Point2D, poly: Sequence[Point2D]) -> bool:
    """Even-odd ray casting test; points on the boundary are unspecified."""

    x, y = pt
    inside = False
    n = len(poly)
    for i in range(n):
        x0, y0 = poly[i]
        x1, y1 = poly[(i + 1) % n]
        if (y0 > y) != (y1 > y):
            xi = x0 + (y - y0) * (x1 - x0) / (y1 - y0)
            if x < xi:
                inside = not inside
    return inside


def point_segment_distance(pt: Point2D, a: Point2D, b: Point2D) -> float:
    ax, ay = a
    dx, dy = b[0] - ax, b[1] - ay
    length2 = dx * dx + dy * dy
    if length2 <= epsilon * epsilon:
        return math.hypot(pt[0] - ax, pt[1] - ay)
    t = ((pt[0] - ax) * dx + (pt[1] - ay) * dy) / length2
    t = max(0.0, min(1.0, t))
    return math.hypot(pt[0] - (ax + t * dx), pt[1] - (ay + t * dy))


def boundary_distance(pt: Point2D, poly: Sequence[Point2D]) -> float:
    """Distance from ``pt`` to the nearest edge of ``poly``."""

    n = len(poly)
    return min(point_segment_distance(pt, poly[i], poly[(i + 1) % n]) for i in range(n))


def segments_intersect(p1: Point2D, p2: Point2D, q1: Point2D, q2: Point2D,
                       tol: float = epsilon) -> bool:
    """Return ``True`` if closed segments ``p1p2`` and ``q1q2`` touch."""

    d1 = _cross2(q1, q2, p1)
    d2 = _cross2(q1, q2, p2)
    d3 = _cross2(p1, p2, q1)
    d4 = _cross2(p1, p2, q2)
    if ((d1 > tol and d2 < -tol) or (d1 < -tol and d2 > tol)) and \
       ((d3 > tol and d4 < -tol) or (d3 < -tol and d4 > tol)):
        return True

    def _on_segment(a: Point2D, b: Point2D, c: Point2D, d: float) -> bool:
        return abs(d) <= tol and \
            min(a[0], b[0]) - tol <= c[0] <= max(a[0], b[0]) + tol and \
            min(a[1], b[1]) - tol <= c[1] <= max(a[1], b[1]) + tol

    return (_on_segment(q1, q2, p1, d1) or _on_segment(q1, q2, p2, d2) or
            _on_segment(p1, p2, q1, d3) or _on_segment(p1, p2, q2, d4))


def is_simple(poly: Sequence[Point2D]) -> bool:
    """Return ``True`` if no two non-adjacent edges of ``poly`` touch."""

    n = len(poly)
    if n < 3:
        return False
    for i in range(n):
        a0, a1 = poly[i], poly[(i + 1) % n]
        for j in range(i + 1, n):
            if j == i or (j + 1) % n == i or (i + 1) % n == j:
                continue
            if segments_intersect(a0, a1, poly[j], poly[(j + 1) % n]):
                return False
    return True


def polygon_bbox(poly: Sequence[Point2D]) -> Optional[Tuple[Point2D, Point2D]]:
    if not poly:
        return None
    xs = [p[0] for p in poly]
    ys = [p[1] for p in poly]
    return (min(xs), min(ys)), (max(xs), max(ys))


# -- 3D vector helpers ------------------------------------------------------

def sub3(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def cross3(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0])


def dot3(a: Sequence[float], b: Sequence[float]) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def mag3(a: Sequence[float]) -> float:
    return math.sqrt(dot3(a, a))


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Optional[Vec3]:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    n = cross3(sub3(v1, v0), sub3(v2, v0))
    length = mag3(n)
    if length <= epsilon:
        return None
    return (n[0] / length, n[1] / length, n[2] / length)


def triangle_area(v0: Vec3, v1: Vec3, v2: Vec3) -> float:
    return 0.5 * mag3(cross3(sub3(v1, v0), sub3(v2, v0)))


__all__ = [
    "Point2D",
    "Polygon",
    "Vec3",
    "epsilon",
    "signed_area",
    "polygon_area",
    "is_ccw",
    "oriented",
    "clean_polygon",
    "point_in_polygon",
    "point_segment_distance",
    "boundary_distance",
    "segments_intersect",
    "is_simple",
    "polygon_bbox",
    "sub3",
    "cross3",
    "dot3",
    "mag3",
    "triangle_normal",
    "triangle_area",
]
