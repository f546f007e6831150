"""Cap triangulation for extruded footprints.

We delegate to ``mapbox-earcut`` (the ear clipping implementation used by
Mapbox GL).  This module only normalises loops into the layout earcut
expects and maps the resulting indices back to points.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to triangulate extrusion caps"
    ) from exc

from plaquecad.geom import Point2D, clean_polygon, oriented, signed_area

Triangle2D = Tuple[Point2D, Point2D, Point2D]


def triangulate_polygon(outer: Sequence[Sequence[float]],
                        holes: Iterable[Sequence[Sequence[float]]] | None = None
                        ) -> List[Triangle2D]:
    """Return counter-clockwise triangles covering ``outer`` minus ``holes``.

    Degenerate loops (fewer than three distinct points) are ignored, as are
    zero-area triangles.
    """

    outer_loop = oriented(clean_polygon(outer), ccw=True)
    if len(outer_loop) < 3:
        return []

    point_map: List[Point2D] = list(outer_loop)
    ring_ends: List[int] = [len(point_map)]

    for hole in holes or ():
        loop = oriented(clean_polygon(hole), ccw=False)
        if len(loop) < 3:
            continue
        point_map.extend(loop)
        ring_ends.append(len(point_map))

    vertices = np.asarray(point_map, dtype=np.float64).reshape(-1, 2)
    rings = np.asarray(ring_ends, dtype=np.uint32)
    indices = _earcut.triangulate_float64(vertices, rings)

    triangles: List[Triangle2D] = []
    for i in range(0, len(indices), 3):
        tri = [point_map[indices[i]], point_map[indices[i + 1]], point_map[indices[i + 2]]]
        area = signed_area(tri)
        if area == 0.0:
            continue
        if area < 0:
            tri.reverse()
        triangles.append((tri[0], tri[1], tri[2]))
    return triangles


__all__ = ['triangulate_polygon']
