"""Triangle meshes for display and export.

Solids are flattened into one :class:`TriangleMesh`: every face is fan
triangulated from its first vertex and all triangles are concatenated into
a flat vertex buffer (three vertices per triangle, no index buffer).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from plaquecad.geom import Vec3, triangle_normal
from plaquecad.solid import Solid

logger = logging.getLogger(__name__)

Triangle3D = Tuple[Vec3, Vec3, Vec3]

# Grid used to recognise shared vertex positions when smoothing normals.
_SMOOTH_KEY_DIGITS = 6


def fan_triangulate(face: Sequence[Vec3]) -> List[Triangle3D]:
    """Split an ``n`` vertex face into ``n - 2`` triangles sharing vertex 0.

    Faces with fewer than three vertices give no triangles.
    """

    if len(face) < 3:
        return []
    v0 = face[0]
    return [(v0, face[i], face[i + 1]) for i in range(1, len(face) - 1)]


@dataclass(frozen=True)
class TriangleMesh:
    """Flat triangle soup.

    ``positions`` has shape ``(3 * T, 3)``; rows ``3k, 3k+1, 3k+2`` form
    triangle ``k``.  ``normals`` is ``None`` or an array of the same shape.
    """

    positions: np.ndarray
    normals: Optional[np.ndarray] = None

    @property
    def triangle_count(self) -> int:
        return len(self.positions) // 3

    @property
    def is_empty(self) -> bool:
        return self.triangle_count == 0

    def triangles(self) -> Iterator[Triangle3D]:
        pos = self.positions
        for k in range(self.triangle_count):
            a, b, c = pos[3 * k], pos[3 * k + 1], pos[3 * k + 2]
            yield (tuple(map(float, a)), tuple(map(float, b)), tuple(map(float, c)))

    def bbox(self) -> Optional[Tuple[Vec3, Vec3]]:
        if self.is_empty:
            return None
        lo = self.positions.min(axis=0)
        hi = self.positions.max(axis=0)
        return tuple(map(float, lo)), tuple(map(float, hi))


def empty_mesh() -> TriangleMesh:
    return TriangleMesh(np.zeros((0, 3), dtype=np.float64), np.zeros((0, 3), dtype=np.float64))


def iter_triangles(solids: Iterable[Optional[Solid]]) -> Iterator[Tuple[Vec3, Triangle3D]]:
    """Yield ``(normal, triangle)`` for every non-degenerate fan triangle."""

    skipped = 0
    for sld in solids:
        if sld is None:
            continue
        for face in sld.faces:
            for tri in fan_triangulate(face):
                normal = triangle_normal(*tri)
                if normal is None:
                    skipped += 1
                    continue
                yield normal, tri
    if skipped:
        logger.debug("skipped %d zero-area triangles", skipped)


def merge_solids(solids: Iterable[Optional[Solid]], smooth: bool = False) -> TriangleMesh:
    """Merge ``solids`` into one mesh with per-vertex normals.

    Flat shading gives every vertex its triangle's normal.  ``smooth``
    averages, per vertex position, the area weighted normals of all
    triangles that touch it.
    """

    tris: List[Triangle3D] = []
    flat: List[Vec3] = []
    for normal, tri in iter_triangles(solids):
        tris.append(tri)
        flat.append(normal)

    if not tris:
        return empty_mesh()

    positions = np.asarray(tris, dtype=np.float64).reshape(-1, 3)
    if not smooth:
        normals = np.repeat(np.asarray(flat, dtype=np.float64), 3, axis=0)
        return TriangleMesh(positions, normals)

    tri_arr = positions.reshape(-1, 3, 3)
    # unnormalised cross product: length is twice the area
    weighted = np.cross(tri_arr[:, 1] - tri_arr[:, 0], tri_arr[:, 2] - tri_arr[:, 0])
    keys = [tuple(k) for k in np.round(positions, _SMOOTH_KEY_DIGITS)]
    sums: Dict[tuple, np.ndarray] = {}
    for idx, key in enumerate(keys):
        acc = sums.get(key)
        contribution = weighted[idx // 3]
        sums[key] = contribution.copy() if acc is None else acc + contribution

    normals = np.empty_like(positions)
    for idx, key in enumerate(keys):
        vec = sums[key]
        length = float(np.linalg.norm(vec))
        normals[idx] = vec / length if length > 0 else flat[idx // 3]
    return TriangleMesh(positions, normals)


__all__ = [
    'Triangle3D',
    'TriangleMesh',
    'fan_triangulate',
    'iter_triangles',
    'merge_solids',
    'empty_mesh',
]
