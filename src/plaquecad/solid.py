"""Boundary-representation solids and linear extrusion.

A :class:`Solid` is an immutable collection of planar, convex faces wound
counter-clockwise when seen from outside.  Extrusion builds right prisms
from a footprint polygon (optionally with holes); boolean composition lives
in :mod:`plaquecad.boolean`.

    from plaquecad.solid import extrude

    plate = extrude([(0, 0), (40, 0), (40, 20), (0, 20)], height=3.0)
    label = extrude(letter_outline, height=2.0, z_base=3.0)
    moved = label.translated(5.0, 0.0, 0.0)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from plaquecad.errors import GeometryError
from plaquecad.geom import (
    Point2D,
    Vec3,
    clean_polygon,
    cross3,
    dot3,
    epsilon,
    mag3,
    oriented,
    sub3,
)
from plaquecad.triangulator import triangulate_polygon

Face = Tuple[Vec3, ...]
BBox = Tuple[Vec3, Vec3]


@dataclass(frozen=True)
class Solid:
    """Closed boundary made of planar faces.

    ``construction`` records how the solid was made, e.g.
    ``('extrude', 'height=2.0', 'z_base=3.0')``.
    """

    faces: Tuple[Face, ...] = ()
    construction: Tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_empty(self) -> bool:
        return not self.faces

    def vertices(self) -> Iterator[Vec3]:
        for face in self.faces:
            yield from face

    def bbox(self) -> Optional[BBox]:
        """Axis aligned bounds as ``(min, max)``, or ``None`` when empty."""

        verts = list(self.vertices())
        if not verts:
            return None
        xs, ys, zs = zip(*verts)
        return (min(xs), min(ys), min(zs)), (max(xs), max(ys), max(zs))

    def _fan(self) -> Iterator[Tuple[Vec3, Vec3, Vec3]]:
        for face in self.faces:
            for i in range(1, len(face) - 1):
                yield face[0], face[i], face[i + 1]

    def volume(self) -> float:
        """Enclosed volume by the divergence theorem."""

        total = 0.0
        for v0, v1, v2 in self._fan():
            total += dot3(v0, cross3(v1, v2))
        return total / 6.0

    def surface_area(self) -> float:
        return sum(0.5 * mag3(cross3(sub3(v1, v0), sub3(v2, v0)))
                   for v0, v1, v2 in self._fan())

    def translated(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "Solid":
        faces = tuple(tuple((x + dx, y + dy, z + dz) for x, y, z in face)
                      for face in self.faces)
        return Solid(faces, self.construction + (f'translate({dx:g},{dy:g},{dz:g})',))


def empty_solid(reason: str = 'empty') -> Solid:
    return Solid((), (reason,))


def _lift(p: Point2D, z: float) -> Vec3:
    return (p[0], p[1], z)


def extrude(polygon: Sequence[Sequence[float]], height: float, z_base: float = 0.0,
            holes: Iterable[Sequence[Sequence[float]]] = ()) -> Solid:
    """Extrude a footprint straight up into a right prism.

    The footprint may be wound either way; holes are optional.  Caps are
    triangulated, side walls are one quad per footprint edge.

    Raises:
        GeometryError: non-positive ``height`` or a degenerate footprint.
    """

    if not height > epsilon:
        raise GeometryError(f"bad height passed to extrude: {height!r}")

    outer = oriented(clean_polygon(polygon), ccw=True)
    if len(outer) < 3:
        raise GeometryError("degenerate footprint passed to extrude")
    hole_loops = []
    for hole in holes:
        loop = oriented(clean_polygon(hole), ccw=False)
        if len(loop) >= 3:
            hole_loops.append(loop)

    z0 = float(z_base)
    z1 = z0 + float(height)
    faces: List[Face] = []

    triangles = triangulate_polygon(outer, hole_loops)
    if not triangles:
        raise GeometryError("extrude footprint could not be triangulated")
    for a, b, c in triangles:
        faces.append((_lift(a, z0), _lift(c, z0), _lift(b, z0)))  # bottom faces down
        faces.append((_lift(a, z1), _lift(b, z1), _lift(c, z1)))

    # outer loop is CCW and holes CW, so the right-hand side of every edge
    # is outside the material
    for loop in [outer] + hole_loops:
        n = len(loop)
        for i in range(n):
            p, q = loop[i], loop[(i + 1) % n]
            faces.append((_lift(p, z0), _lift(q, z0), _lift(q, z1), _lift(p, z1)))

    return Solid(tuple(faces), ('extrude', f'height={height:g}', f'z_base={z_base:g}'))


def face_normal(face: Face) -> Optional[Vec3]:
    """Unit normal of a planar face (Newell's method), ``None`` if degenerate."""

    nx = ny = nz = 0.0
    n = len(face)
    for i in range(n):
        x0, y0, z0 = face[i]
        x1, y1, z1 = face[(i + 1) % n]
        nx += (y0 - y1) * (z0 + z1)
        ny += (z0 - z1) * (x0 + x1)
        nz += (x0 - x1) * (y0 + y1)
    length = mag3((nx, ny, nz))
    if length <= epsilon:
        return None
    return (nx / length, ny / length, nz / length)


__all__ = [
    'Face',
    'BBox',
    'Solid',
    'empty_solid',
    'extrude',
    'face_normal',
]
