"""Trimesh-backed boolean composition of solids.

Solids are converted to ``trimesh.Trimesh`` instances, combined through
:mod:`trimesh.boolean` using the ``manifold3d`` backend, and the result is
converted back into a :class:`~plaquecad.solid.Solid`.  Operands must be
closed, consistently wound volumes; anything else raises
:class:`~plaquecad.errors.CompositionError` rather than producing garbage.

All operations are pure: operands are never modified.
"""

from __future__ import annotations

import importlib.util
import logging
from typing import Optional, Sequence

import numpy as np
import trimesh

from plaquecad.errors import CompositionError, ResourceError
from plaquecad.mesh import iter_triangles
from plaquecad.solid import Solid, empty_solid

logger = logging.getLogger(__name__)

ENGINE_NAME = "trimesh"
DEFAULT_BACKEND = "manifold"


def engines_available() -> set:
    """Return the set of trimesh boolean backends that are operational."""

    names = {name for name in getattr(trimesh.boolean, "engines_available", ()) if name}
    # trimesh lists manifold whenever it knows the backend; require the package too
    if importlib.util.find_spec("manifold3d") is None:
        names.discard("manifold")
    else:
        names.add("manifold")
    return names


def solid_to_trimesh(sld: Solid) -> "trimesh.Trimesh":
    """Fan triangulate ``sld`` into a vertex-merged ``trimesh.Trimesh``."""

    tris = [tri for _, tri in iter_triangles([sld])]
    if not tris:
        return trimesh.Trimesh(vertices=np.zeros((0, 3)), faces=np.zeros((0, 3), dtype=np.int64),
                               process=False)
    verts = np.asarray(tris, dtype=np.float64).reshape(-1, 3)
    faces = np.arange(len(verts), dtype=np.int64).reshape(-1, 3)
    mesh = trimesh.Trimesh(vertices=verts, faces=faces, process=True)
    mesh.remove_unreferenced_vertices()
    return mesh


def trimesh_to_solid(mesh: "trimesh.Trimesh", operation: str) -> Solid:
    triangles = np.asarray(mesh.triangles, dtype=np.float64)
    if triangles.size == 0:
        return empty_solid(f'{ENGINE_NAME}:{operation}')
    faces = tuple(tuple((float(x), float(y), float(z)) for x, y, z in tri) for tri in triangles)
    return Solid(faces, ('boolean', f'{ENGINE_NAME}:{operation}'))


class BooleanEngine:
    """Union and difference of solids through one trimesh backend."""

    def __init__(self, backend: str = DEFAULT_BACKEND):
        self.backend = backend

    def __repr__(self) -> str:
        return f"BooleanEngine(backend={self.backend!r})"

    def is_available(self) -> bool:
        return self.backend in engines_available()

    def _operand(self, sld: Solid, role: str) -> "trimesh.Trimesh":
        if not isinstance(sld, Solid):
            raise CompositionError(f"{role} operand is not a solid: {sld!r}")
        if sld.is_empty:
            raise CompositionError(f"{role} operand is empty")
        mesh = solid_to_trimesh(sld)
        if not mesh.is_volume:
            raise CompositionError(
                f"{role} operand is not a closed manifold volume "
                f"(watertight={mesh.is_watertight}, winding={mesh.is_winding_consistent})")
        return mesh

    def _run(self, operation: str, meshes: Sequence["trimesh.Trimesh"]) -> "trimesh.Trimesh":
        try:
            if operation == 'union':
                return trimesh.boolean.union(meshes, engine=self.backend, check_volume=False)
            if operation == 'difference':
                return trimesh.boolean.difference(meshes, engine=self.backend, check_volume=False)
        except Exception as exc:
            raise CompositionError(f"trimesh {operation} failed: {exc}") from exc
        raise CompositionError(f"unsupported boolean operation {operation!r}")

    def union(self, *solids: Solid) -> Solid:
        """Union of one or more solids.  A single operand is returned as is."""

        if not solids:
            raise CompositionError("union needs at least one solid")
        meshes = [self._operand(s, f'union[{i}]') for i, s in enumerate(solids)]
        if len(solids) == 1:
            return solids[0]
        result = self._run('union', meshes)
        logger.debug("union of %d solids -> %d triangles", len(solids), len(result.faces))
        return trimesh_to_solid(result, 'union')

    def subtract(self, outer: Solid, inner: Solid) -> Solid:
        """``outer`` with the volume of ``inner`` removed."""

        meshes = [self._operand(outer, 'outer'), self._operand(inner, 'inner')]
        result = self._run('difference', meshes)
        logger.debug("difference -> %d triangles", len(result.faces))
        return trimesh_to_solid(result, 'difference')


def load_engine(backend: str = DEFAULT_BACKEND) -> BooleanEngine:
    """Return a ready engine or raise :class:`ResourceError`."""

    engine = BooleanEngine(backend)
    if not engine.is_available():
        raise ResourceError(
            f"trimesh boolean backend {backend!r} is not available "
            f"(available: {sorted(engines_available()) or 'none'}); install manifold3d")
    return engine


def union(*solids: Solid, engine: Optional[BooleanEngine] = None) -> Solid:
    return (engine or BooleanEngine()).union(*solids)


def subtract(outer: Solid, inner: Solid, engine: Optional[BooleanEngine] = None) -> Solid:
    return (engine or BooleanEngine()).subtract(outer, inner)


__all__ = [
    'ENGINE_NAME',
    'DEFAULT_BACKEND',
    'BooleanEngine',
    'engines_available',
    'load_engine',
    'solid_to_trimesh',
    'trimesh_to_solid',
    'union',
    'subtract',
]
