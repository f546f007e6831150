"""Binary STL export (and a reader for checking exports)."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np

from plaquecad.geom import Vec3, triangle_normal
from plaquecad.mesh import TriangleMesh, merge_solids
from plaquecad.solid import Solid

_HEADER_SIZE = 80
_COUNT = struct.Struct('<I')
_STRUCT_TRIANGLE = struct.Struct('<12fH')
TRIANGLE_RECORD_SIZE = _STRUCT_TRIANGLE.size  # 50 bytes

Meshable = Union[Solid, TriangleMesh, Sequence[Solid]]


@dataclass(frozen=True)
class Triangle:
    """One STL facet."""

    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3


def as_mesh(obj: Meshable) -> TriangleMesh:
    """Return ``obj`` as a :class:`TriangleMesh`, merging solids if needed."""

    if isinstance(obj, TriangleMesh):
        return obj
    if isinstance(obj, Solid):
        return merge_solids([obj])
    if isinstance(obj, (list, tuple)) and all(isinstance(s, Solid) or s is None for s in obj):
        return merge_solids(obj)
    raise TypeError(f"cannot write {type(obj).__name__} as STL")


def _header(name: str) -> bytes:
    header = name[:_HEADER_SIZE].encode('ascii', errors='replace')
    return header.ljust(_HEADER_SIZE, b' ')


def stl_bytes(obj: Meshable, name: str = 'plaquecad') -> bytes:
    """Serialize ``obj`` as binary STL.

    The facet normal is recomputed from each triangle's winding; vertex
    normals carried by the mesh are display data only.  Output is a pure
    function of the triangle positions and ``name``.
    """

    mesh = as_mesh(obj)
    positions = np.asarray(mesh.positions, dtype=np.float64).reshape(-1, 3)
    count = len(positions) // 3

    out = bytearray(_header(name))
    out += _COUNT.pack(count)
    for k in range(count):
        v0, v1, v2 = (tuple(map(float, positions[3 * k + j])) for j in range(3))
        normal = triangle_normal(v0, v1, v2) or (0.0, 0.0, 0.0)
        out += _STRUCT_TRIANGLE.pack(*normal, *v0, *v1, *v2, 0)
    return bytes(out)


def write_stl(obj: Meshable, path_or_file, name: str = 'plaquecad') -> int:
    """Write ``obj`` to ``path_or_file`` (a path or a binary stream).

    Returns the number of bytes written.
    """

    data = stl_bytes(obj, name)
    if hasattr(path_or_file, 'write'):
        path_or_file.write(data)
    else:
        with open(path_or_file, 'wb') as stream:
            stream.write(data)
    return len(data)


def read_stl(source) -> List[Triangle]:
    """Parse binary STL from bytes, a path or a binary stream."""

    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
    elif hasattr(source, 'read'):
        data = source.read()
    elif isinstance(source, (str, os.PathLike)):
        with open(source, 'rb') as f:
            data = f.read()
    else:
        raise TypeError(f"cannot read STL from {type(source).__name__}")

    if len(data) < _HEADER_SIZE + _COUNT.size:
        raise ValueError("invalid binary STL: file too small")

    (count,) = _COUNT.unpack_from(data, _HEADER_SIZE)
    expected = _HEADER_SIZE + _COUNT.size + count * TRIANGLE_RECORD_SIZE
    if len(data) < expected:
        raise ValueError(f"invalid binary STL: expected {expected} bytes, got {len(data)}")

    triangles: List[Triangle] = []
    offset = _HEADER_SIZE + _COUNT.size
    for _ in range(count):
        values = _STRUCT_TRIANGLE.unpack_from(data, offset)
        triangles.append(Triangle(normal=values[0:3], v0=values[3:6],
                                  v1=values[6:9], v2=values[9:12]))
        offset += TRIANGLE_RECORD_SIZE
    return triangles


def expected_size(triangle_count: int) -> int:
    return _HEADER_SIZE + _COUNT.size + triangle_count * TRIANGLE_RECORD_SIZE


__all__ = ['Triangle', 'TRIANGLE_RECORD_SIZE', 'as_mesh', 'stl_bytes', 'write_stl',
           'read_stl', 'expected_size']
