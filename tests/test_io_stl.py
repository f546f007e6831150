import io
import struct

import pytest

from plaquecad.io.stl import (
    TRIANGLE_RECORD_SIZE,
    expected_size,
    read_stl,
    stl_bytes,
    write_stl,
)
from plaquecad.mesh import merge_solids
from plaquecad.solid import Solid, extrude

from conftest import SQUARE


def _triangle_solid():
    return Solid((((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),))


def test_write_stl_binary(tmp_path):
    path = tmp_path / 'tri.stl'
    size = write_stl(_triangle_solid(), path, name='test')

    data = path.read_bytes()
    assert size == len(data) == 80 + 4 + 50
    assert data[0:4] == b'test'
    assert data[4:80] == b' ' * 76
    count = struct.unpack('<I', data[80:84])[0]
    assert count == 1
    record = struct.unpack('<12fH', data[84:134])
    assert record[0:3] == (0.0, 0.0, 1.0)
    assert record[12] == 0


def test_header_truncated_to_80_bytes():
    data = stl_bytes(_triangle_solid(), name='x' * 200)
    assert data[:80] == b'x' * 80
    assert len(data) == expected_size(1)


def test_size_matches_triangle_count():
    box = extrude(SQUARE, 2.0)
    mesh = merge_solids([box])
    data = stl_bytes(box)
    assert TRIANGLE_RECORD_SIZE == 50
    assert len(data) == 84 + 50 * mesh.triangle_count


def test_empty_mesh_writes_header_only():
    data = stl_bytes([])
    assert len(data) == 84
    assert struct.unpack('<I', data[80:84])[0] == 0


def test_write_to_stream():
    buf = io.BytesIO()
    write_stl(extrude(SQUARE, 1.0), buf)
    assert buf.getvalue() == stl_bytes(extrude(SQUARE, 1.0))


def test_output_is_deterministic():
    a = extrude(SQUARE, 1.5, z_base=3.0)
    assert stl_bytes(a, 'x') == stl_bytes(a, 'x')


def test_read_back_geometry(tmp_path):
    box = extrude(SQUARE, 2.0, z_base=3.0)
    path = tmp_path / 'box.stl'
    write_stl(box, path)

    tris = read_stl(path)
    assert len(tris) == merge_solids([box]).triangle_count
    zs = [v[2] for t in tris for v in (t.v0, t.v1, t.v2)]
    assert min(zs) == pytest.approx(3.0)
    assert max(zs) == pytest.approx(5.0)
    for t in tris:
        assert sum(c * c for c in t.normal) == pytest.approx(1.0, abs=1e-6)


def test_accepts_mesh_and_solid_list():
    a = extrude(SQUARE, 1.0)
    b = a.translated(20, 0, 0)
    assert stl_bytes([a, b]) == stl_bytes(merge_solids([a, b]))


def test_rejects_other_objects():
    with pytest.raises(TypeError):
        stl_bytes("not a mesh")


def test_read_truncated_data():
    data = stl_bytes(extrude(SQUARE, 1.0))
    with pytest.raises(ValueError):
        read_stl(data[:-10])
    with pytest.raises(ValueError):
        read_stl(b'short')


def test_round_trip_keeps_vertices():
    box = extrude(SQUARE, 2.0, z_base=0.5)
    mesh = merge_solids([box])
    tris = read_stl(stl_bytes(mesh))
    assert len(tris) == mesh.triangle_count
    for tri, original in zip(tris, mesh.triangles()):
        for got, want in zip((tri.v0, tri.v1, tri.v2), original):
            assert got == pytest.approx(want)
