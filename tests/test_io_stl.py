import io
import struct

import numpy as np
import pytest

from signcad.io.stl import read_stl, stl_bytes, write_stl
from signcad.primitives import box
from signcad.solid import Solid


def _cube():
    # 10 mm cube in model units
    return box(0.01, 0.01, 0.01)


def test_cube_has_twelve_triangles():
    data = stl_bytes(_cube())
    assert len(data) == 80 + 4 + 12 * 50
    assert struct.unpack('<I', data[80:84])[0] == 12


def test_coordinates_in_millimetres():
    normals, tris = read_stl(stl_bytes(_cube()))
    assert tris.shape == (12, 3, 3)
    assert np.allclose(tris.min(axis=(0, 1)), [-5, -5, -5], atol=1e-5)
    assert np.allclose(tris.max(axis=(0, 1)), [5, 5, 5], atol=1e-5)
    assert np.allclose(np.linalg.norm(normals, axis=1), 1, atol=1e-6)


def test_normals_point_outward():
    normals, tris = read_stl(stl_bytes(_cube()))
    centroids = tris.mean(axis=1)
    assert np.all(np.einsum('ij,ij->i', normals, centroids) > 0)


def test_transform_is_applied():
    _, tris = read_stl(stl_bytes(_cube().translated(0.001, 0, 0)))
    assert tris[:, :, 0].min() == pytest.approx(-4, abs=1e-5)


def test_header_name(tmp_path):
    path = tmp_path / 'cube.stl'
    count = write_stl(_cube(), path, name='face_plate')
    data = path.read_bytes()
    assert count == 12
    assert data[:10] == b'face_plate'
    assert len(data[:80]) == 80


def test_write_to_stream():
    buf = io.BytesIO()
    write_stl(_cube(), buf)
    assert not buf.closed
    assert len(buf.getvalue()) == 684


def test_degenerate_triangle_kept_with_zero_normal():
    flat = Solid([[0, 0, 0], [1, 0, 0], [2, 0, 0]], [[0, 1, 2]])
    normals, tris = read_stl(stl_bytes(flat))
    assert len(tris) == 1
    assert np.allclose(normals, 0)


def test_read_rejects_truncated_data():
    with pytest.raises(ValueError):
        read_stl(b'\0' * 20)
    data = stl_bytes(_cube())
    with pytest.raises(ValueError):
        read_stl(data[:-10])
