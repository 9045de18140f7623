"""Binary STL export for signcad solids.

Solids are exported in millimetres: the world-space mesh is multiplied by
:data:`signcad.MM_PER_UNIT` before packing.  :func:`read_stl` parses the
binary layout back into arrays and exists mostly for inspection.
"""

from __future__ import annotations

import io
import struct
from typing import Tuple

import numpy as np

from signcad import MM_PER_UNIT
from signcad.solid import Solid
from signcad.xform import Scale

_HEADER_SIZE = 80
_STRUCT_COUNT = struct.Struct('<I')
_STRUCT_TRIANGLE = struct.Struct('<12fH')


def export_solid(sld: Solid) -> Solid:
    """``sld`` scaled to millimetres with its transform baked in."""
    return sld.transformed(Scale(MM_PER_UNIT)).realized()


def write_stl(sld: Solid, path_or_file, *, name: str = 'signcad') -> int:
    """Write ``sld`` as binary STL; returns the triangle count.

    ``path_or_file`` can be a filesystem path or an open binary stream.
    Degenerate triangles are kept with a zero normal.
    """

    mesh = export_solid(sld)
    tris = mesh.triangles()
    normals = mesh.face_normals()

    close_when_done = False
    if hasattr(path_or_file, 'write'):
        stream = path_or_file
    else:
        stream = open(path_or_file, 'wb')
        close_when_done = True

    try:
        header = name[:_HEADER_SIZE].encode('ascii', errors='replace')
        stream.write(header.ljust(_HEADER_SIZE, b' '))
        stream.write(_STRUCT_COUNT.pack(len(tris)))
        for normal, tri in zip(normals, tris):
            stream.write(_STRUCT_TRIANGLE.pack(*normal, *tri[0], *tri[1], *tri[2], 0))
    finally:
        if close_when_done:
            stream.close()
    return len(tris)


def stl_bytes(sld: Solid, name: str = 'signcad') -> bytes:
    buf = io.BytesIO()
    write_stl(sld, buf, name=name)
    return buf.getvalue()


def read_stl(data: bytes) -> Tuple[np.ndarray, np.ndarray]:
    """Parse binary STL ``data`` into ``(normals (M,3), triangles (M,3,3))``."""

    if len(data) < _HEADER_SIZE + _STRUCT_COUNT.size:
        raise ValueError("invalid binary STL: file too small")
    (count,) = _STRUCT_COUNT.unpack_from(data, _HEADER_SIZE)
    offset = _HEADER_SIZE + _STRUCT_COUNT.size
    if len(data) < offset + count * _STRUCT_TRIANGLE.size:
        raise ValueError(f"invalid binary STL: expected {count} triangles")

    values = np.array([_STRUCT_TRIANGLE.unpack_from(data, offset + i * _STRUCT_TRIANGLE.size)[:12]
                       for i in range(count)], dtype=float).reshape(-1, 12)
    return values[:, :3], values[:, 3:].reshape(-1, 3, 3)


__all__ = ['write_stl', 'stl_bytes', 'read_stl', 'export_solid']
