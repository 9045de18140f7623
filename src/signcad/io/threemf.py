"""3MF export: one welded mesh object in a store-only ZIP package.

The package holds three members, in this order:

* ``[Content_Types].xml`` - content types for ``.rels`` and ``.model``
* ``_rels/.rels`` - points the package at the model part
* ``3D/3dmodel.model`` - vertices and triangles in millimetres
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from signcad.archive import build_archive
from signcad.io.stl import export_solid
from signcad.solid import Solid

CORE_NAMESPACE = "http://schemas.microsoft.com/3dmanufacturing/core/2015/02"
MODEL_PATH = "3D/3dmodel.model"

CONTENT_TYPES_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="rels" '
    'ContentType="application/vnd.openxmlformats-package.relationships+xml" />'
    '<Default Extension="model" '
    'ContentType="application/vnd.ms-package.3dmanufacturing-3dmodel+xml" />'
    '</Types>'
)

RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    f'<Relationship Target="/{MODEL_PATH}" Id="rel0" '
    'Type="http://schemas.microsoft.com/3dmanufacturing/2013/01/3dmodel" />'
    '</Relationships>'
)


def weld(sld: Solid, decimals: int = 6) -> Tuple[np.ndarray, np.ndarray]:
    """Merge coincident world-space vertices of ``sld``.

    Vertices are keyed on their coordinates rounded to ``decimals``
    places and numbered in first-seen order while walking the
    triangles.  Returns ``(vertices (N,3), triangles (M,3))``.
    """

    corners = sld.triangles().reshape(-1, 3)
    if len(corners) == 0:
        return np.zeros((0, 3)), np.zeros((0, 3), dtype=np.int64)
    # adding 0.0 folds -0.0 into 0.0
    keys = np.round(corners, decimals) + 0.0
    _, first, inverse = np.unique(keys, axis=0, return_index=True, return_inverse=True)
    order = np.argsort(first)
    rank = np.empty_like(order)
    rank[order] = np.arange(len(order))
    vertices = corners[first[order]]
    triangles = rank[np.asarray(inverse).reshape(-1)].reshape(-1, 3)
    return vertices, triangles


def _num(v: float) -> str:
    text = f"{v:.6f}".rstrip('0').rstrip('.')
    return '0' if text in ('', '-0') else text


def model_xml(vertices: np.ndarray, triangles: np.ndarray) -> str:
    verts = ''.join(f'<vertex x="{_num(x)}" y="{_num(y)}" z="{_num(z)}" />'
                    for x, y, z in vertices)
    tris = ''.join(f'<triangle v1="{a}" v2="{b}" v3="{c}" />' for a, b, c in triangles)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<model unit="millimeter" xmlns="{CORE_NAMESPACE}">\n'
        '  <resources><object id="1" type="model"><mesh>\n'
        f'    <vertices>{verts}</vertices>\n'
        f'    <triangles>{tris}</triangles>\n'
        '  </mesh></object></resources>\n'
        '  <build><item objectid="1" /></build>\n'
        '</model>'
    )


def threemf_bytes(sld: Solid) -> bytes:
    vertices, triangles = weld(export_solid(sld))
    return build_archive([
        ('[Content_Types].xml', CONTENT_TYPES_XML.encode('utf-8')),
        ('_rels/.rels', RELS_XML.encode('utf-8')),
        (MODEL_PATH, model_xml(vertices, triangles).encode('utf-8')),
    ])


def write_3mf(sld: Solid, path_or_file) -> int:
    """Write ``sld`` as a 3MF package; returns the number of bytes written."""

    data = threemf_bytes(sld)
    if hasattr(path_or_file, 'write'):
        path_or_file.write(data)
    else:
        with open(path_or_file, 'wb') as f:
            f.write(data)
    return len(data)


__all__ = ['weld', 'model_xml', 'threemf_bytes', 'write_3mf',
           'CONTENT_TYPES_XML', 'RELS_XML', 'MODEL_PATH']
