"""Elementary solids: extruded profiles, boxes and cylinders.

All primitives are built in local space, centred on the origin, with
outward-facing triangles and shared (welded) vertices so that the mesh
is closed without any post-processing.  Callers position them with
:meth:`~signcad.solid.Solid.translated` / :meth:`~signcad.solid.Solid.rotated`.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from signcad.profiles import Profile, rectangle
from signcad.solid import Solid
from signcad.triangulator import triangulate_rings

DEFAULT_SEGMENTS = 32


def _extrusion_mesh(profile: Profile, depth: float, z0: float):
    rings = [r[:-1] for r in profile.rings()]
    flat = np.vstack(rings)
    n = len(flat)

    bottom = np.column_stack([flat, np.full(n, z0)])
    top = np.column_stack([flat, np.full(n, z0 + depth)])
    vertices = np.vstack([bottom, top])

    cap = triangulate_rings(rings)
    faces = [cap + n, cap[:, [0, 2, 1]]]

    # one quad per ring edge; outer rings are CCW and holes CW, so the
    # same winding yields outward normals for both
    start = 0
    for ring in rings:
        count = len(ring)
        i = np.arange(count) + start
        j = (np.arange(count) + 1) % count + start
        faces.append(np.column_stack([i, j, j + n]))
        faces.append(np.column_stack([i, j + n, i + n]))
        start += count

    return vertices, np.vstack(faces)


def extrude(profile: Profile, depth: float, tag: str = 'part') -> Solid:
    """Sweep ``profile`` along +Z; the result spans ``[-depth/2, depth/2]``."""

    if depth <= 0:
        raise ValueError('bad depth passed to extrude: {}'.format(depth))
    vertices, faces = _extrusion_mesh(profile, depth, -depth / 2.0)
    return Solid(vertices, faces, tag=tag,
                 metadata={'procedure': 'extrude', 'shape': profile.shape})


def extrude_many(profiles: Iterable[Profile], depth: float, tag: str = 'part') -> Solid:
    """Extrude several disjoint profiles into one multi-shell solid."""

    if depth <= 0:
        raise ValueError('bad depth passed to extrude_many: {}'.format(depth))
    verts = []
    faces = []
    offset = 0
    for profile in profiles:
        v, f = _extrusion_mesh(profile, depth, -depth / 2.0)
        verts.append(v)
        faces.append(f + offset)
        offset += len(v)
    if not verts:
        return Solid.empty(tag)
    return Solid(np.vstack(verts), np.vstack(faces), tag=tag,
                 metadata={'procedure': 'extrude'})


def box(width: float, height: float, depth: float, tag: str = 'part') -> Solid:
    """Axis-aligned box, 8 vertices and 12 triangles."""

    sld = extrude(rectangle(width, height), depth, tag=tag)
    sld.metadata['procedure'] = 'box'
    return sld


def cylinder(radius: float, height: float, segments: int = DEFAULT_SEGMENTS,
             tag: str = 'part') -> Solid:
    """Cylinder about the Z axis."""

    if radius <= 0:
        raise ValueError('bad radius passed to cylinder: {}'.format(radius))
    if segments < 3:
        raise ValueError('cylinder needs at least three segments')
    t = np.arange(segments) * (2 * math.pi / segments)
    ring = np.column_stack([np.cos(t) * radius, np.sin(t) * radius])
    sld = extrude(Profile(ring, shape='circle'), height, tag=tag)
    sld.metadata['procedure'] = 'cylinder'
    return sld


__all__ = ['extrude', 'extrude_many', 'box', 'cylinder', 'DEFAULT_SEGMENTS']
