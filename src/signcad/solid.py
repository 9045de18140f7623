"""Triangle-mesh solids with a world transform.

A :class:`Solid` owns a local triangle mesh (``vertices`` and ``faces``)
and a :class:`~signcad.xform.Matrix` placing it in the world.  The local
arrays are frozen; moving a solid returns a new :class:`Solid` sharing
the same mesh with a different transform.  World coordinates are only
ever computed on demand through :meth:`Solid.world_vertices`, and
:meth:`Solid.realized` bakes the transform into a fresh mesh when an
operation (booleans, export) needs world-space geometry.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np

from signcad.xform import Matrix, Rotation, Scale, Translation

Bounds3D = Tuple[np.ndarray, np.ndarray]


def _frozen(a: np.ndarray) -> np.ndarray:
    a = np.array(a, copy=True)
    a.setflags(write=False)
    return a


class Solid:
    """Closed triangle mesh plus placement."""

    __slots__ = ('vertices', 'faces', 'transform', 'tag', 'metadata')

    def __init__(self, vertices, faces, transform: Optional[Matrix] = None,
                 tag: str = 'part', metadata: Optional[Dict[str, Any]] = None):
        verts = np.asarray(vertices, dtype=float).reshape(-1, 3)
        tris = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
        if tris.size and (tris.min() < 0 or tris.max() >= len(verts)):
            raise ValueError('face index out of range')
        self.vertices = _frozen(verts)
        self.faces = _frozen(tris)
        self.transform = transform if transform is not None else Matrix()
        self.tag = tag
        self.metadata = dict(metadata or {})

    @classmethod
    def empty(cls, tag: str = 'part') -> "Solid":
        return cls(np.zeros((0, 3)), np.zeros((0, 3), dtype=np.int64), tag=tag)

    def __repr__(self):
        return "Solid(tag={!r}, vertices={}, faces={})".format(
            self.tag, len(self.vertices), len(self.faces))

    @property
    def is_empty(self) -> bool:
        return len(self.faces) == 0

    # -- placement -------------------------------------------------------

    def with_transform(self, transform: Matrix) -> "Solid":
        return Solid(self.vertices, self.faces, transform, self.tag, self.metadata)

    def with_tag(self, tag: str) -> "Solid":
        return Solid(self.vertices, self.faces, self.transform, tag, self.metadata)

    def transformed(self, matrix: Matrix) -> "Solid":
        """Apply ``matrix`` after the current transform."""
        return self.with_transform(matrix.mul(self.transform))

    def translated(self, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> "Solid":
        return self.transformed(Translation((x, y, z)))

    def rotated(self, axis, angle: float) -> "Solid":
        """Rotate ``angle`` degrees about ``axis`` through the world origin."""
        return self.transformed(Rotation(axis, angle))

    def scaled(self, sx: float, sy: Optional[float] = None,
               sz: Optional[float] = None) -> "Solid":
        return self.transformed(Scale(sx, sy, sz))

    # -- world-space views -----------------------------------------------

    def world_vertices(self) -> np.ndarray:
        if self.transform.isidentity():
            return self.vertices
        return self.transform.mul(self.vertices)

    def world_faces(self) -> np.ndarray:
        """Faces with winding corrected for mirroring transforms."""
        if self.transform.determinant() < 0:
            return self.faces[:, [0, 2, 1]]
        return self.faces

    def realized(self) -> "Solid":
        """Return a new solid with the transform baked into its vertices."""
        return Solid(self.world_vertices(), self.world_faces(), None,
                     self.tag, self.metadata)

    def triangles(self) -> np.ndarray:
        """World-space triangles as an ``(M, 3, 3)`` array."""
        verts = self.world_vertices()
        if self.is_empty:
            return np.zeros((0, 3, 3))
        return verts[self.world_faces()]

    def face_normals(self) -> np.ndarray:
        """Unit normals per world triangle; zero for degenerate faces."""
        tris = self.triangles()
        n = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
        length = np.linalg.norm(n, axis=1)
        ok = length > 0
        n[ok] = n[ok] / length[ok, None]
        n[~ok] = 0.0
        return n

    def bounds(self) -> Bounds3D:
        verts = self.world_vertices()
        if len(verts) == 0:
            raise ValueError('empty solid has no bounds')
        return verts.min(axis=0), verts.max(axis=0)

    def center(self) -> np.ndarray:
        lo, hi = self.bounds()
        return (lo + hi) / 2.0

    def size(self) -> np.ndarray:
        lo, hi = self.bounds()
        return hi - lo

    def volume(self) -> float:
        """Signed volume by the divergence theorem (positive if outward)."""
        tris = self.triangles()
        if len(tris) == 0:
            return 0.0
        return float(np.einsum('ij,ij->i', tris[:, 0],
                               np.cross(tris[:, 1], tris[:, 2])).sum() / 6.0)

    def is_closed(self) -> bool:
        """True when every edge is shared by exactly two opposite half-edges."""
        if self.is_empty:
            return False
        f = self.faces
        edges = np.concatenate([f[:, [0, 1]], f[:, [1, 2]], f[:, [2, 0]]])
        fwd = {tuple(e) for e in edges.tolist()}
        if len(fwd) != len(edges):
            return False
        return all((b, a) in fwd for a, b in fwd)

    # -- trimesh interop -------------------------------------------------

    def to_trimesh(self):
        import trimesh

        return trimesh.Trimesh(vertices=np.array(self.world_vertices()),
                               faces=np.array(self.world_faces()),
                               process=False)

    @classmethod
    def from_trimesh(cls, mesh, tag: str = 'part',
                     metadata: Optional[Dict[str, Any]] = None) -> "Solid":
        return cls(np.asarray(mesh.vertices), np.asarray(mesh.faces),
                   tag=tag, metadata=metadata)


def union_bounds(solids) -> Bounds3D:
    """Axis-aligned box enclosing every non-empty solid in ``solids``."""
    los = []
    his = []
    for s in solids:
        if s.is_empty:
            continue
        lo, hi = s.bounds()
        los.append(lo)
        his.append(hi)
    if not los:
        raise ValueError('no geometry to bound')
    return np.min(los, axis=0), np.max(his, axis=0)


__all__ = ['Solid', 'union_bounds']
