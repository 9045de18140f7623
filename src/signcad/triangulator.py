"""Triangulation helpers for extrusion caps.

We delegate to ``mapbox-earcut`` (the fast ear clipping implementation
used by Mapbox GL) to keep the logic compact and reliable.  The helper
routine in this file feeds a profile's rings to earcut and hands back
triangles as indices into the concatenated ring points, which is what
the extruder needs to share vertices between caps and side walls.
"""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence, Set, Tuple

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to triangulate polygons with holes"
    ) from exc

ON_EDGE_TOL = 1e-9


def _ring_edges(rings: Sequence[np.ndarray]) -> Set[Tuple[int, int]]:
    edges = set()
    start = 0
    for ring in rings:
        n = len(ring)
        for i in range(n):
            a = start + i
            b = start + (i + 1) % n
            edges.add((min(a, b), max(a, b)))
        start += n
    return edges


def _points_on_edge(vertices: np.ndarray, a: int, b: int) -> List[int]:
    """Vertices strictly inside segment ``a``-``b``, ordered from ``a``."""
    d = vertices[b] - vertices[a]
    length2 = float(np.dot(d, d))
    if length2 == 0.0:
        return []
    w = vertices - vertices[a]
    t = (w @ d) / length2
    cross = w[:, 0] * d[1] - w[:, 1] * d[0]
    hits = np.nonzero((np.abs(cross) <= ON_EDGE_TOL * length2)
                      & (t > ON_EDGE_TOL) & (t < 1.0 - ON_EDGE_TOL))[0]
    return [int(i) for i in hits[np.argsort(t[hits])]]


def _split_t_junctions(vertices: np.ndarray, tris: np.ndarray,
                       ring_edges: Set[Tuple[int, int]]) -> np.ndarray:
    # earcut drops ring vertices on straight runs, hole bridges included;
    # fan each cap triangle over the vertices its edge skips
    out = [tuple(int(v) for v in t) for t in tris]
    for _ in range(len(vertices)):
        counts = Counter((min(p, q), max(p, q))
                         for t in out for p, q in ((t[0], t[1]), (t[1], t[2]), (t[2], t[0])))
        found = None
        for idx, t in enumerate(out):
            for k in range(3):
                a, b = t[k], t[(k + 1) % 3]
                key = (min(a, b), max(a, b))
                if counts[key] != 1 or key in ring_edges:
                    continue
                inner = _points_on_edge(vertices, a, b)
                if inner:
                    found = (idx, k, inner)
                    break
            if found:
                break
        if found is None:
            break
        idx, k, inner = found
        t = out[idx]
        a, b, c = t[k], t[(k + 1) % 3], t[(k + 2) % 3]
        chain = [a, *inner, b]
        out[idx:idx + 1] = [(chain[i], chain[i + 1], c) for i in range(len(chain) - 1)]
    return np.asarray(out, dtype=np.int64).reshape(-1, 3)


def triangulate_rings(rings: Sequence[np.ndarray]) -> np.ndarray:
    """Return an ``(M, 3)`` array of counter-clockwise triangles.

    ``rings`` are open loops (no repeated closing point); the first one
    is the outer boundary and the rest are holes.  Indices refer to the
    rows of ``np.vstack(rings)``.  Every ring vertex is used by the caps,
    even where earcut would have skipped it.
    """

    if not rings or len(rings[0]) < 3:
        return np.zeros((0, 3), dtype=np.int64)

    vertices = np.vstack(rings).astype(np.float64)
    ring_ends = np.cumsum([len(r) for r in rings]).astype(np.uint32)
    indices = np.asarray(_earcut.triangulate_float64(vertices, ring_ends),
                         dtype=np.int64)
    if indices.size == 0:
        return np.zeros((0, 3), dtype=np.int64)

    tris = _split_t_junctions(vertices, indices.reshape(-1, 3), _ring_edges(rings))
    a = vertices[tris[:, 0]]
    b = vertices[tris[:, 1]]
    c = vertices[tris[:, 2]]
    cross = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - \
            (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    flip = cross < 0
    tris[flip] = tris[flip][:, [0, 2, 1]]
    return tris


__all__ = ['triangulate_rings']
