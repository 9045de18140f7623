"""Closed 2D outlines used as extrusion cross-sections.

A :class:`Profile` is an outer ring plus optional hole rings, each stored
as an ``(N, 2)`` array whose first and last points coincide.  Outer rings
wind counter-clockwise and holes clockwise so that extrusion can emit
outward-facing side walls without further bookkeeping.

:func:`build_profile` produces the backplate shapes (rectangle, rounded
rectangle, oval, arch, auto contour) centred on the origin.  It never
raises: extents and radii are clamped to something that still yields a
valid, non-degenerate closed curve.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

SHAPES = ('rectangle', 'rounded_rect', 'oval', 'arch', 'auto_contour')

MIN_EXTENT = 1e-6
CURVE_SEGMENTS = 12
ELLIPSE_SEGMENTS = 64
ARC_SEGMENTS = 32
AUTO_CONTOUR_RATIO = 0.3

Bounds2D = Tuple[float, float, float, float]


def signed_area(ring: np.ndarray) -> float:
    """Shoelace area; positive for counter-clockwise rings."""
    pts = _open(ring)
    if len(pts) < 3:
        return 0.0
    x = pts[:, 0]
    y = pts[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def _open(ring) -> np.ndarray:
    pts = np.asarray(ring, dtype=float).reshape(-1, 2)
    if len(pts) > 1 and np.allclose(pts[0], pts[-1]):
        pts = pts[:-1]
    return pts


def _dedupe(pts: np.ndarray, tol: float) -> np.ndarray:
    keep = [0]
    for i in range(1, len(pts)):
        if np.linalg.norm(pts[i] - pts[keep[-1]]) > tol:
            keep.append(i)
    out = pts[keep]
    if len(out) > 1 and np.linalg.norm(out[0] - out[-1]) <= tol:
        out = out[:-1]
    return out


def _drop_collinear(pts: np.ndarray, tol: float) -> np.ndarray:
    # vertices on a straight run between their neighbours
    keep = list(range(len(pts)))
    changed = True
    while changed and len(keep) > 3:
        changed = False
        for k in range(len(keep)):
            a = pts[keep[k - 1]]
            b = pts[keep[k]]
            c = pts[keep[(k + 1) % len(keep)]]
            u = b - a
            v = c - b
            cross = u[0] * v[1] - u[1] * v[0]
            if abs(cross) <= tol * np.linalg.norm(u) * np.linalg.norm(v):
                del keep[k]
                changed = True
                break
    return pts[keep]


def close_ring(points, ccw: bool = True, tol: float = 1e-12,
               collinear_tol: float = 1e-9) -> np.ndarray:
    """Return ``points`` as a closed ring with the requested winding.

    Consecutive duplicates and collinear vertices are removed, the
    closing point is appended and the ring is reversed if its winding
    disagrees with ``ccw``.
    """
    pts = _drop_collinear(_dedupe(_open(points), tol), collinear_tol)
    if len(pts) >= 3 and (signed_area(pts) > 0) != ccw:
        pts = pts[::-1]
    if len(pts):
        pts = np.vstack([pts, pts[:1]])
    pts.setflags(write=False)
    return pts


@dataclass(frozen=True, eq=False)
class Profile:
    """Closed outline with optional holes in the local XY plane.

    ``corner_radius`` is the fillet actually applied to the corners of
    rectangular shapes (after clamping); shapes without corners report 0.
    """

    outer: np.ndarray
    holes: Tuple[np.ndarray, ...] = ()
    shape: str = 'polygon'
    corner_radius: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'outer', close_ring(self.outer, ccw=True))
        object.__setattr__(self, 'holes',
                           tuple(close_ring(h, ccw=False) for h in self.holes))

    @property
    def effective_corner_radius(self) -> float:
        return self.corner_radius

    def rings(self) -> List[np.ndarray]:
        return [self.outer, *self.holes]

    def points(self) -> np.ndarray:
        """Outer ring without the repeated closing point."""
        return self.outer[:-1]

    def is_closed(self) -> bool:
        return all(len(r) >= 4 and np.array_equal(r[0], r[-1]) for r in self.rings())

    def area(self) -> float:
        return signed_area(self.outer) + sum(signed_area(h) for h in self.holes)

    def bounds(self) -> Bounds2D:
        lo = self.outer.min(axis=0)
        hi = self.outer.max(axis=0)
        return float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1])

    def translated(self, dx: float, dy: float) -> "Profile":
        d = np.array([dx, dy])
        return Profile(self.outer + d, tuple(h + d for h in self.holes),
                       self.shape, self.corner_radius)

    def scaled(self, factor: float) -> "Profile":
        return Profile(self.outer * factor, tuple(h * factor for h in self.holes),
                       self.shape, self.corner_radius * abs(factor))


def _quad_bezier(p0, c, p1, segments: int) -> List[Tuple[float, float]]:
    """Sample a quadratic Bezier, excluding ``p0``, including ``p1``."""
    out = []
    for i in range(1, segments + 1):
        t = i / segments
        a = (1 - t) ** 2
        b = 2 * (1 - t) * t
        d = t * t
        out.append((a*p0[0] + b*c[0] + d*p1[0], a*p0[1] + b*c[1] + d*p1[1]))
    return out


def rectangle(width: float, height: float) -> Profile:
    w2 = width / 2
    h2 = height / 2
    return Profile(np.array([(-w2, -h2), (w2, -h2), (w2, h2), (-w2, h2)]),
                   shape='rectangle')


def rounded_rect(width: float, height: float, radius: float,
                 shape: str = 'rounded_rect') -> Profile:
    r = max(0.0, min(radius, width / 2, height / 2))
    if r <= MIN_EXTENT:
        p = rectangle(width, height)
        return Profile(p.outer, shape=shape, corner_radius=0.0)
    w2 = width / 2
    h2 = height / 2
    pts = [(-w2 + r, -h2)]
    # each corner: straight run to the tangent point, then a quadratic
    # curve whose control point is the sharp corner
    corners = [
        ((w2 - r, -h2), (w2, -h2), (w2, -h2 + r)),
        ((w2, h2 - r), (w2, h2), (w2 - r, h2)),
        ((-w2 + r, h2), (-w2, h2), (-w2, h2 - r)),
        ((-w2, -h2 + r), (-w2, -h2), (-w2 + r, -h2)),
    ]
    for start, ctrl, end in corners:
        pts.append(start)
        pts.extend(_quad_bezier(start, ctrl, end, CURVE_SEGMENTS))
    return Profile(np.array(pts), shape=shape, corner_radius=r)


def oval(width: float, height: float) -> Profile:
    t = np.linspace(0.0, 2 * math.pi, ELLIPSE_SEGMENTS, endpoint=False)
    pts = np.column_stack([np.cos(t) * width / 2, np.sin(t) * height / 2])
    return Profile(pts, shape='oval')


def arch(width: float, height: float) -> Profile:
    """Rectangle of ``width`` topped by a semicircle of radius ``width/2``.

    When ``height <= width/2`` the straight part has no height left and
    the result is a half disc resting on ``y = 0``.
    """
    r = width / 2
    straight = height - r
    t = np.linspace(0.0, math.pi, ARC_SEGMENTS + 1)
    if straight <= 0:
        arc = np.column_stack([np.cos(t) * r, np.sin(t) * r])
        return Profile(arc, shape='arch')
    base = straight / 2
    arc = np.column_stack([np.cos(t) * r, base + np.sin(t) * r])
    pts = np.vstack([[(-r, -base), (r, -base)], arc])
    return Profile(pts, shape='arch')


def build_profile(shape: str, width: float, height: float,
                  corner_radius: float = 0.0) -> Profile:
    """Return the closed outline for a backplate ``shape``.

    Unknown shapes fall back to a plain rectangle.
    """
    width = max(float(width), MIN_EXTENT)
    height = max(float(height), MIN_EXTENT)
    corner_radius = max(float(corner_radius), 0.0)

    if shape == 'rounded_rect':
        return rounded_rect(width, height, corner_radius)
    if shape == 'oval':
        return oval(width, height)
    if shape == 'arch':
        return arch(width, height)
    if shape == 'auto_contour':
        return rounded_rect(width, height, AUTO_CONTOUR_RATIO * min(width, height),
                            shape='auto_contour')
    return rectangle(width, height)


def inset_profile(shape: str, width: float, height: float,
                  corner_radius: float, wall: float) -> Profile:
    """Inner outline of a hollow rim with walls ``wall`` thick."""
    return build_profile(shape, width - 2 * wall, height - 2 * wall,
                         max(0.0, corner_radius - wall))


__all__ = [
    'SHAPES', 'Profile', 'build_profile', 'inset_profile',
    'rectangle', 'rounded_rect', 'oval', 'arch', 'signed_area', 'close_ring',
]
