## homogeneous 4x4 transformation matrices for signcad solids

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from math import cos, sin, radians

import numpy as np

## A Matrix wraps a 4x4 numpy array.  Points are column vectors, so
## ``A.mul(B)`` applies ``B`` first and ``A`` second, matching the
## usual ``M = T * R * S`` composition order.  Matrices are treated as
## values: every operation returns a new instance.

epsilon = 1e-12


class Matrix:
    """4x4 transformation matrix for homogeneous 3D coordinates"""

    __slots__ = ('m',)

    def __init__(self, a=None):
        if a is None:
            m = np.identity(4)
        elif isinstance(a, Matrix):
            m = a.m.copy()
        else:
            m = np.array(a, dtype=float)
            if m.shape == (16,):
                m = m.reshape(4, 4)
            if m.shape != (4, 4):
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
            if not np.all(np.isfinite(m)):
                raise ValueError('non-finite element in matrix initialization')
        m.setflags(write=False)
        self.m = m

    def __repr__(self):
        return "Matrix({})".format(self.m.tolist())

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return bool(np.allclose(self.m, other.m))

    def get(self, i, j):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to get: {},{}'.format(i, j))
        return float(self.m[i, j])

    def isidentity(self):
        return bool(np.allclose(self.m, np.identity(4)))

    def mul(self, x):
        """Compose with another matrix, or transform points.

        ``x`` may be a ``Matrix`` (returns ``self * x``), a single
        point of length 3, or an ``(N, 3)`` array of points.
        """
        if isinstance(x, Matrix):
            return Matrix(self.m @ x.m)
        pts = np.asarray(x, dtype=float)
        single = pts.ndim == 1
        pts = np.atleast_2d(pts)
        if pts.shape[1] != 3:
            raise ValueError('points must have three components')
        out = pts @ self.m[:3, :3].T + self.m[:3, 3]
        return out[0] if single else out

    def linear(self):
        """Return the upper-left 3x3 block."""
        return self.m[:3, :3].copy()

    def inverse(self):
        return Matrix(np.linalg.inv(self.m))

    def determinant(self):
        return float(np.linalg.det(self.m[:3, :3]))


def Identity():
    return Matrix()


def Rotation(axis, angle, inverse=False):
    """Rotation of ``angle`` degrees about ``axis`` through the origin."""
    u = np.asarray(axis, dtype=float)[:3]
    mag = float(np.linalg.norm(u))
    if mag < epsilon:
        raise ValueError('zero-length rotation axis not allowed')
    u = u / mag

    if inverse:
        angle *= -1.0
    rad = radians(angle % 360.0)

    ux, uy, uz = u
    cang = cos(rad)
    cmin = 1.0 - cang
    sang = sin(rad)

    ## see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = [[cang + ux*ux*cmin, ux*uy*cmin - uz*sang, ux*uz*cmin + uy*sang, 0],
         [uy*ux*cmin + uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang, 0],
         [uz*ux*cmin - uy*sang, uz*uy*cmin + ux*sang, cang + uz*uz*cmin, 0],
         [0, 0, 0, 1]]

    return Matrix(R)


def Translation(delta, inverse=False):
    dx, dy, dz = (float(v) for v in delta[:3])
    if inverse:
        dx, dy, dz = -dx, -dy, -dz
    T = [[1, 0, 0, dx],
         [0, 1, 0, dy],
         [0, 0, 1, dz],
         [0, 0, 0, 1]]
    return Matrix(T)


def Scale(x, y=None, z=None, inverse=False):
    if y is None and z is None:
        sx = sy = sz = float(x)
    elif y is not None and z is not None:
        sx, sy, sz = float(x), float(y), float(z)
    else:
        raise ValueError('bad scaling values passed to Scale')

    if min(abs(sx), abs(sy), abs(sz)) < epsilon:
        raise ValueError('degenerate scale factor passed to Scale')

    if inverse:
        sx = 1.0/sx
        sy = 1.0/sy
        sz = 1.0/sz

    S = [[sx, 0, 0, 0],
         [0, sy, 0, 0],
         [0, 0, sz, 0],
         [0, 0, 0, 1.0]]
    return Matrix(S)
