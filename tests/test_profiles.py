"""Tests for the backplate profile builder."""

import math

import numpy as np
import pytest

from signcad.profiles import (CURVE_SEGMENTS, ELLIPSE_SEGMENTS, MIN_EXTENT, Profile,
                              build_profile, close_ring, inset_profile, signed_area)


def _height(profile):
    x0, y0, x1, y1 = profile.bounds()
    return y1 - y0


class TestRings:

    def test_close_ring_appends_first_point(self):
        ring = close_ring([(0, 0), (1, 0), (1, 1)])
        assert np.array_equal(ring[0], ring[-1])
        assert len(ring) == 4

    def test_close_ring_drops_collinear_points(self):
        ring = close_ring([(0, 0), (0.5, 0), (1, 0), (1, 1), (1, 1.5), (1, 2), (0, 2)])
        assert len(ring) == 5
        assert signed_area(ring) == pytest.approx(2)

    def test_close_ring_fixes_winding(self):
        cw = [(0, 0), (0, 1), (1, 1), (1, 0)]
        assert signed_area(close_ring(cw, ccw=True)) > 0
        assert signed_area(close_ring(cw, ccw=False)) < 0

    def test_profile_orients_outer_and_holes(self):
        outer = [(0, 0), (0, 4), (4, 4), (4, 0)]          # clockwise
        hole = [(1, 1), (3, 1), (3, 3), (1, 3)]           # counter-clockwise
        p = Profile(np.array(outer, float), (np.array(hole, float),))
        assert signed_area(p.outer) > 0
        assert signed_area(p.holes[0]) < 0
        assert p.area() == pytest.approx(16 - 4)
        assert p.is_closed()

    def test_rings_are_read_only(self):
        p = build_profile('rectangle', 2, 1)
        with pytest.raises(ValueError):
            p.outer[0, 0] = 5.0


class TestBuildProfile:

    def test_rectangle(self):
        p = build_profile('rectangle', 4, 2)
        assert len(p.points()) == 4
        assert p.bounds() == pytest.approx((-2, -1, 2, 1))
        assert p.area() == pytest.approx(8)

    def test_rounded_rect_clamps_radius(self):
        p = build_profile('rounded_rect', 10, 4, 100)
        assert p.effective_corner_radius == pytest.approx(2)
        assert p.bounds() == pytest.approx((-5, -2, 5, 2))

    def test_rounded_rect_segments(self):
        p = build_profile('rounded_rect', 10, 10, 1)
        # four corners of CURVE_SEGMENTS samples plus the straight run starts
        assert len(p.points()) == 4 * (CURVE_SEGMENTS + 1)
        assert p.area() < 100

    def test_rounded_rect_zero_radius_is_rectangle(self):
        p = build_profile('rounded_rect', 10, 4, 0)
        assert len(p.points()) == 4
        assert p.effective_corner_radius == 0

    def test_corner_radius_never_exceeds_half_extent(self):
        for w, h, r in [(1, 1, 5), (10, 2, 3), (0.5, 8, 0.3)]:
            p = build_profile('rounded_rect', w, h, r)
            assert p.effective_corner_radius <= min(w, h) / 2 + 1e-12

    def test_oval(self):
        p = build_profile('oval', 6, 2)
        assert len(p.points()) == ELLIPSE_SEGMENTS
        assert p.bounds() == pytest.approx((-3, -1, 3, 1))
        assert p.area() == pytest.approx(math.pi * 3 * 1, rel=0.01)

    def test_arch_height(self):
        p = build_profile('arch', 4, 6)
        assert _height(p) == pytest.approx(6)
        x0, y0, x1, y1 = p.bounds()
        assert (x0, x1) == pytest.approx((-2, 2))
        # straight part is centred, the arc sits on top of it
        assert y0 == pytest.approx(-2)
        assert y1 == pytest.approx(4)

    def test_arch_degenerates_to_half_disc(self):
        p = build_profile('arch', 4, 1)
        x0, y0, x1, y1 = p.bounds()
        assert y0 == pytest.approx(0)
        assert y1 == pytest.approx(2)
        assert p.area() == pytest.approx(math.pi * 4 / 2, rel=0.01)

    def test_auto_contour_radius(self):
        p = build_profile('auto_contour', 10, 20, 0)
        assert p.effective_corner_radius == pytest.approx(3)
        assert p.shape == 'auto_contour'

    def test_unknown_shape_is_rectangle(self):
        p = build_profile('hexagon', 4, 2)
        assert p.shape == 'rectangle'
        assert len(p.points()) == 4

    def test_degenerate_input_is_clamped(self):
        p = build_profile('rounded_rect', -1, 0, -3)
        x0, y0, x1, y1 = p.bounds()
        assert x1 - x0 == pytest.approx(MIN_EXTENT)
        assert y1 - y0 == pytest.approx(MIN_EXTENT)
        assert p.effective_corner_radius == 0
        assert p.is_closed()

    @pytest.mark.parametrize('shape', ['rectangle', 'rounded_rect', 'oval', 'arch', 'auto_contour'])
    def test_every_shape_is_closed_ccw(self, shape):
        p = build_profile(shape, 30, 20, 5)
        assert p.is_closed()
        assert signed_area(p.outer) > 0

    def test_inset_profile(self):
        p = inset_profile('rounded_rect', 20, 10, 4, 1)
        assert p.bounds() == pytest.approx((-9, -4, 9, 4))
        assert p.effective_corner_radius == pytest.approx(3)
        q = inset_profile('rounded_rect', 20, 10, 0.5, 1)
        assert q.effective_corner_radius == 0

    def test_translated(self):
        p = build_profile('rectangle', 2, 2).translated(5, 1)
        assert p.bounds() == pytest.approx((4, 0, 6, 2))
