"""Tests for boolean composition and the fallback-to-base policy."""

import logging
from types import SimpleNamespace

import numpy as np
import pytest

from signcad import boolean
from signcad.boolean import trimesh_engine
from signcad.compositor import Composition, CompositionError, combine, compose, fold
from signcad.primitives import box, cylinder
from signcad.solid import Solid

requires_backend = pytest.mark.skipif(not trimesh_engine.is_available(),
                                      reason="no trimesh boolean backend available")


def _open_triangle():
    return Solid([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 2]], tag='sheet')


def _engine(fn):
    return SimpleNamespace(ENGINE_NAME='fake', is_available=lambda: True, solid_boolean=fn)


@pytest.fixture
def failing_engine(monkeypatch):
    def explode(a, b, operation):
        raise RuntimeError("kernel exploded")
    monkeypatch.setitem(boolean.ENGINE_REGISTRY, 'failing', _engine(explode))
    return 'failing'


@pytest.fixture
def empty_engine(monkeypatch):
    monkeypatch.setitem(boolean.ENGINE_REGISTRY, 'empty',
                        _engine(lambda a, b, operation: Solid.empty()))
    return 'empty'


class TestCompose:

    def test_unknown_operation_raises(self):
        with pytest.raises(ValueError):
            compose(box(1, 1, 1), box(1, 1, 1), 'xor')

    def test_open_tool_is_reported(self):
        outcome = compose(box(1, 1, 1), _open_triangle(), 'subtract')
        assert not outcome.ok
        assert isinstance(outcome.error, CompositionError)
        assert 'tool' in outcome.error.reason
        assert outcome.error.operation == 'subtract'

    def test_empty_base_is_reported(self):
        outcome = compose(Solid.empty(), box(1, 1, 1), 'union')
        assert not outcome.ok

    def test_missing_engine(self):
        outcome = compose(box(1, 1, 1), box(1, 1, 1), 'union', engine='nope')
        assert not outcome.ok
        assert 'nope' in outcome.error.reason

    def test_engine_failure_is_caught(self, failing_engine):
        outcome = compose(box(1, 1, 1), box(1, 1, 1), 'union', engine=failing_engine)
        assert not outcome.ok
        assert 'exploded' in outcome.error.reason

    def test_empty_result_is_a_failure(self, empty_engine):
        outcome = compose(box(1, 1, 1), box(1, 1, 1), 'intersect', engine=empty_engine)
        assert not outcome.ok
        assert outcome.solid_or(None) is None

    def test_engine_sees_world_space(self, monkeypatch):
        seen = {}

        def record(a, b, operation):
            seen['a'] = a
            seen['op'] = operation
            return a
        monkeypatch.setitem(boolean.ENGINE_REGISTRY, 'record', _engine(record))
        base = box(1, 1, 1, tag='plate').translated(5, 0, 0)
        outcome = compose(base, box(1, 1, 1), 'subtract', engine='record')
        assert outcome.ok
        assert seen['op'] == 'difference'
        assert seen['a'].transform.isidentity()
        assert np.allclose(seen['a'].center(), [5, 0, 0])
        assert outcome.solid.tag == 'plate'


class TestCombine:

    def test_fallback_returns_base(self, caplog):
        base = box(1, 1, 1)
        diagnostics = []
        with caplog.at_level(logging.WARNING, logger='signcad.compositor'):
            result = combine(base, _open_triangle(), 'subtract', diagnostics)
        assert result is base
        assert len(diagnostics) == 1
        assert 'boolean fallback' in caplog.text

    def test_fallback_with_failing_engine(self, failing_engine):
        base = box(2, 2, 2).translated(1, 2, 3)
        result = combine(base, box(1, 1, 1), 'union', engine=failing_engine)
        assert result is base
        assert np.allclose(result.center(), [1, 2, 3])

    def test_fold_each_step_falls_back_alone(self, failing_engine):
        diagnostics = []
        base = box(1, 1, 1)
        result = fold(base, [box(1, 1, 1), box(1, 1, 1)], 'subtract', diagnostics,
                      engine=failing_engine)
        assert result is base
        assert len(diagnostics) == 2

    def test_composition_defaults(self):
        c = Composition(solid=box(1, 1, 1))
        assert c.ok
        err = CompositionError('union', 'bad', 'plate')
        assert 'plate' in str(err)


@requires_backend
class TestTrimeshEngine:

    def test_union_of_overlapping_boxes(self):
        a = box(2, 2, 2)
        b = box(2, 2, 2).translated(1, 0, 0)
        result = combine(a, b, 'union')
        assert result.volume() == pytest.approx(12, rel=1e-6)
        assert result.tag == a.tag

    def test_subtract_cylinder(self):
        plate = box(4, 4, 1, tag='plate')
        hole = cylinder(1, 3, segments=32)
        result = combine(plate, hole, 'subtract')
        assert result.tag == 'plate'
        assert result.volume() == pytest.approx(16 - hole.volume() / 3, rel=1e-6)

    def test_intersection(self):
        a = box(2, 2, 2)
        b = box(2, 2, 2).translated(1, 1, 1)
        assert combine(a, b, 'intersect').volume() == pytest.approx(1, rel=1e-6)

    def test_fold_skips_only_the_bad_tool(self):
        diagnostics = []
        plate = box(10, 2, 1)
        tools = [box(1, 4, 4).translated(-3, 0, 0), _open_triangle(),
                 box(1, 4, 4).translated(3, 0, 0)]
        result = fold(plate, tools, 'subtract', diagnostics)
        assert len(diagnostics) == 1
        assert result.volume() == pytest.approx(20 - 2 * 2, rel=1e-6)

    def test_disjoint_intersection_falls_back(self):
        a = box(1, 1, 1)
        b = box(1, 1, 1).translated(10, 0, 0)
        diagnostics = []
        assert combine(a, b, 'intersect', diagnostics) is a
        assert diagnostics and 'empty' in diagnostics[0].reason
