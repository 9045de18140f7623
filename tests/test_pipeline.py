"""End-to-end generation runs."""

import pytest

from signcad import pipeline
from signcad.boolean import trimesh_engine
from signcad.errors import (AssemblyError, GenerationError, NoValidCharactersError,
                            ProviderUnavailableError)
from signcad.fonts import BlockFontProvider
from signcad.layout import layout
from signcad.params import LineSpec, Parameters
from signcad.pipeline import STATUS_DONE, STATUS_READY, Workbench, generate
from signcad.solid import union_bounds

requires_backend = pytest.mark.skipif(not trimesh_engine.is_available(),
                                      reason="no trimesh boolean backend available")


class NotReady:
    ready = False

    def outline(self, char, size):
        raise AssertionError("outline must not be called")


class BadOutlines:
    ready = True

    def outline(self, char, size):
        raise ValueError("bad outline data")


@pytest.fixture(scope='module')
def default_assembly():
    return generate(Parameters(), BlockFontProvider())


class TestGenerate:

    def test_default_sign_has_four_parts(self, default_assembly):
        assert default_assembly.names() == ['face_plate', 'back_plate', 'wall_cleat', 'diffuser']
        for name, part in default_assembly.items():
            assert not part.is_empty, name

    def test_overall_size(self, default_assembly):
        params = Parameters()
        s = params.unit_scale
        glyphs = layout(params.lines, params.height_mm * s, params.depth_mm * s,
                        params.line_spacing_mm * s, BlockFontProvider())
        lo, hi = union_bounds(g.solid for g in glyphs)
        w, h, d = default_assembly.dimensions_mm()
        # back plate outline: glyph box + padding + wall on each side
        assert w == pytest.approx((hi[0] - lo[0]) * 1000 + 2 * 8 + 2 * 3, rel=1e-6)
        assert h == pytest.approx((hi[1] - lo[1]) * 1000 + 2 * 8 + 2 * 3, rel=1e-6)
        assert d > 0

    def test_holes_instead_of_cleat(self):
        asm = generate(Parameters(mount_type='2hole'), BlockFontProvider())
        assert asm.names() == ['face_plate', 'back_plate', 'diffuser']

    def test_standalone_letters(self):
        asm = generate(Parameters(housing=False), BlockFontProvider())
        assert asm.names() == ['letter_0', 'letter_1', 'letter_2', 'letter_3']
        assert asm.mounting_points == []

    def test_pin_mounted_letters(self):
        params = Parameters(lines=(LineSpec('1 4'),), backplate_shape='none')
        asm = generate(params, BlockFontProvider())
        assert asm.names() == ['letter_0', 'letter_1']
        assert len(asm.mounting_points) == 3

    def test_letter_mounting_off(self):
        params = Parameters(backplate_shape='none', letter_mounting=False)
        asm = generate(params, BlockFontProvider())
        assert asm.mounting_points == []
        assert asm.diagnostics == []

    @pytest.mark.parametrize('lines', [(LineSpec(''),), (LineSpec('  '), LineSpec('!?'))])
    def test_no_valid_characters(self, lines):
        with pytest.raises(NoValidCharactersError) as info:
            generate(Parameters(lines=lines), BlockFontProvider())
        assert info.value.user_message == "No valid characters"

    def test_provider_not_ready(self):
        with pytest.raises(ProviderUnavailableError):
            generate(Parameters(), NotReady())

    def test_unexpected_failure_is_wrapped(self, monkeypatch):
        def boom(glyphs, params):
            raise ZeroDivisionError("division by zero")
        monkeypatch.setattr(pipeline, 'build_assembly', boom)
        with pytest.raises(AssemblyError) as info:
            generate(Parameters(), BlockFontProvider())
        assert info.value.user_message == "Error: division by zero"
        assert isinstance(info.value.__cause__, ZeroDivisionError)

    def test_layout_failure_is_wrapped(self):
        with pytest.raises(AssemblyError) as info:
            generate(Parameters(), BadOutlines())
        assert info.value.user_message == "Error: bad outline data"
        assert isinstance(info.value.__cause__, ValueError)

    def test_before_build_hook(self):
        calls = []
        generate(Parameters(housing=False), BlockFontProvider(), lambda: calls.append(1))
        assert calls == [1]

    def test_hook_not_called_without_glyphs(self):
        calls = []
        with pytest.raises(GenerationError):
            generate(Parameters(lines=(LineSpec(''),)), BlockFontProvider(),
                     lambda: calls.append(1))
        assert calls == []

    @requires_backend
    def test_parts_are_closed(self, default_assembly):
        assert default_assembly.diagnostics == []
        for name, part in default_assembly.items():
            assert part.is_closed(), name
            assert part.volume() > 0, name

    @requires_backend
    def test_every_letter_joins_the_face_plate(self):
        asm = generate(Parameters(lines=(LineSpec("#12 A-B."), LineSpec("DPQR"))),
                       BlockFontProvider())
        assert asm.diagnostics == []

    @requires_backend
    def test_rounded_letters_are_drilled(self):
        params = Parameters(lines=(LineSpec("BD"),), backplate_shape="none")
        asm = generate(params, BlockFontProvider())
        assert asm.diagnostics == []
        assert len(asm.mounting_points) == 4
        for name, part in asm.items():
            assert part.is_closed(), name

    @requires_backend
    def test_face_plate_reaches_letter_front(self, default_assembly):
        lo, hi = default_assembly['face_plate'].bounds()
        assert hi[2] == pytest.approx(0.012)


class TestWorkbench:

    def test_initial_state(self):
        bench = Workbench(BlockFontProvider())
        assert bench.assembly is None
        assert bench.status == STATUS_READY

    def test_swap_on_success_only(self):
        bench = Workbench(BlockFontProvider())
        assert bench.regenerate(Parameters(housing=False))
        good = bench.assembly
        assert bench.status.startswith(STATUS_DONE)

        assert not bench.regenerate(Parameters(lines=(LineSpec('!!'),)))
        assert bench.assembly is good
        assert bench.status == "No valid characters"

    def test_assembly_error_keeps_previous(self, monkeypatch):
        bench = Workbench(BlockFontProvider())
        bench.regenerate(Parameters(housing=False))
        good = bench.assembly

        def boom(glyphs, params):
            raise RuntimeError("kernel panic")
        monkeypatch.setattr(pipeline, 'build_assembly', boom)
        assert not bench.regenerate(Parameters())
        assert bench.assembly is good
        assert bench.status == "Error: kernel panic"

    def test_outline_failure_becomes_status(self):
        bench = Workbench(BadOutlines())
        assert not bench.regenerate(Parameters())
        assert bench.status == "Error: bad outline data"
        assert bench.assembly is None

    def test_provider_not_ready_status(self):
        bench = Workbench(NotReady())
        assert not bench.regenerate(Parameters())
        assert bench.status == "Outline provider not ready"
        assert bench.assembly is None
