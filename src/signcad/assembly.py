"""
Sign parts built around a set of positioned glyphs.

With a housing the assembly is a face plate carrying the raised letters,
a hollow back plate (rim, LED channels, wiring run, cable gland and a
mount), an optional wall cleat and a flat diffuser.  Without one each
glyph becomes its own part, optionally drilled for hidden pin mounting,
and the hole centres are reported so that a 1:1 drilling template can be
printed.

All dimensions below are model units (metres); ``s`` is one millimetre
times the scale factor.  Every cut and join goes through
:func:`signcad.compositor.combine`, so a failed boolean leaves its part
as it was and is recorded in :attr:`Assembly.diagnostics`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from signcad import MM, MM_PER_UNIT
from signcad.compositor import CompositionError, combine, fold
from signcad.layout import GlyphSolid
from signcad.params import Parameters, led_channel
from signcad.primitives import box, cylinder, extrude
from signcad.profiles import build_profile, inset_profile
from signcad.solid import Solid, union_bounds

logger = logging.getLogger(__name__)

FACE_THICKNESS = 1.5        # mm
FACE_TO_BACK_GAP = 2.0      # mm between face plate and back panel
RIM_EXTRA = 3.0             # mm of rim beyond the letter depth
RIM_CLEARANCE = 0.001       # extra height of the rim cutter
CHANNEL_LIFT = 1e-4         # keeps channel floors off the panel face
WIRE_SIZE = 4.0             # mm
GLAND_RADIUS = 4.0          # mm
CLEAT_HEIGHT = 10.0         # mm
CLEAT_DEPTH = 8.0           # mm
CLEAT_WIDTH_RATIO = 0.6
CLEAT_CUT_ANGLE = 45.0
MOUNT_PLATE_THICKNESS = 3.0  # mm, wall cleat base
MOUNT_SCREW_RADIUS = 2.5     # mm
DIFFUSER_THICKNESS = 0.8    # mm
DIFFUSER_INSET = 1.0        # mm inside the face plate padding

PIN_RADIUS = 1.5            # mm, 3 mm through-hole
COUNTERSINK_RADIUS = 3.0    # mm
COUNTERSINK_DEPTH = 3.0     # mm
NARROW_CHARS = frozenset('I1.!|L')


@dataclass(frozen=True)
class MountingPoint:
    """Hole centre in millimetres on the wall."""

    x: float
    y: float
    char: str
    letter_index: int


@dataclass
class Assembly:
    """Named parts of one generated sign, in build order."""

    parts: Dict[str, Solid] = field(default_factory=dict)
    diagnostics: List[CompositionError] = field(default_factory=list)
    mounting_points: List[MountingPoint] = field(default_factory=list)

    def __getitem__(self, name: str) -> Solid:
        return self.parts[name]

    def __contains__(self, name) -> bool:
        return name in self.parts

    def __iter__(self) -> Iterator[str]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def names(self) -> List[str]:
        return list(self.parts)

    def items(self):
        return self.parts.items()

    def bounds(self):
        return union_bounds(self.parts.values())

    def dimensions_mm(self) -> Tuple[float, float, float]:
        lo, hi = self.bounds()
        w, h, d = (hi - lo) * MM_PER_UNIT
        return float(w), float(h), float(d)


@dataclass(frozen=True)
class _Frame:
    """Shared measurements derived from the glyph box."""

    s: float
    cx: float
    cy: float
    glyph_w: float
    glyph_h: float
    pad: float
    wall: float
    depth: float
    corner_radius: float

    @property
    def inner_w(self) -> float:
        return self.glyph_w + 2 * self.pad

    @property
    def inner_h(self) -> float:
        return self.glyph_h + 2 * self.pad

    @property
    def outer_w(self) -> float:
        return self.inner_w + 2 * self.wall

    @property
    def outer_h(self) -> float:
        return self.inner_h + 2 * self.wall

    @property
    def face_back(self) -> float:
        return -FACE_THICKNESS * self.s

    @property
    def back_front(self) -> float:
        return self.face_back - FACE_TO_BACK_GAP * self.s

    @property
    def plate(self) -> float:
        return self.wall

    @property
    def back_z(self) -> float:
        return self.back_front - self.plate / 2

    @property
    def rim_h(self) -> float:
        return self.depth + RIM_EXTRA * self.s


def _frame(glyphs: Sequence[GlyphSolid], params: Parameters) -> _Frame:
    s = params.unit_scale
    lo, hi = union_bounds(g.solid for g in glyphs)
    return _Frame(s=s,
                  cx=float(lo[0] + hi[0]) / 2, cy=float(lo[1] + hi[1]) / 2,
                  glyph_w=float(hi[0] - lo[0]), glyph_h=float(hi[1] - lo[1]),
                  pad=params.padding_mm * s,
                  wall=params.wall_thick_mm * s,
                  depth=params.depth_mm * s,
                  corner_radius=params.corner_radius_mm * s)


def _bore(radius: float, length: float, x: float, y: float, z: float) -> Solid:
    return cylinder(radius, length, tag='cutter').translated(x, y, z)


def _cleat(f: _Frame, angle: float, y_offset: float, z: float) -> Tuple[Solid, Solid]:
    """Cleat bar and the tilted cutter that bevels it, centred at z."""
    width = CLEAT_WIDTH_RATIO * f.outer_w
    height = CLEAT_HEIGHT * f.s
    depth = CLEAT_DEPTH * f.s
    bar = box(width, height, depth, tag='cleat').translated(0, 0, z)
    cutter = (box(width + RIM_CLEARANCE, height, depth, tag='cutter')
              .rotated((1, 0, 0), angle)
              .translated(0, y_offset * height, z))
    return bar, cutter


def face_plate(glyphs: Sequence[GlyphSolid], params: Parameters,
               diagnostics: Optional[List[CompositionError]] = None) -> Solid:
    f = _frame(glyphs, params)
    thick = FACE_THICKNESS * f.s
    profile = build_profile(params.backplate_shape, f.inner_w, f.inner_h, f.corner_radius)
    plate = extrude(profile, thick, tag='face_plate').translated(f.cx, f.cy, -thick / 2)
    return fold(plate, (g.solid for g in glyphs), 'union', diagnostics)


def mounting_holes(f: _Frame, params: Parameters) -> List[Solid]:
    """Cutters for the ``2hole``, ``4hole`` and ``keyhole`` mounts."""

    r = params.hole_diameter_mm / 2 * f.s
    inset = 0.6 * f.pad
    length = 3 * f.plate
    left = f.cx - f.outer_w / 2 + inset
    right = f.cx + f.outer_w / 2 - inset
    top = f.cy + f.outer_h / 2 - inset
    bottom = f.cy - f.outer_h / 2 + inset

    if params.mount_type == 'keyhole':
        cutters = []
        for hx in (f.cx - 0.3 * f.outer_w, f.cx + 0.3 * f.outer_w):
            cutters.append(_bore(r, length, hx, f.cy, f.back_z))
            cutters.append(box(r, 2 * r, length, tag='cutter')
                           .translated(hx, f.cy + r, f.back_z))
        return cutters

    if params.mount_type == '2hole':
        spots = [(left, top), (right, top)]
    elif params.mount_type == '4hole':
        spots = [(left, top), (right, top), (left, bottom), (right, bottom)]
    else:
        spots = []
    return [_bore(r, length, x, y, f.back_z) for x, y in spots]


def back_plate(glyphs: Sequence[GlyphSolid], params: Parameters,
               diagnostics: Optional[List[CompositionError]] = None) -> Solid:
    f = _frame(glyphs, params)
    shape = params.backplate_shape
    s = f.s

    outer = build_profile(shape, f.outer_w, f.outer_h, f.corner_radius)
    back = extrude(outer, f.plate, tag='back_plate').translated(f.cx, f.cy, f.back_z)

    rim = extrude(outer, f.rim_h, tag='rim')
    hollow = extrude(inset_profile(shape, f.outer_w, f.outer_h, f.corner_radius, f.wall),
                     f.rim_h + RIM_CLEARANCE, tag='cutter')
    rim = combine(rim, hollow, 'subtract', diagnostics)
    rim = rim.translated(f.cx, f.cy, f.back_front + f.rim_h / 2)
    back = combine(back, rim, 'union', diagnostics)

    # LED and wiring channels sit just above the panel face inside the rim and
    # only remove material where they reach the rim walls
    led_w, led_d = (v * MM for v in led_channel(params.led_type))
    channels = []
    for g in glyphs:
        lo, hi = g.solid.bounds()
        length = max(0.8 * float(hi[1] - lo[1]), led_w)
        channels.append(box(led_w, length, led_d, tag='cutter').translated(
            float(lo[0] + hi[0]) / 2, float(lo[1] + hi[1]) / 2,
            f.back_front + led_d / 2 + CHANNEL_LIFT))
    back = fold(back, channels, 'subtract', diagnostics)

    wire = WIRE_SIZE * s
    back = combine(back, box(0.9 * f.inner_w, wire, wire, tag='cutter').translated(
        f.cx, f.cy, f.back_front + wire / 2 + CHANNEL_LIFT), 'subtract', diagnostics)

    gland = (cylinder(GLAND_RADIUS * s, 3 * f.wall, tag='cutter')
             .rotated((0, 1, 0), 90)
             .translated(f.cx + f.outer_w / 2, f.cy, f.back_front + 0.3 * f.rim_h))
    back = combine(back, gland, 'subtract', diagnostics)

    if params.mount_type == 'french_cleat':
        z = f.back_z - f.plate / 2 - CLEAT_DEPTH * s / 2
        bar, cutter = _cleat(f, CLEAT_CUT_ANGLE, 0.4, z)
        cleat = combine(bar, cutter, 'subtract', diagnostics)
        back = combine(back, cleat.translated(f.cx, f.cy), 'union', diagnostics)
    elif params.mount_type != 'none':
        back = fold(back, mounting_holes(f, params), 'subtract', diagnostics)

    return back.with_tag('back_plate')


def wall_cleat(glyphs: Sequence[GlyphSolid], params: Parameters,
               diagnostics: Optional[List[CompositionError]] = None) -> Solid:
    """Wall-side half of the french cleat, built at the origin."""

    f = _frame(glyphs, params)
    s = f.s
    thick = MOUNT_PLATE_THICKNESS * s
    base_h = 3 * CLEAT_HEIGHT * s
    width = CLEAT_WIDTH_RATIO * f.outer_w

    base = box(width, base_h, thick, tag='wall_cleat').translated(0, 0, -thick / 2)
    bar, cutter = _cleat(f, -CLEAT_CUT_ANGLE, -0.4, CLEAT_DEPTH * s / 2)
    base = combine(base, combine(bar, cutter, 'subtract', diagnostics), 'union', diagnostics)

    screws = [_bore(MOUNT_SCREW_RADIUS * s, 3 * thick, 0, y, 0)
              for y in (-0.3 * base_h, 0.3 * base_h)]
    return fold(base, screws, 'subtract', diagnostics).with_tag('wall_cleat')


def diffuser(glyphs: Sequence[GlyphSolid], params: Parameters) -> Solid:
    """Flat light-spreading panel in the gap behind the face plate."""

    f = _frame(glyphs, params)
    margin = (params.padding_mm - DIFFUSER_INSET) * f.s
    thick = DIFFUSER_THICKNESS * f.s
    return box(f.glyph_w + 2 * margin, f.glyph_h + 2 * margin, thick,
               tag='diffuser').translated(f.cx, f.cy, f.face_back - thick / 2)


def letter_hole_xs(lo, hi, char: str, params: Parameters) -> List[float]:
    """X positions of pin holes for one letter (model units)."""

    s = params.unit_scale
    width = float(hi[0] - lo[0])
    narrow = (char in NARROW_CHARS
              or width < 0.4 * params.height_mm * s
              or width < 16 * PIN_RADIUS * s)
    if narrow:
        return [float(lo[0] + hi[0]) / 2]
    return [float(lo[0]) + 0.25 * width, float(lo[0]) + 0.75 * width]


def drill_letter(glyph: GlyphSolid, params: Parameters,
                 diagnostics: Optional[List[CompositionError]] = None) -> Solid:
    """Through-holes plus back countersinks for pin mounting one letter."""

    s = params.unit_scale
    depth = params.depth_mm * s
    lo, hi = glyph.solid.bounds()
    cy = float(lo[1] + hi[1]) / 2
    mid_z = float(lo[2] + hi[2]) / 2
    sink_z = float(lo[2]) + COUNTERSINK_DEPTH * s / 2

    result = glyph.solid
    for hx in letter_hole_xs(lo, hi, glyph.char, params):
        result = combine(result, _bore(PIN_RADIUS * s, 3 * depth, hx, cy, mid_z),
                         'subtract', diagnostics)
        result = combine(result, _bore(COUNTERSINK_RADIUS * s, COUNTERSINK_DEPTH * s,
                                       hx, cy, sink_z), 'subtract', diagnostics)
    return result


def mounting_points(letters: Sequence[GlyphSolid], params: Parameters) -> List[MountingPoint]:
    points = []
    for idx, letter in enumerate(letters):
        lo, hi = letter.solid.bounds()
        cy = float(lo[1] + hi[1]) / 2 * MM_PER_UNIT
        for hx in letter_hole_xs(lo, hi, letter.char, params):
            points.append(MountingPoint(hx * MM_PER_UNIT, cy, letter.char, idx))
    return points


def drilling_template_svg(points: Sequence[MountingPoint], params: Parameters) -> str:
    """1:1 SVG drilling template for ``points``; empty string if none."""

    if not points:
        return ''
    margin = 20.0
    xs = np.array([p.x for p in points])
    ys = np.array([p.y for p in points])
    min_x = xs.min() - margin
    max_y = ys.max() + margin
    w = xs.max() + margin - min_x
    h = max_y - (ys.min() - margin)

    marks = []
    for p in points:
        sx = p.x - min_x
        sy = max_y - p.y
        marks.append(
            f'<circle cx="{sx:.2f}" cy="{sy:.2f}" r="1.5" fill="none" stroke="#333" stroke-width="0.3"/>\n'
            f'<circle cx="{sx:.2f}" cy="{sy:.2f}" r="3" fill="none" stroke="#999" '
            f'stroke-width="0.2" stroke-dasharray="1,1"/>\n'
            f'<circle cx="{sx:.2f}" cy="{sy:.2f}" r="0.3" fill="#333"/>\n'
            f'<text x="{sx:.2f}" y="{sy + 5:.2f}" font-size="2.5" text-anchor="middle" '
            f'fill="#666">{p.char or "+"}</text>')

    return '\n'.join([
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{w:g}mm" height="{h:g}mm" '
        f'viewBox="0 0 {w:g} {h:g}">',
        '<title>signcad drilling template - 1:1 scale</title>',
        f'<rect width="{w:g}" height="{h:g}" fill="white" stroke="#ccc" stroke-width="0.5"/>',
        '<text x="5" y="5" font-size="3" fill="#999">'
        'Drilling template (1:1): 3mm through + 6mm countersink</text>',
        f'<text x="5" y="9" font-size="2.5" fill="#bbb">'
        f'Height: {params.height_mm:g}mm | Font: {params.font}</text>',
        *marks,
        '<!-- 10mm scale bar -->',
        f'<line x1="5" y1="{h - 5:g}" x2="15" y2="{h - 5:g}" stroke="#333" stroke-width="0.3"/>',
        f'<text x="10" y="{h - 6:g}" font-size="2" text-anchor="middle" fill="#666">10mm</text>',
        '</svg>',
    ])


def build_assembly(glyphs: Sequence[GlyphSolid], params: Parameters) -> Assembly:
    """Build every part for ``glyphs``; ``glyphs`` must not be empty."""

    if not glyphs:
        raise ValueError('cannot build an assembly without glyphs')
    asm = Assembly()
    diags = asm.diagnostics

    if not params.standalone:
        logger.debug("building face plate over %d glyphs", len(glyphs))
        asm.parts['face_plate'] = face_plate(glyphs, params, diags)
        logger.debug("building back plate")
        asm.parts['back_plate'] = back_plate(glyphs, params, diags)
        if params.mount_type == 'french_cleat':
            asm.parts['wall_cleat'] = wall_cleat(glyphs, params, diags)
        asm.parts['diffuser'] = diffuser(glyphs, params)
        return asm

    drill = params.backplate_shape == 'none' and params.letter_mounting
    for idx, glyph in enumerate(glyphs):
        solid = drill_letter(glyph, params, diags) if drill else glyph.solid
        asm.parts[f'letter_{idx}'] = solid.with_tag('letter')
    if drill:
        asm.mounting_points = mounting_points(glyphs, params)
    return asm


__all__ = [
    'Assembly', 'MountingPoint', 'build_assembly', 'face_plate', 'back_plate',
    'wall_cleat', 'diffuser', 'drill_letter', 'letter_hole_xs',
    'mounting_points', 'drilling_template_svg',
]
