"""Turn text lines into positioned glyph solids.

Every glyph is extruded in its own frame: left edge at ``x = 0``,
vertical middle at ``y = 0``, back face at ``z = 0`` and front face at
``z = depth``.  :func:`measure_line` advances a cursor through one line
and :func:`stack_lines` places the measured lines on a common centre
line, top to bottom.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from signcad.fonts import OutlineProvider
from signcad.params import LineSpec
from signcad.primitives import extrude_many
from signcad.solid import Solid

logger = logging.getLogger(__name__)

SPACE_ADVANCE = 0.30
LETTER_GAP = 0.03
MIN_LINE_WIDTH = 0.001

_INVALID = re.compile(r'[^A-Z0-9 .#\-]')


def normalize_text(text: str) -> str:
    """Uppercase ``text`` and drop everything but ``A-Z 0-9 space . # -``."""
    return _INVALID.sub('', text.upper())


@dataclass(frozen=True)
class GlyphSolid:
    char: str
    width: float
    solid: Solid

    def translated(self, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> "GlyphSolid":
        return GlyphSolid(self.char, self.width, self.solid.translated(x, y, z))


@dataclass(frozen=True)
class LineLayout:
    """One measured line; glyph x positions are relative to the line start."""

    align: str
    width: float
    glyphs: Tuple[GlyphSolid, ...] = field(default=())

    @property
    def is_blank(self) -> bool:
        return not self.glyphs


def glyph_solid(char: str, provider: OutlineProvider, height: float,
                depth: float) -> GlyphSolid:
    """Extrude one character and move it into its glyph frame."""

    outline = provider.outline(char, height)
    if outline.is_empty:
        return GlyphSolid(char, SPACE_ADVANCE * height, Solid.empty(char))
    min_x, min_y, max_x, max_y = outline.bbox
    sld = extrude_many(outline.profiles, depth, tag='letter')
    sld.metadata['char'] = char
    sld = sld.translated(-min_x, -(min_y + max_y) / 2.0, depth / 2.0).realized()
    return GlyphSolid(char, max_x - min_x, sld)


def measure_line(spec: LineSpec, provider: OutlineProvider, height: float,
                 depth: float) -> LineLayout:
    text = normalize_text(spec.text)
    if not text.strip():
        return LineLayout(spec.align, 0.0)

    gap = LETTER_GAP * height
    glyphs: List[GlyphSolid] = []
    cursor = 0.0
    total = 0.0
    for ch in text:
        if ch == ' ':
            advance = SPACE_ADVANCE * height
        else:
            glyph = glyph_solid(ch, provider, height, depth)
            advance = glyph.width
            if not glyph.solid.is_empty:
                glyphs.append(glyph.translated(x=cursor))
        cursor += advance + gap
        total += advance

    width = total + gap * (len(text) - 1)
    logger.debug("line %r: %d glyphs, width %.4f", text, len(glyphs), width)
    return LineLayout(spec.align, width, tuple(glyphs))


def _line_offset(line: LineLayout, max_width: float) -> float:
    if line.align == 'left':
        return -max_width / 2.0
    if line.align == 'right':
        return max_width / 2.0 - line.width
    return -line.width / 2.0


def stack_lines(lines: Sequence[LineLayout], height: float,
                spacing: float) -> List[GlyphSolid]:
    """Position measured lines; returns glyphs in line-major order.

    Blank lines keep their slot in the stack.
    """
    if not lines:
        return []
    total = len(lines) * height + (len(lines) - 1) * spacing
    y = total / 2.0 - height / 2.0
    max_width = max(max(line.width for line in lines), MIN_LINE_WIDTH)

    placed: List[GlyphSolid] = []
    for line in lines:
        dx = _line_offset(line, max_width)
        placed.extend(g.translated(dx, y) for g in line.glyphs)
        y -= height + spacing
    return placed


def layout(lines: Sequence[LineSpec], height: float, depth: float,
           spacing: float, provider: OutlineProvider) -> List[GlyphSolid]:
    measured = [measure_line(spec, provider, height, depth) for spec in lines]
    return stack_lines(measured, height, spacing)


__all__ = [
    'GlyphSolid', 'LineLayout', 'normalize_text', 'glyph_solid',
    'measure_line', 'stack_lines', 'layout',
]
