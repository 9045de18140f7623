"""
Glyph outline providers.

A provider turns one character into a :class:`GlyphOutline`: a list of
closed :class:`~signcad.profiles.Profile` pieces (outer boundary plus
holes) and their bounding box, scaled so that a capital letter is
``size`` tall.  Two providers are included:

* :class:`BlockFontProvider` - a built-in 5x7 block font that needs no
  font files.  Grid cells are merged into solid outlines with shapely so
  that each stroke group extrudes as one closed shell.
* :class:`FreetypeOutlineProvider` - TrueType/OpenType outlines read with
  freetype-py (optional dependency, ``pip install signcad[fonts]``).

Example usage:

    from signcad.fonts import get_provider

    provider = get_provider("block")
    outline = provider.outline("A", 0.08)
    print(outline.bbox)

Unit-size outlines are cached per character; scaling to the requested
size happens on every call, so the cache never changes the geometry.
"""

from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple

import numpy as np
from shapely.geometry import MultiPolygon, Polygon, box as shapely_box
from shapely.ops import unary_union

from signcad.errors import ProviderUnavailableError
from signcad.profiles import Profile

logger = logging.getLogger(__name__)

try:
    import freetype
    FREETYPE_AVAILABLE = True
except ImportError:
    FREETYPE_AVAILABLE = False

Bounds2D = Tuple[float, float, float, float]


@dataclass(frozen=True)
class GlyphOutline:
    """Closed outline pieces of one character."""

    char: str
    profiles: Tuple[Profile, ...]
    bbox: Bounds2D

    @property
    def is_empty(self) -> bool:
        return not self.profiles

    @property
    def width(self) -> float:
        return self.bbox[2] - self.bbox[0]

    @property
    def height(self) -> float:
        return self.bbox[3] - self.bbox[1]

    def scaled(self, factor: float) -> "GlyphOutline":
        return GlyphOutline(self.char,
                            tuple(p.scaled(factor) for p in self.profiles),
                            tuple(v * factor for v in self.bbox))


class OutlineProvider(Protocol):
    ready: bool

    def outline(self, char: str, size: float) -> GlyphOutline:
        ...


def _empty(char: str) -> GlyphOutline:
    return GlyphOutline(char, (), (0.0, 0.0, 0.0, 0.0))


def _profiles_from_geometry(geom) -> Tuple[Profile, ...]:
    if geom.is_empty:
        return ()
    if isinstance(geom, Polygon):
        polys = [geom]
    elif isinstance(geom, MultiPolygon):
        polys = list(geom.geoms)
    else:
        polys = [g for g in getattr(geom, 'geoms', []) if isinstance(g, Polygon)]
    out = []
    for poly in polys:
        if poly.area <= 0:
            continue
        out.append(Profile(np.asarray(poly.exterior.coords)[:, :2],
                           tuple(np.asarray(r.coords)[:, :2] for r in poly.interiors),
                           shape='glyph'))
    return tuple(out)


def _outline_from_geometry(char: str, geom) -> GlyphOutline:
    profiles = _profiles_from_geometry(geom)
    if not profiles:
        return _empty(char)
    return GlyphOutline(char, profiles, tuple(float(v) for v in geom.bounds))


class _CachingProvider:
    """Caches unit-height outlines; subclasses implement ``_unit_outline``."""

    def __init__(self):
        self._cache: Dict[str, GlyphOutline] = {}

    def _unit_outline(self, char: str) -> GlyphOutline:
        raise NotImplementedError

    def outline(self, char: str, size: float) -> GlyphOutline:
        if not self.ready:
            raise ProviderUnavailableError()
        unit = self._cache.get(char)
        if unit is None:
            unit = self._unit_outline(char)
            self._cache[char] = unit
        return unit.scaled(size)


# Block font: 5 wide x 7 tall grid, each character a list of
# (x, y, width, height) rectangles with the origin at the bottom left.

CHAR_WIDTH = 5
CHAR_HEIGHT = 7

BLOCK_FONT = {
    'A': [(1, 6, 3, 1), (0, 0, 1, 6), (4, 0, 1, 6), (1, 3, 3, 1)],
    'B': [(0, 0, 1, 7), (1, 6, 3, 1), (1, 3, 3, 1), (1, 0, 3, 1), (4, 4, 1, 2), (4, 1, 1, 2)],
    'C': [(0, 1, 1, 5), (1, 6, 4, 1), (1, 0, 4, 1)],
    'D': [(0, 0, 1, 7), (1, 6, 3, 1), (1, 0, 3, 1), (4, 1, 1, 5)],
    'E': [(0, 0, 1, 7), (1, 6, 4, 1), (1, 3, 3, 1), (1, 0, 4, 1)],
    'F': [(0, 0, 1, 7), (1, 6, 4, 1), (1, 3, 3, 1)],
    'G': [(0, 1, 1, 5), (1, 6, 4, 1), (1, 0, 4, 1), (4, 1, 1, 3), (2, 3, 2, 1)],
    'H': [(0, 0, 1, 7), (4, 0, 1, 7), (1, 3, 3, 1)],
    'I': [(0, 6, 5, 1), (0, 0, 5, 1), (2, 1, 1, 5)],
    'J': [(0, 6, 5, 1), (3, 1, 1, 5), (0, 0, 3, 1), (0, 1, 1, 2)],
    'K': [(0, 0, 1, 7), (1, 3, 1, 1), (2, 4, 1, 1), (3, 5, 1, 1), (4, 6, 1, 1),
          (2, 2, 1, 1), (3, 1, 1, 1), (4, 0, 1, 1)],
    'L': [(0, 0, 1, 7), (1, 0, 4, 1)],
    'M': [(0, 0, 1, 7), (4, 0, 1, 7), (1, 5, 1, 1), (2, 4, 1, 1), (3, 5, 1, 1)],
    'N': [(0, 0, 1, 7), (4, 0, 1, 7), (1, 5, 1, 1), (2, 4, 1, 1), (3, 3, 1, 1)],
    'O': [(0, 1, 1, 5), (4, 1, 1, 5), (1, 6, 3, 1), (1, 0, 3, 1)],
    'P': [(0, 0, 1, 7), (1, 6, 3, 1), (1, 3, 3, 1), (4, 4, 1, 2)],
    'Q': [(0, 1, 1, 5), (4, 2, 1, 4), (1, 6, 3, 1), (1, 0, 3, 1), (3, 1, 1, 1), (4, 0, 1, 1)],
    'R': [(0, 0, 1, 7), (1, 6, 3, 1), (1, 3, 3, 1), (4, 4, 1, 2), (2, 2, 1, 1), (3, 1, 1, 1),
          (4, 0, 1, 1)],
    'S': [(1, 6, 4, 1), (0, 4, 1, 2), (1, 3, 3, 1), (4, 1, 1, 2), (0, 0, 4, 1)],
    'T': [(0, 6, 5, 1), (2, 0, 1, 6)],
    'U': [(0, 1, 1, 6), (4, 1, 1, 6), (1, 0, 3, 1)],
    'V': [(0, 3, 1, 4), (1, 1, 1, 2), (2, 0, 1, 1), (3, 1, 1, 2), (4, 3, 1, 4)],
    'W': [(0, 0, 1, 7), (4, 0, 1, 7), (1, 1, 1, 1), (2, 2, 1, 1), (3, 1, 1, 1)],
    'X': [(0, 5, 1, 2), (1, 4, 1, 1), (2, 3, 1, 1), (3, 4, 1, 1), (4, 5, 1, 2), (1, 2, 1, 1),
          (0, 0, 1, 2), (3, 2, 1, 1), (4, 0, 1, 2)],
    'Y': [(0, 5, 1, 2), (1, 4, 1, 1), (2, 0, 1, 4), (3, 4, 1, 1), (4, 5, 1, 2)],
    'Z': [(0, 6, 5, 1), (3, 5, 1, 1), (2, 3, 1, 2), (1, 2, 1, 1), (0, 0, 5, 1)],
    '0': [(0, 1, 1, 5), (4, 1, 1, 5), (1, 6, 3, 1), (1, 0, 3, 1), (2, 3, 1, 1)],
    '1': [(2, 0, 1, 7), (1, 5, 1, 1), (1, 0, 3, 1)],
    '2': [(0, 5, 1, 1), (1, 6, 3, 1), (4, 4, 1, 2), (2, 3, 2, 1), (1, 2, 1, 1), (0, 1, 1, 1),
          (0, 0, 5, 1)],
    '3': [(0, 6, 4, 1), (4, 4, 1, 2), (1, 3, 3, 1), (4, 1, 1, 2), (0, 0, 4, 1)],
    '4': [(0, 3, 1, 4), (4, 0, 1, 7), (1, 3, 3, 1)],
    '5': [(0, 6, 5, 1), (0, 3, 1, 3), (1, 3, 3, 1), (4, 1, 1, 2), (0, 0, 4, 1)],
    '6': [(0, 1, 1, 5), (1, 6, 4, 1), (1, 3, 3, 1), (1, 0, 3, 1), (4, 1, 1, 2)],
    '7': [(0, 6, 5, 1), (4, 3, 1, 3), (2, 0, 2, 3)],
    '8': [(0, 1, 1, 2), (0, 4, 1, 2), (4, 1, 1, 2), (4, 4, 1, 2), (1, 6, 3, 1), (1, 3, 3, 1),
          (1, 0, 3, 1)],
    '9': [(0, 4, 1, 2), (4, 1, 1, 5), (1, 6, 3, 1), (1, 3, 3, 1), (0, 0, 4, 1)],
    '#': [(1, 0, 1, 7), (3, 0, 1, 7), (0, 2, 1, 1), (2, 2, 1, 1), (4, 2, 1, 1),
          (0, 4, 1, 1), (2, 4, 1, 1), (4, 4, 1, 1)],
    '-': [(1, 3, 3, 1)],
    '.': [(2, 0, 1, 1)],
    ' ': [],
}

# cells are grown by this fraction before merging so that strokes
# touching only at a corner fuse into one outline
CELL_BLEED = 0.02


class BlockFontProvider(_CachingProvider):
    """Outlines from :data:`BLOCK_FONT`; always ready."""

    ready = True

    def _unit_outline(self, char: str) -> GlyphOutline:
        rects = BLOCK_FONT.get(char.upper())
        if rects is None:
            # unknown character: a placeholder bar, like a missing glyph box
            rects = [(1, 1, 3, 5)]
        if not rects:
            return _empty(char)
        cells = [shapely_box(x, y, x + w, y + h).buffer(CELL_BLEED, join_style=2)
                 for x, y, w, h in rects]
        merged = unary_union(cells)
        return _outline_from_geometry(char, merged).scaled(1.0 / CHAR_HEIGHT)


def find_system_font(font_name: str) -> Optional[str]:
    """Find a font file by name in the usual system font directories."""

    system = platform.system()
    if system == "Darwin":
        font_dirs = [
            "/System/Library/Fonts",
            "/System/Library/Fonts/Supplemental",
            "/Library/Fonts",
            os.path.expanduser("~/Library/Fonts"),
        ]
    elif system == "Windows":
        font_dirs = [os.path.join(os.environ.get("WINDIR", "C:\\Windows"), "Fonts")]
    else:
        font_dirs = [
            "/usr/share/fonts",
            "/usr/local/share/fonts",
            os.path.expanduser("~/.fonts"),
            os.path.expanduser("~/.local/share/fonts"),
        ]

    names = {f"{variant}{ext}"
             for variant in (font_name, font_name.lower(), font_name.upper())
             for ext in (".ttf", ".otf")}

    for font_dir in font_dirs:
        if not os.path.isdir(font_dir):
            continue
        for root, _dirs, files in os.walk(font_dir):
            for fname in files:
                if fname in names:
                    return os.path.join(root, fname)
    return None


class FreetypeOutlineProvider(_CachingProvider):
    """Outlines from a TrueType/OpenType file via freetype-py.

    ``ready`` stays False when freetype-py is missing or the face cannot
    be loaded; ``load_error`` then says why.
    """

    #: straight segments per quadratic/cubic curve piece
    curve_segments = 4

    def __init__(self, path: str, autoload: bool = True):
        super().__init__()
        self.path = path
        self.ready = False
        self.load_error: Optional[str] = None
        self._face = None
        self._cap_height = 1.0
        if autoload:
            self.load()

    def load(self) -> bool:
        if not FREETYPE_AVAILABLE:
            self.load_error = "freetype-py is not installed"
            return False
        try:
            face = freetype.Face(self.path)
            face.load_char('H', freetype.FT_LOAD_NO_SCALE)
            bbox = face.glyph.outline.get_bbox()
            cap = float(bbox.yMax - bbox.yMin)
        except (freetype.FT_Exception, OSError) as exc:
            self.load_error = f"cannot load font {self.path}: {exc}"
            logger.warning(self.load_error)
            return False
        self._face = face
        self._cap_height = cap if cap > 0 else float(face.units_per_EM)
        self.ready = True
        return True

    def _contours(self, char: str) -> List[List[Tuple[float, float]]]:
        self._face.load_char(char, freetype.FT_LOAD_NO_SCALE)
        outline = self._face.glyph.outline
        segs = self.curve_segments
        contours: List[List[Tuple[float, float]]] = []

        def move_to(a, ctx):
            ctx.append([(a.x, a.y)])

        def line_to(a, ctx):
            ctx[-1].append((a.x, a.y))

        def conic_to(a, b, ctx):
            x0, y0 = ctx[-1][-1]
            for i in range(1, segs + 1):
                t = i / segs
                u = 1 - t
                ctx[-1].append((u*u*x0 + 2*u*t*a.x + t*t*b.x,
                                u*u*y0 + 2*u*t*a.y + t*t*b.y))

        def cubic_to(a, b, c, ctx):
            x0, y0 = ctx[-1][-1]
            for i in range(1, segs + 1):
                t = i / segs
                u = 1 - t
                ctx[-1].append((u**3*x0 + 3*u*u*t*a.x + 3*u*t*t*b.x + t**3*c.x,
                                u**3*y0 + 3*u*u*t*a.y + 3*u*t*t*b.y + t**3*c.y))

        outline.decompose(contours, move_to=move_to, line_to=line_to,
                          conic_to=conic_to, cubic_to=cubic_to)
        return contours

    def _unit_outline(self, char: str) -> GlyphOutline:
        if char.isspace():
            return _empty(char)
        shape = Polygon()
        # even-odd fill: holes are contours nested an odd number of times
        for contour in self._contours(char):
            if len(contour) < 3:
                continue
            ring = Polygon(contour)
            if not ring.is_valid:
                ring = ring.buffer(0)
            shape = shape.symmetric_difference(ring)
        return _outline_from_geometry(char, shape).scaled(1.0 / self._cap_height)


def get_provider(font: Optional[str] = "block") -> OutlineProvider:
    """Resolve a font key (``"block"``, a file path or a system font name)."""

    if font is None or font == "block":
        return BlockFontProvider()
    path = font if os.path.exists(font) else find_system_font(font)
    if path is None:
        raise ProviderUnavailableError(f"font '{font}' not found")
    provider = FreetypeOutlineProvider(path)
    if not provider.ready:
        raise ProviderUnavailableError(provider.load_error or f"font '{font}' not ready")
    return provider


__all__ = [
    'GlyphOutline', 'OutlineProvider', 'BlockFontProvider',
    'FreetypeOutlineProvider', 'BLOCK_FONT', 'find_system_font', 'get_provider',
]
