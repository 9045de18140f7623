"""
Rule-based advice for a parameter snapshot.

:func:`recommendations` looks only at the text and a few settings
(backplate shape, housing) and suggests a font, a text height, a style
pairing and print materials.  It never touches geometry, so it is cheap
enough to call on every parameter change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from signcad.params import Parameters

SHORT_TEXT = 6
LONG_TEXT = 12
MAX_NAME_WORDS = 3

_DIGITS = re.compile(r'^\d+$')
_LETTER = re.compile(r'[a-zA-Z]')


@dataclass(frozen=True)
class Recommendation:
    font: str
    size: str
    style: str
    material: str

    def as_dict(self):
        return {'font': self.font, 'size': self.size,
                'style': self.style, 'material': self.material}


@dataclass(frozen=True)
class TextTraits:
    """What the advice rules need to know about the sign text."""

    numbers_only: bool
    short: bool
    long: bool
    words: int
    is_name: bool


def text_traits(params: Parameters) -> TextTraits:
    text = ' '.join(line.text for line in params.lines).strip()
    numbers_only = bool(_DIGITS.match(re.sub(r'\s', '', text)))
    words = len(text.split())
    is_name = (1 <= words <= MAX_NAME_WORDS and not numbers_only
               and bool(_LETTER.search(text)))
    return TextTraits(numbers_only=numbers_only,
                      short=len(text) <= SHORT_TEXT,
                      long=len(text) > LONG_TEXT,
                      words=words,
                      is_name=is_name)


def _font_advice(t: TextTraits) -> str:
    if t.numbers_only:
        return ("House numbers: the block font or a clean bold sans-serif "
                "(DejaVu Sans Bold, Liberation Sans Bold) reads best at a distance.")
    if t.is_name and t.short:
        return ("Short name or word: bold display faces work well. Try a heavy "
                "sans-serif for a modern look or a bold serif for a classic one.")
    if t.is_name:
        return ("Longer name: use a compact, readable font such as DejaVu Sans Bold. "
                "Avoid wide script faces for long text.")
    if t.long:
        return ("Long text: pick a condensed font (DejaVu Sans Condensed Bold) to keep "
                "the overall width manageable.")
    if t.short:
        return ("Short text: the block font or a bold slab serif makes a strong "
                "statement.")
    return ("General text: a bold sans-serif is the safest all-rounder; a bold serif "
            "gives a slightly warmer feel.")


def _size_advice(t: TextTraits) -> str:
    if t.numbers_only:
        return ("Street-visible house numbers: 150mm+ height. Door-mounted: 80-120mm. "
                "Mailbox: 50-80mm.")
    return ("Names and signs: 80-120mm for door-level viewing, 150mm+ when mounted high "
            "or seen from a distance. Indoor decor: 50-80mm.")


STYLE_ADVICE = {
    'none': ("No backplate gives a floating-letter look. Works best with thick, bold "
             "fonts; letters mount to the wall on hidden pins."),
    'rounded_rect': "Rounded rectangle feels modern. Pair it with sans-serif fonts.",
    'arch': "Arch is traditional. It pairs well with serif fonts.",
    'oval': "Oval is soft and welcoming. Works with script fonts or classic serifs.",
    'auto_contour': ("Auto contour hugs the text block with rounded corners and suits "
                     "any font."),
    'rectangle': ("Rectangle is clean and universal: sans-serif for a modern home, "
                  "serif for a traditional one."),
}


def _material_advice(params: Parameters) -> str:
    if params.housing:
        return ("Outdoors print the housing in ASA or PETG for UV and weather resistance; "
                "indoors PLA is fine. Dark filament with a light diffuser gives the best "
                "LED contrast; print the diffuser in white or natural at 0.8mm.")
    return ("Standalone letters: ASA or PETG outdoors, PLA indoors. Primer and spray "
            "paint give a premium finish.")


def recommendations(params: Parameters) -> Recommendation:
    """Font, size, style and material advice for ``params``."""

    traits = text_traits(params)
    return Recommendation(
        font=_font_advice(traits),
        size=_size_advice(traits),
        style=STYLE_ADVICE.get(params.backplate_shape, STYLE_ADVICE['rectangle']),
        material=_material_advice(params),
    )


__all__ = ['Recommendation', 'TextTraits', 'recommendations', 'text_traits']
