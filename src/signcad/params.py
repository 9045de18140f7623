"""
Parameter snapshots for sign generation.

:class:`Parameters` is immutable; every regeneration reads one snapshot
from start to finish.  Snapshots round-trip through plain mappings and
YAML files:

    from signcad.params import Parameters, load_parameters

    params = load_parameters("sign.yaml")
    taller = params.replace(height_mm=120)

A YAML file holds any subset of the fields; ``lines`` may be given as a
list of strings (centred) or of ``{text, align}`` mappings.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Tuple

import yaml

from signcad import MM
from signcad.errors import ParameterError

ALIGNMENTS = ('left', 'center', 'right')
LED_TYPES = ('strip_5v', 'strip_12v', 'cob')
BACKPLATE_SHAPES = ('rectangle', 'rounded_rect', 'oval', 'arch', 'auto_contour', 'none')
MOUNT_TYPES = ('none', '2hole', '4hole', 'french_cleat', 'keyhole')
REFLECTORS = ('none', 'parabolic', 'faceted')

# LED channel cross-section (width, depth) in millimetres; fixed hardware,
# so it does not follow scale_factor
LED_CHANNELS = {
    'strip_5v': (12.0, 4.0),
    'strip_12v': (10.0, 3.0),
    'cob': (8.0, 3.0),
}
DEFAULT_LED_CHANNEL = LED_CHANNELS['strip_5v']


def led_channel(led_type: str) -> Tuple[float, float]:
    return LED_CHANNELS.get(led_type, DEFAULT_LED_CHANNEL)


@dataclass(frozen=True)
class LineSpec:
    text: str
    align: str = 'center'

    def __post_init__(self):
        if self.align not in ALIGNMENTS:
            raise ParameterError(f"unknown alignment '{self.align}'")

    @classmethod
    def coerce(cls, value) -> "LineSpec":
        if isinstance(value, LineSpec):
            return value
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, Mapping):
            unknown = set(value) - {'text', 'align'}
            if unknown:
                raise ParameterError(f"unknown line keys: {sorted(unknown)}")
            return cls(str(value.get('text', '')), value.get('align', 'center'))
        raise ParameterError(f"cannot read a text line from {value!r}")


def _choice(name: str, value: str, allowed: Iterable[str]):
    if value not in allowed:
        raise ParameterError(f"{name} must be one of {', '.join(allowed)}; got '{value}'")


@dataclass(frozen=True)
class Parameters:
    """One immutable snapshot of every sign setting (millimetres)."""

    lines: Tuple[LineSpec, ...] = (LineSpec('1234', 'center'),)
    font: str = 'block'
    height_mm: float = 80.0
    depth_mm: float = 12.0
    padding_mm: float = 8.0
    wall_thick_mm: float = 3.0
    scale_factor: float = 1.0
    housing: bool = True
    led_type: str = 'strip_5v'
    backplate_shape: str = 'rectangle'
    corner_radius_mm: float = 10.0
    mount_type: str = 'french_cleat'
    hole_diameter_mm: float = 5.0
    line_spacing_mm: float = 5.0
    weather_seal: bool = False
    reflector: str = 'none'
    letter_mounting: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'lines', tuple(LineSpec.coerce(l) for l in self.lines))
        for name in ('height_mm', 'depth_mm', 'wall_thick_mm', 'scale_factor',
                     'hole_diameter_mm'):
            if not getattr(self, name) > 0:
                raise ParameterError(f"{name} must be positive")
        for name in ('padding_mm', 'line_spacing_mm', 'corner_radius_mm'):
            if getattr(self, name) < 0:
                raise ParameterError(f"{name} must not be negative")
        _choice('led_type', self.led_type, LED_TYPES)
        _choice('backplate_shape', self.backplate_shape, BACKPLATE_SHAPES)
        _choice('mount_type', self.mount_type, MOUNT_TYPES)
        _choice('reflector', self.reflector, REFLECTORS)

    @property
    def unit_scale(self) -> float:
        """Model units per millimetre, scale factor included."""
        return MM * self.scale_factor

    @property
    def standalone(self) -> bool:
        """True when letters are emitted as separate parts."""
        return not self.housing or self.backplate_shape == 'none'

    def replace(self, **changes) -> "Parameters":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Parameters":
        names = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - names
        if unknown:
            raise ParameterError(f"unknown parameters: {', '.join(sorted(unknown))}")
        kwargs = dict(data)
        if 'lines' in kwargs:
            lines = kwargs['lines']
            if isinstance(lines, (str, Mapping)):
                lines = [lines]
            kwargs['lines'] = tuple(LineSpec.coerce(l) for l in lines)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.name == 'lines':
                value = [{'text': l.text, 'align': l.align} for l in value]
            out[f.name] = value
        return out


def load_parameters(path) -> Parameters:
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, Mapping):
        raise ParameterError(f"{path}: expected a mapping of parameters")
    return Parameters.from_dict(data)


def dump_parameters(params: Parameters, stream=None):
    """Write ``params`` as YAML to ``stream`` (or return the text)."""
    return yaml.safe_dump(params.to_dict(), stream, sort_keys=False)


__all__ = [
    'LineSpec', 'Parameters', 'LED_CHANNELS', 'led_channel',
    'load_parameters', 'dump_parameters',
    'ALIGNMENTS', 'LED_TYPES', 'BACKPLATE_SHAPES', 'MOUNT_TYPES', 'REFLECTORS',
]
