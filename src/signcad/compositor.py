"""Boolean composition of solids with a fallback-to-base policy.

:func:`compose` is the explicit form: it always returns a
:class:`Composition` holding either the new solid or a
:class:`CompositionError` describing why the boolean could not be
evaluated.  :func:`combine` applies the assembly policy on top of it:
a failed cut or join leaves ``base`` untouched and is reported as a
warning, so one bad feature degrades a single part instead of aborting
the whole run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import reduce
from typing import Iterable, List, Optional

from signcad import boolean
from signcad.solid import Solid

logger = logging.getLogger(__name__)

_OPERATIONS = {
    'union': 'union',
    'subtract': 'difference',
    'difference': 'difference',
    'intersect': 'intersection',
    'intersection': 'intersection',
}


@dataclass(frozen=True)
class CompositionError:
    """Why a boolean step produced no usable result."""

    operation: str
    reason: str
    base_tag: str = ''

    def __str__(self):
        label = f" on {self.base_tag}" if self.base_tag else ''
        return f"{self.operation}{label} failed: {self.reason}"


@dataclass(frozen=True)
class Composition:
    solid: Optional[Solid] = None
    error: Optional[CompositionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def solid_or(self, fallback: Solid) -> Solid:
        return self.solid if self.ok else fallback


def _canonical(op: str) -> str:
    try:
        return _OPERATIONS[op.lower()]
    except KeyError:
        raise ValueError(f"unknown boolean operation '{op}'") from None


def _check_operand(sld: Solid, role: str) -> Optional[str]:
    if sld.is_empty:
        return f"{role} has no geometry"
    if not sld.is_closed():
        return f"{role} is not a closed manifold mesh"
    return None


def compose(base: Solid, tool: Solid, op: str,
            engine: str = boolean.DEFAULT_ENGINE) -> Composition:
    """Evaluate ``base <op> tool`` in world space.

    Both transforms are realized first; the inputs themselves are not
    modified.  Geometric failures come back as ``Composition.error``;
    only an unknown ``op`` raises.
    """

    operation = _canonical(op)

    def failed(reason: str) -> Composition:
        return Composition(error=CompositionError(op, reason, base.tag))

    for sld, role in ((base, 'base'), (tool, 'tool')):
        problem = _check_operand(sld, role)
        if problem:
            return failed(problem)

    backend = boolean.get_engine(engine)
    if backend is None:
        return failed(f"boolean engine '{engine}' is not installed")

    try:
        result = backend.solid_boolean(base.realized(), tool.realized(), operation)
    except RuntimeError as exc:
        return failed(str(exc))

    if result is None or result.is_empty:
        return failed('result is empty')

    return Composition(solid=Solid(result.vertices, result.faces, tag=base.tag,
                                   metadata=dict(base.metadata)))


def combine(base: Solid, tool: Solid, op: str,
            diagnostics: Optional[List[CompositionError]] = None,
            engine: str = boolean.DEFAULT_ENGINE) -> Solid:
    """Return ``base <op> tool``, or ``base`` unchanged if that fails."""

    outcome = compose(base, tool, op, engine=engine)
    if outcome.ok:
        return outcome.solid
    logger.warning("boolean fallback: %s", outcome.error)
    if diagnostics is not None:
        diagnostics.append(outcome.error)
    return base


def fold(base: Solid, tools: Iterable[Solid], op: str,
         diagnostics: Optional[List[CompositionError]] = None,
         engine: str = boolean.DEFAULT_ENGINE) -> Solid:
    """Left-fold :func:`combine` over ``tools``; each step falls back alone."""

    return reduce(lambda acc, tool: combine(acc, tool, op, diagnostics, engine),
                  tools, base)


__all__ = ['Composition', 'CompositionError', 'compose', 'combine', 'fold']
