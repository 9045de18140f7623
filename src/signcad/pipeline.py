"""One generation run: parameters in, :class:`~signcad.assembly.Assembly` out.

:func:`generate` is pure and raises a
:class:`~signcad.errors.GenerationError` when no assembly can be made.
:class:`Workbench` is the stateful front end used by interactive hosts:
it keeps the last good assembly and a status line, and only replaces
the assembly once a run has completed.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from signcad.assembly import Assembly, build_assembly
from signcad.errors import (AssemblyError, GenerationError, NoValidCharactersError,
                            ProviderUnavailableError)
from signcad.fonts import OutlineProvider, get_provider
from signcad.layout import layout
from signcad.params import Parameters

logger = logging.getLogger(__name__)

STATUS_READY = "Ready"
STATUS_GENERATING = "Generating 3D model..."
STATUS_DONE = "Model generated"


def generate(params: Parameters, provider: Optional[OutlineProvider] = None,
             before_build: Optional[Callable[[], None]] = None) -> Assembly:
    """Build the assembly described by ``params``.

    ``provider`` defaults to the one named by ``params.font``.
    ``before_build`` is called once the text is laid out, just before
    the boolean-heavy assembly step.
    """

    if provider is None:
        provider = get_provider(params.font)
    if not getattr(provider, 'ready', False):
        raise ProviderUnavailableError()

    s = params.unit_scale
    try:
        glyphs = layout(params.lines, params.height_mm * s, params.depth_mm * s,
                        params.line_spacing_mm * s, provider)
        if not glyphs:
            raise NoValidCharactersError()
        logger.info("laid out %d glyphs on %d lines", len(glyphs), len(params.lines))

        if before_build is not None:
            before_build()

        assembly = build_assembly(glyphs, params)
    except GenerationError:
        raise
    except Exception as exc:
        logger.exception("assembly failed")
        raise AssemblyError(exc) from exc

    for problem in assembly.diagnostics:
        logger.debug("diagnostic: %s", problem)
    logger.info("built %d parts (%d boolean fallbacks)",
                len(assembly), len(assembly.diagnostics))
    return assembly


class Workbench:
    """Holds the current assembly and swaps it only after a good run."""

    def __init__(self, provider: Optional[OutlineProvider] = None):
        self.provider = provider
        self.assembly: Optional[Assembly] = None
        self.params: Optional[Parameters] = None
        self.status = STATUS_READY

    def regenerate(self, params: Parameters,
                   before_build: Optional[Callable[[], None]] = None) -> bool:
        """Run :func:`generate`; returns True when the assembly was replaced."""

        self.status = STATUS_GENERATING
        try:
            result = generate(params, self.provider, before_build)
        except GenerationError as exc:
            self.status = exc.user_message
            logger.warning("generation failed: %s", exc.user_message)
            return False

        self.assembly = result
        self.params = params
        self.status = STATUS_DONE
        if result.diagnostics:
            self.status += f" ({len(result.diagnostics)} boolean steps skipped)"
        return True


__all__ = ['generate', 'Workbench', 'STATUS_READY', 'STATUS_GENERATING', 'STATUS_DONE']
