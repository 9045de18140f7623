"""
Exceptions raised by signcad.

Boolean failures are deliberately absent: the compositor reports them as
:class:`signcad.compositor.CompositionError` values and keeps going.
Everything here ends a generation run (or rejects its input).
"""


class ParameterError(ValueError):
    """A parameter snapshot contains an unknown choice or bad dimension."""


class GenerationError(Exception):
    """A generation run produced no assembly."""

    status = "Error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.status)

    @property
    def user_message(self) -> str:
        return str(self)


class ProviderUnavailableError(GenerationError):
    """The glyph outline provider is missing or not loaded yet."""

    status = "Outline provider not ready"


class NoValidCharactersError(GenerationError):
    """Every text line is empty after normalization."""

    status = "No valid characters"


class AssemblyError(GenerationError):
    """An unexpected exception escaped the assembly builder."""

    def __init__(self, reason: BaseException | str):
        self.reason = reason
        super().__init__(f"Error: {reason}")


__all__ = [
    'ParameterError',
    'GenerationError',
    'ProviderUnavailableError',
    'NoValidCharactersError',
    'AssemblyError',
]
