"""
Exceptions raised by the effects engine.

Both concrete errors derive from ``ValueError`` so code that already guards
image operations with ``except ValueError`` keeps working.
"""


class EffectsError(Exception):
    """Base class for all effects engine errors."""


class InvalidDimensionsError(EffectsError, ValueError):
    """Buffer sizes do not match or do not fit the requested region."""


class InvalidParameterError(EffectsError, ValueError):
    """A settings value is outside of its domain."""


__all__ = [
    "EffectsError",
    "InvalidDimensionsError",
    "InvalidParameterError",
]
