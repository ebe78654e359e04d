"""Exception types raised by the distance-matrix and clustering pipeline.

All errors derive from both DistTreeError and ValueError so callers can catch
either the package-specific base or the builtin the rest of the code raises.
"""


class DistTreeError(ValueError):
    """Base class for every error raised by disttree."""


class MalformedInputError(DistTreeError):
    """Input text or table does not follow the expected format."""


class PreconditionError(DistTreeError):
    """An argument violates a precondition (bad matrix, unknown method...)."""


class DegenerateDataError(DistTreeError):
    """Input is well-formed but the requested quantity is undefined."""


__all__ = [
    'DistTreeError',
    'MalformedInputError',
    'PreconditionError',
    'DegenerateDataError',
]
