"""Exception types raised by forestprep.

All validation errors are raised eagerly, before any table is copied or
rewritten, so a failed call leaves the caller's objects untouched.
"""


class ForestPrepError(Exception):
    """Base class for all forestprep errors."""


class InvalidInputKind(ForestPrepError, TypeError):
    """The input object is not of the expected analysis kind."""


class InvalidArgument(ForestPrepError, ValueError):
    """An option has the wrong type, length or range."""


class IncompatibleArgument(ForestPrepError, ValueError):
    """An option conflicts with choices fixed when the analysis was combined."""
