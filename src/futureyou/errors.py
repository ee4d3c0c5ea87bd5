"""Error taxonomy for the life simulator.

Transport and parse failures are always recovered locally by the fallback
table; only invalid transitions escape, and those indicate a defect in the
caller rather than a user-facing failure.
"""


class FutureYouError(Exception):
    """Base class for simulator errors."""


class TransportError(FutureYouError):
    """The generation collaborator was unreachable or returned no usable text."""


class ParseError(FutureYouError):
    """Generator output contained no extractable JSON object."""


class InvalidTransitionError(FutureYouError):
    """A state machine operation was called from a phase that does not allow it."""
