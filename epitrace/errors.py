"""Exception types raised by epitrace."""


class TraceError(Exception):
    """Base class for contact tracing failures."""


class InvalidArgument(TraceError, ValueError):
    """Missing, wrongly-typed or length-mismatched input."""


class AllocationError(TraceError, MemoryError):
    """Contact index storage could not be obtained."""
