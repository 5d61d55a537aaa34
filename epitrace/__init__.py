"""Epidemiological contact tracing over temporal contact networks."""

from typing import Any

__all__ = ["network_summary", "shortest_paths", "trace"]


def trace(*args: Any, **kwargs: Any):
    from .tracing import trace as _trace

    return _trace(*args, **kwargs)


def shortest_paths(*args: Any, **kwargs: Any) -> list:
    from .tracing import shortest_paths as _shortest_paths

    return _shortest_paths(*args, **kwargs)


def network_summary(*args: Any, **kwargs: Any) -> list:
    from .tracing import network_summary as _network_summary

    return _network_summary(*args, **kwargs)
