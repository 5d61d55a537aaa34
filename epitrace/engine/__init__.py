"""Temporal contact network engine."""

from .batch import run_network_summary, run_shortest_paths, run_trace
from .index import ContactIndex, ContactIndexPair, build_contact_index
from .types import (
    ContactEvent,
    ContactTraces,
    Direction,
    NetworkSummary,
    Query,
    RootTrace,
    ShortestPaths,
)

__all__ = [
    "ContactEvent",
    "ContactIndex",
    "ContactIndexPair",
    "ContactTraces",
    "Direction",
    "NetworkSummary",
    "Query",
    "RootTrace",
    "ShortestPaths",
    "build_contact_index",
    "run_network_summary",
    "run_shortest_paths",
    "run_trace",
]
