"""Enumerate every contact along the qualifying paths from a root."""

from .index import ContactIndex
from .reachability import walk
from .types import Window


def trace_contacts(
    index: ContactIndex,
    root: int,
    window: Window,
    max_distance: int | None = None,
) -> tuple[list[int], list[int]]:
    """Collect all qualifying contacts reachable from ``root``.

    Unlike shortest paths, every contact inside a qualifying bucket's
    window is reported, not just the first. Contacts at ``max_distance``
    are still reported, the walk just does not go past them.

    Returns:
        Parallel lists of record ids and hop distances, in walk order
    """
    records: list[int] = []
    distances: list[int] = []

    for hop in walk(index, root, window, max_distance=max_distance):
        for event in hop.events:
            records.append(event.record_id)
            distances.append(hop.distance)

    return records, distances
