"""Minimal hop distance from a root to every reachable node."""

from .index import ContactIndex
from .reachability import walk
from .types import Window


def resolve_shortest_paths(
    index: ContactIndex, root: int, window: Window
) -> dict[int, tuple[int, int]]:
    """Resolve the shortest temporal path to each node reachable from ``root``.

    A node keeps the first qualifying record of the first branch that
    reached it, unless a later branch reaches it in strictly fewer hops.
    Equal-distance rediscoveries never overwrite.

    Returns:
        Mapping node -> (distance, record id), in ascending node id
    """
    found: dict[int, tuple[int, int]] = {}

    for hop in walk(index, root, window):
        current = found.get(hop.node)
        if current is None or hop.distance < current[0]:
            found[hop.node] = (hop.distance, hop.first_event.record_id)

    return dict(sorted(found.items()))
