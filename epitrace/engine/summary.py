"""Degree and contact chain size of a root."""

from dataclasses import dataclass

from .index import ContactIndex
from .reachability import qualifying_range, walk
from .types import Window


def degree(index: ContactIndex, node: int, window: Window) -> int:
    """Count distinct neighbors with at least one contact in ``window``.

    Self-loops are ignored.
    """
    t_begin, t_end = window
    return sum(
        1
        for neighbor, bucket in index.neighbors(node)
        if neighbor != node and qualifying_range(bucket, t_begin, t_end) is not None
    )


@dataclass
class Visitation:
    """Most favorable window bound a node has been entered with."""

    visited: bool = False
    bound: int = 0


def should_revisit(state: Visitation, window: Window, ingoing: bool) -> bool:
    """True when entering with ``window`` would extend the recorded bound."""
    if not state.visited:
        return True
    t_begin, t_end = window
    if ingoing:
        return t_end > state.bound
    return t_begin < state.bound


def merge_visit(state: Visitation, window: Window, ingoing: bool) -> None:
    t_begin, t_end = window
    candidate = t_end if ingoing else t_begin
    if not state.visited:
        state.visited = True
        state.bound = candidate
    elif ingoing:
        state.bound = max(state.bound, candidate)
    else:
        state.bound = min(state.bound, candidate)


class RefinableVisits:
    """Visitation policy that re-explores a node when reachability grows.

    Ingoing walks revisit a node reached with a later window end, outgoing
    walks one reached with an earlier window begin.
    """

    def __init__(self, ingoing: bool):
        self.ingoing = ingoing
        self._states: dict[int, Visitation] = {}

    def __len__(self) -> int:
        return len(self._states)

    def state(self, node: int) -> Visitation:
        return self._states.get(node, Visitation())

    def enter(self, node: int, window: Window) -> None:
        merge_visit(self._states.setdefault(node, Visitation()), window, self.ingoing)

    def admits(self, neighbor: int, window: Window, path: frozenset[int]) -> bool:
        return should_revisit(self.state(neighbor), window, self.ingoing)


def contact_chain(index: ContactIndex, root: int, window: Window) -> int:
    """Number of distinct nodes in the contact chain of ``root``, root excluded."""
    visits = RefinableVisits(index.ingoing)
    for _ in walk(index, root, window, policy=visits):
        pass
    return len(visits) - 1
