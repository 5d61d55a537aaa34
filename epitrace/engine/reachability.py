"""Window-narrowing temporal reachability search.

Every analysis walks the contact index the same way: from the current node,
each admitted neighbor bucket is searched for contacts inside the current
window, and the search descends into qualifying neighbors with a narrowed
window. Ingoing searches keep the window begin and pull the end back to the
last qualifying contact. Outgoing searches keep the window end and push the
begin forward to the first qualifying contact. Windows never grow, so the
search always terminates.

The walk uses an explicit stack whose frames own their neighbor iterator
and path set, which reproduces recursive pre-order exactly without hitting
the interpreter recursion limit on long chains.
"""

from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from operator import attrgetter
from typing import Iterator, Protocol

from .index import Bucket, ContactIndex
from .types import ContactEvent, Window

_timestamp = attrgetter("timestamp")


def qualifying_range(bucket: Bucket, t_begin: int, t_end: int) -> tuple[int, int] | None:
    """Locate the contacts of a bucket inside ``[t_begin, t_end]``.

    Returns:
        ``(first, stop)`` slice bounds, or None when no contact qualifies
    """
    first = bisect_left(bucket, t_begin, key=_timestamp)
    if first == len(bucket) or bucket[first].timestamp > t_end:
        return None
    stop = bisect_right(bucket, t_end, lo=first, key=_timestamp)
    return first, stop


def narrow_window(
    bucket: Bucket, first: int, stop: int, window: Window, ingoing: bool
) -> Window:
    """Window for descending past a qualifying bucket."""
    t_begin, t_end = window
    if ingoing:
        return t_begin, bucket[stop - 1].timestamp
    return bucket[first].timestamp, t_end


@dataclass(frozen=True)
class Hop:
    """A qualifying neighbor reached during a walk."""

    node: int
    parent: int
    distance: int
    window: Window
    bucket: Bucket
    first: int
    stop: int

    @property
    def first_event(self) -> ContactEvent:
        return self.bucket[self.first]

    @property
    def events(self) -> Bucket:
        return self.bucket[self.first : self.stop]


class VisitPolicy(Protocol):
    def enter(self, node: int, window: Window) -> None: ...

    def admits(self, neighbor: int, window: Window, path: frozenset[int]) -> bool: ...


class PathLocalVisits:
    """Forbid revisiting a node on the current path only.

    Sibling branches may reconverge on the same node, which minimal
    distance resolution depends on.
    """

    def enter(self, node: int, window: Window) -> None:
        pass

    def admits(self, neighbor: int, window: Window, path: frozenset[int]) -> bool:
        return neighbor not in path


@dataclass
class _Frame:
    node: int
    window: Window
    path: frozenset[int]
    distance: int
    neighbors: Iterator[tuple[int, Bucket]]


def walk(
    index: ContactIndex,
    root: int,
    window: Window,
    policy: VisitPolicy | None = None,
    max_distance: int | None = None,
) -> Iterator[Hop]:
    """Walk every qualifying hop reachable from ``root``.

    Hops are yielded depth-first in pre-order with neighbors in ascending
    id, before the walk descends into them.

    Args:
        index: Directional contact index to walk
        root: Start node
        window: Inclusive ``(t_begin, t_end)`` window at the root
        policy: Visitation policy, path-local when omitted
        max_distance: Stop descending below this hop (0 or None = unlimited)

    Yields:
        Hop for each qualifying neighbor bucket
    """
    if policy is None:
        policy = PathLocalVisits()
    ingoing = index.ingoing

    policy.enter(root, window)
    stack = [_Frame(root, window, frozenset((root,)), 1, index.neighbors(root))]

    while stack:
        frame = stack[-1]
        for neighbor, bucket in frame.neighbors:
            if not policy.admits(neighbor, frame.window, frame.path):
                continue

            bounds = qualifying_range(bucket, *frame.window)
            if bounds is None:
                continue
            first, stop = bounds

            yield Hop(
                node=neighbor,
                parent=frame.node,
                distance=frame.distance,
                window=frame.window,
                bucket=bucket,
                first=first,
                stop=stop,
            )

            if max_distance and frame.distance >= max_distance:
                continue

            child_window = narrow_window(bucket, first, stop, frame.window, ingoing)
            policy.enter(neighbor, child_window)
            stack.append(
                _Frame(
                    node=neighbor,
                    window=child_window,
                    path=frame.path | {neighbor},
                    distance=frame.distance + 1,
                    neighbors=index.neighbors(neighbor),
                )
            )
            break
        else:
            stack.pop()
