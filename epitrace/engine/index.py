"""Directional contact index built from raw contact events."""

from dataclasses import dataclass
import logging
from typing import Iterator, Sequence

from ..errors import AllocationError, InvalidArgument
from .types import ContactEvent, Direction

log = logging.getLogger(__name__)

Bucket = tuple[ContactEvent, ...]


class ContactIndex:
    """Contacts of one direction, bucketed per node and neighbor.

    Buckets are sorted ascending by timestamp and neighbors iterate in
    ascending id. Instances are never mutated after construction.
    """

    def __init__(self, direction: Direction, buckets: list[dict[int, Bucket]]):
        self.direction = direction
        self._buckets = buckets

    @property
    def ingoing(self) -> bool:
        return self.direction is Direction.INGOING

    @property
    def node_count(self) -> int:
        return len(self._buckets)

    def neighbors(self, node: int) -> Iterator[tuple[int, Bucket]]:
        """Iterate (neighbor, bucket) pairs of a node in ascending neighbor id."""
        return iter(self._buckets[node].items())

    def bucket(self, node: int, neighbor: int) -> Bucket:
        return self._buckets[node].get(neighbor, ())

    def event_count(self) -> int:
        return sum(
            len(bucket) for node in self._buckets for bucket in node.values()
        )


@dataclass(frozen=True)
class ContactIndexPair:
    """The ingoing and outgoing index over the same batch of events."""

    ingoing: ContactIndex
    outgoing: ContactIndex
    node_count: int
    event_count: int

    def for_direction(self, direction: Direction) -> ContactIndex:
        if direction is Direction.INGOING:
            return self.ingoing
        return self.outgoing


def _check_node(value: int, node_count: int, column: str, row: int) -> None:
    if not 0 <= value < node_count:
        raise InvalidArgument(
            f"{column} id {value} in row {row} is outside [0, {node_count})"
        )


def _freeze(raw: list[dict[int, list[ContactEvent]]]) -> list[dict[int, Bucket]]:
    return [{neighbor: tuple(node[neighbor]) for neighbor in sorted(node)} for node in raw]


def build_contact_index(
    source: Sequence[int],
    destination: Sequence[int],
    t: Sequence[int],
    node_count: int,
) -> ContactIndexPair:
    """Build both directional indexes from parallel event columns.

    The row position of each event becomes its record id. Events are
    stable-sorted by timestamp before bucketing, so every bucket ends up
    sorted and ties keep their input order.

    Args:
        source: 0-based source node per event
        destination: 0-based destination node per event
        t: Integer timestamp per event
        node_count: Number of distinct node ids

    Returns:
        ContactIndexPair shared read-only by all later queries
    """
    if not len(source) == len(destination) == len(t):
        raise InvalidArgument(
            "source, destination and t must have the same length "
            f"({len(source)}, {len(destination)}, {len(t)})"
        )
    if node_count < 0:
        raise InvalidArgument(f"node_count must not be negative, got {node_count}")

    for row, (src, dst) in enumerate(zip(source, destination)):
        _check_node(src, node_count, "source", row)
        _check_node(dst, node_count, "destination", row)

    try:
        outgoing: list[dict[int, list[ContactEvent]]] = [{} for _ in range(node_count)]
        ingoing: list[dict[int, list[ContactEvent]]] = [{} for _ in range(node_count)]

        for row in sorted(range(len(t)), key=t.__getitem__):
            src, dst, timestamp = source[row], destination[row], t[row]
            outgoing[src].setdefault(dst, []).append(ContactEvent(row, dst, timestamp))
            ingoing[dst].setdefault(src, []).append(ContactEvent(row, src, timestamp))

        pair = ContactIndexPair(
            ingoing=ContactIndex(Direction.INGOING, _freeze(ingoing)),
            outgoing=ContactIndex(Direction.OUTGOING, _freeze(outgoing)),
            node_count=node_count,
            event_count=len(t),
        )
    except MemoryError as exc:
        raise AllocationError(
            f"Unable to allocate contact index for {len(t)} events "
            f"over {node_count} nodes"
        ) from exc

    log.info(f"Indexed {pair.event_count} contacts over {node_count} nodes")
    return pair
