"""Typed contracts for the temporal contact engine."""

from dataclasses import dataclass, field
from enum import Enum

Window = tuple[int, int]


class Direction(Enum):
    """Traversal direction through the contact network."""

    INGOING = "in"  # Backward in time, towards possible sources
    OUTGOING = "out"  # Forward in time, towards possible destinations


@dataclass(frozen=True)
class ContactEvent:
    """One directed contact as seen from a node's bucket."""

    record_id: int
    neighbor_id: int
    timestamp: int


@dataclass(frozen=True)
class Query:
    """Tracing parameters for a single root."""

    root: int
    in_window: Window
    out_window: Window
    max_distance: int | None = None

    def window(self, direction: Direction) -> Window:
        if direction is Direction.INGOING:
            return self.in_window
        return self.out_window


@dataclass
class ShortestPaths:
    """Columnar shortest-path rows, one per (root, reached node, direction)."""

    in_distance: list[int] = field(default_factory=list)
    in_record: list[int] = field(default_factory=list)
    in_node: list[int] = field(default_factory=list)
    in_index: list[int] = field(default_factory=list)
    out_distance: list[int] = field(default_factory=list)
    out_record: list[int] = field(default_factory=list)
    out_node: list[int] = field(default_factory=list)
    out_index: list[int] = field(default_factory=list)

    def add(
        self, direction: Direction, index: int, node: int, distance: int, record: int
    ) -> None:
        if direction is Direction.INGOING:
            self.in_distance.append(distance)
            self.in_record.append(record)
            self.in_node.append(node)
            self.in_index.append(index)
        else:
            self.out_distance.append(distance)
            self.out_record.append(record)
            self.out_node.append(node)
            self.out_index.append(index)

    def extend(self, other: "ShortestPaths") -> None:
        for name in self.__dataclass_fields__:
            getattr(self, name).extend(getattr(other, name))


@dataclass(frozen=True)
class RootTrace:
    """Every traced contact for one query, with its hop distance."""

    index: int
    in_records: tuple[int, ...] = ()
    in_distances: tuple[int, ...] = ()
    out_records: tuple[int, ...] = ()
    out_distances: tuple[int, ...] = ()


@dataclass
class ContactTraces:
    roots: list[RootTrace] = field(default_factory=list)

    def extend(self, other: "ContactTraces") -> None:
        self.roots.extend(other.roots)


@dataclass
class NetworkSummary:
    """Degree and contact chain size per query, in query order."""

    in_degree: list[int] = field(default_factory=list)
    out_degree: list[int] = field(default_factory=list)
    ingoing_contact_chain: list[int] = field(default_factory=list)
    outgoing_contact_chain: list[int] = field(default_factory=list)

    def extend(self, other: "NetworkSummary") -> None:
        for name in self.__dataclass_fields__:
            getattr(self, name).extend(getattr(other, name))
