"""NetworkX graph of traced contacts."""

import json
from collections import Counter
from dataclasses import dataclass
from pathlib import Path

import networkx as nx

from ..tracing import ContactTrace


@dataclass
class TraceGraphStats:
    """Statistics about a traced contact graph."""

    nodes: int
    roots: int
    edges: int
    directions: dict[str, int]
    max_distance: int

    def __str__(self) -> str:
        directions_str = ", ".join(
            f"{k}: {v}" for k, v in sorted(self.directions.items())
        )
        return (
            f"Trace Graph Stats:\n"
            f"  Nodes: {self.nodes} ({self.roots} roots)\n"
            f"  Contacts: {self.edges} ({directions_str})\n"
            f"  Max distance: {self.max_distance}"
        )


class TraceGraph:
    """Contacts reached from one or more roots as a directed multigraph.

    Nodes are identifiers. Each traced contact becomes an edge keyed by its
    record id, from source to destination.
    """

    def __init__(self):
        self.graph = nx.MultiDiGraph()

    @classmethod
    def from_trace(cls, trace: ContactTrace) -> "TraceGraph":
        trace_graph = cls()
        for root in trace.roots:
            trace_graph.add_root(root)
        for row in trace:
            trace_graph.add_contact(
                row.source,
                row.destination,
                record=row.record,
                t=row.t,
                distance=row.distance,
                direction=row.direction,
            )
        return trace_graph

    def add_root(self, identifier: str) -> None:
        self.graph.add_node(identifier, root=True)

    def add_contact(
        self,
        source: str,
        destination: str,
        *,
        record: int,
        t,
        distance: int,
        direction: str,
    ) -> None:
        """Add a traced contact.

        A record traced from several roots is kept once per direction, at
        its shortest distance.
        """
        for node in (source, destination):
            if not self.graph.has_node(node):
                self.graph.add_node(node, root=False)

        key = f"{direction}:{record}"
        if self.graph.has_edge(source, destination, key=key):
            edge = self.graph.edges[source, destination, key]
            edge["distance"] = min(edge["distance"], distance)
            return

        self.graph.add_edge(
            source,
            destination,
            key=key,
            record=record,
            t=str(t),
            distance=distance,
            direction=direction,
        )

    def roots(self) -> list[str]:
        return sorted(n for n, d in self.graph.nodes(data=True) if d.get("root"))

    def get_sources(self, identifier: str) -> list[str]:
        """Identifiers with an ingoing contact into ``identifier``."""
        return sorted(
            src
            for src, _, data in self.graph.in_edges(identifier, data=True)
            if data.get("direction") == "in"
        )

    def get_destinations(self, identifier: str) -> list[str]:
        """Identifiers an outgoing contact from ``identifier`` reached."""
        return sorted(
            dst
            for _, dst, data in self.graph.out_edges(identifier, data=True)
            if data.get("direction") == "out"
        )

    def get_stats(self) -> TraceGraphStats:
        directions = Counter(
            data.get("direction", "unknown")
            for _, _, data in self.graph.edges(data=True)
        )
        distances = [
            data.get("distance", 0) for _, _, data in self.graph.edges(data=True)
        ]
        return TraceGraphStats(
            nodes=self.graph.number_of_nodes(),
            roots=len(self.roots()),
            edges=self.graph.number_of_edges(),
            directions=dict(directions),
            max_distance=max(distances, default=0),
        )

    def save(self, path: Path) -> None:
        """Save graph to node-link JSON."""
        data = nx.node_link_data(self.graph)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @classmethod
    def load(cls, path: Path) -> "TraceGraph":
        """Load graph from node-link JSON."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        trace_graph = cls()
        trace_graph.graph = nx.node_link_graph(data)
        return trace_graph
