"""Web-based trace visualization using pyvis."""

from pathlib import Path

from pyvis.network import Network

from .builder import TraceGraph


NODE_COLORS = {
    "root": "#FF6B6B",  # Red
    "source": "#4ECDC4",  # Teal, reached through ingoing contacts
    "destination": "#FCE38A",  # Yellow, reached through outgoing contacts
    "both": "#AA96DA",  # Purple
}

EDGE_COLORS = {
    "in": "#45B7D1",
    "out": "#F38181",
}


def _node_role(graph: TraceGraph, node_id: str, data: dict) -> str:
    if data.get("root"):
        return "root"
    directions = {
        edge["direction"] for _, _, edge in graph.graph.in_edges(node_id, data=True)
    } | {edge["direction"] for _, _, edge in graph.graph.out_edges(node_id, data=True)}
    if directions == {"in"}:
        return "source"
    if directions == {"out"}:
        return "destination"
    return "both"


def create_web_visualization(
    graph: TraceGraph,
    output_path: Path = Path("output/trace.html"),
    height: str = "900px",
    width: str = "100%",
    max_distance: int | None = None,
) -> Path:
    """Create an interactive web visualization of traced contacts.

    Args:
        graph: TraceGraph instance
        output_path: Where to save the HTML file
        height: Height of the visualization
        width: Width of the visualization
        max_distance: Only show contacts up to this many hops from a root

    Returns:
        Path to the generated HTML file
    """
    net = Network(
        height=height,
        width=width,
        bgcolor="#1a1a2e",
        font_color="white",
        directed=True,
    )

    net.set_options("""
    {
        "physics": {
            "forceAtlas2Based": {
                "gravitationalConstant": -80,
                "centralGravity": 0.01,
                "springLength": 150,
                "springConstant": 0.02
            },
            "solver": "forceAtlas2Based",
            "stabilization": {
                "iterations": 100
            }
        },
        "edges": {
            "smooth": {
                "type": "curvedCW",
                "roundness": 0.15
            }
        },
        "interaction": {
            "hover": true,
            "navigationButtons": true
        }
    }
    """)

    edges = [
        (source, target, data)
        for source, target, data in graph.graph.edges(data=True)
        if not max_distance or data.get("distance", 0) <= max_distance
    ]
    node_ids = {n for n, d in graph.graph.nodes(data=True) if d.get("root")}
    for source, target, _ in edges:
        node_ids.update((source, target))

    for node_id, data in graph.graph.nodes(data=True):
        if node_id not in node_ids:
            continue
        role = _node_role(graph, node_id, data)
        net.add_node(
            node_id,
            label=node_id,
            title=f"<b>{node_id}</b><br>Role: {role}",
            color=NODE_COLORS[role],
            size=25 if role == "root" else 15,
            group=role,
        )

    for source, target, data in edges:
        direction = data.get("direction", "out")
        net.add_edge(
            source,
            target,
            title=f"t={data.get('t')} distance={data.get('distance')}",
            color=EDGE_COLORS.get(direction, "#888888"),
            width=max(1, 4 - data.get("distance", 1)),
        )

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    net.save_graph(str(output_path))

    return output_path
