"""
Graph statistics for the visible view.

Depth is measured from the roots (nodes with no incoming edge) as the
largest breadth-first distance to any reachable node, computed on a
rustworkx snapshot of the graph.
"""

from typing import Dict

import rustworkx as rx
from pydantic import BaseModel

from ..core.types import Graph, NodeType


class GraphStats(BaseModel):
    total_nodes: int = 0
    total_edges: int = 0
    nodes_with_vulnerabilities: int = 0
    total_vulnerabilities: int = 0
    package_nodes: int = 0
    version_nodes: int = 0
    max_depth: int = 0


def to_rustworkx(graph: Graph) -> tuple[rx.PyDiGraph, Dict[str, int]]:
    """Build a rustworkx digraph of the snapshot and the id -> index map."""
    digraph = rx.PyDiGraph(multigraph=True)
    id_to_idx: Dict[str, int] = {}
    for node in graph.iter_nodes():
        id_to_idx[node.id] = digraph.add_node(node.id)
    for edge in graph.iter_edges():
        if edge.source in id_to_idx and edge.target in id_to_idx:
            digraph.add_edge(id_to_idx[edge.source], id_to_idx[edge.target], edge.id)
    return digraph, id_to_idx


def max_depth(graph: Graph) -> int:
    digraph, _ = to_rustworkx(graph)
    roots = [idx for idx in digraph.node_indices() if digraph.in_degree(idx) == 0]

    deepest = 0
    for root in roots:
        lengths = rx.digraph_dijkstra_shortest_path_lengths(digraph, root, edge_cost_fn=lambda _: 1.0)
        if lengths:
            deepest = max(deepest, int(max(lengths.values())))
    return deepest


def compute_stats(graph: Graph) -> GraphStats:
    nodes_with_vulns = 0
    total_vulns = 0
    for node in graph.iter_nodes():
        vulns = node.props.get("vulnerabilities") or []
        if vulns:
            nodes_with_vulns += 1
            total_vulns += len(vulns)

    return GraphStats(
        total_nodes=graph.node_count,
        total_edges=graph.edge_count,
        nodes_with_vulnerabilities=nodes_with_vulns,
        total_vulnerabilities=total_vulns,
        package_nodes=sum(1 for n in graph.iter_nodes() if n.type.is_package),
        version_nodes=sum(1 for n in graph.iter_nodes() if n.type == NodeType.VERSION),
        max_depth=max_depth(graph),
    )
