"""
Identity and merge utilities.

Pure functions that combine an incoming fragment with existing state. They
never mutate their inputs: every call returns new collections, so the engine
can swap its state in one assignment.

Identity is the `id` field alone. A repeated id is shallow-merged into the
existing entry, with the incoming fields winning; fields the incoming entry
does not carry are left alone.
"""

import logging
from dataclasses import dataclass, field
from typing import Collection, Dict, Iterable, List

from .types import Graph, GraphEdge, GraphFragment, GraphNode, MergeDiagnostic

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeMerge:
    nodes: Dict[str, GraphNode]
    added_ids: List[str]
    dropped: List[MergeDiagnostic] = field(default_factory=list)


@dataclass(frozen=True)
class EdgeMerge:
    edges: Dict[str, GraphEdge]
    dropped: List[MergeDiagnostic] = field(default_factory=list)


@dataclass(frozen=True)
class FragmentMerge:
    graph: Graph
    added_ids: List[str]
    dropped: List[MergeDiagnostic] = field(default_factory=list)


def _upsert(existing, incoming):
    if existing is None:
        return incoming
    return existing.model_copy(update=incoming.model_dump(exclude_unset=True))


def merge_nodes(existing: Dict[str, GraphNode], incoming: Iterable[GraphNode]) -> NodeMerge:
    """
    Merge incoming nodes into a copy of existing.

    Returns:
        NodeMerge: the merged mapping, the ids that were not present before
        (in arrival order, each once), and a diagnostic per dropped node.
    """
    nodes = dict(existing)
    added_ids: List[str] = []
    dropped: List[MergeDiagnostic] = []

    for node in incoming:
        if node.id is None:
            logger.warning(f"Skipping node with null id: {node.model_dump()}")
            dropped.append(MergeDiagnostic(kind="node", reason="null id", entry=node.model_dump(mode="json")))
            continue

        if node.id not in nodes:
            added_ids.append(node.id)
        nodes[node.id] = _upsert(nodes.get(node.id), node)

    return NodeMerge(nodes=nodes, added_ids=added_ids, dropped=dropped)


def merge_edges(
    existing: Dict[str, GraphEdge],
    incoming: Iterable[GraphEdge],
    node_ids: Collection[str] | None = None,
) -> EdgeMerge:
    """
    Merge incoming edges into a copy of existing.

    Edges missing an id, source or target are dropped. When node_ids is
    given, edges pointing outside of it are dropped too.
    """
    edges = dict(existing)
    dropped: List[MergeDiagnostic] = []

    for edge in incoming:
        if edge.id is None or edge.source is None or edge.target is None:
            logger.warning(f"Skipping edge with null values: {edge.model_dump()}")
            dropped.append(MergeDiagnostic(kind="edge", reason="null id, source or target", entry=edge.model_dump(mode="json")))
            continue

        if node_ids is not None and (edge.source not in node_ids or edge.target not in node_ids):
            logger.warning(f"Skipping edge {edge.id} with unknown endpoint: {edge.source} -> {edge.target}")
            dropped.append(MergeDiagnostic(kind="edge", reason="dangling endpoint", entry=edge.model_dump(mode="json")))
            continue

        edges[edge.id] = _upsert(edges.get(edge.id), edge)

    return EdgeMerge(edges=edges, dropped=dropped)


def merge_fragment(graph: Graph, fragment: GraphFragment) -> FragmentMerge:
    """Merge a whole fragment into a new Graph snapshot."""
    node_merge = merge_nodes(graph.nodes, fragment.nodes)
    edge_merge = merge_edges(graph.edges, fragment.edges, node_ids=node_merge.nodes.keys())

    return FragmentMerge(
        graph=Graph(nodes=node_merge.nodes, edges=edge_merge.edges),
        added_ids=node_merge.added_ids,
        dropped=[*fragment.diagnostics, *node_merge.dropped, *edge_merge.dropped],
    )
