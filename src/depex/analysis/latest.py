"""
Latest-version view.

A package node HAVEs its version nodes. Restricting the view to the latest
version of each package keeps the picture readable once several versions of
the same package have been pulled in. "Latest" is the version with the
highest numeric `serial_number` prop; versions without one, or with one that
is not a number, count as 0. The first one seen
wins ties.
"""

import logging
from typing import Dict, List, Set

from ..core.engine import GraphEngine
from ..core.types import Graph, GraphNode, NodeType, RelationshipType

logger = logging.getLogger(__name__)


def _serial(node: GraphNode) -> float:
    try:
        return float(node.props.get("serial_number") or 0)
    except (TypeError, ValueError):
        return 0.0


def versions_by_package(graph: Graph) -> Dict[str, List[GraphNode]]:
    grouped: Dict[str, List[GraphNode]] = {}
    for edge in graph.iter_edges():
        if edge.type != RelationshipType.HAVE:
            continue
        version = graph.get_node(edge.target)
        if version is not None and version.type == NodeType.VERSION:
            grouped.setdefault(edge.source, []).append(version)
    return grouped


def _latest(versions: List[GraphNode]) -> GraphNode:
    best = versions[0]
    for candidate in versions[1:]:
        if _serial(candidate) > _serial(best):
            best = candidate
    return best


def latest_version_ids(graph: Graph) -> Set[str]:
    return {_latest(versions).id for versions in versions_by_package(graph).values()}


def filter_latest(graph: Graph) -> Graph:
    """
    Hide every version that is not its package's latest.

    Versions no package HAVEs (e.g. a version seed) stay visible, as do all
    other nodes and the edges between survivors.
    """
    hidden: Set[str] = set()
    for versions in versions_by_package(graph).values():
        latest = _latest(versions)
        hidden.update(v.id for v in versions if v.id != latest.id)
    nodes = {nid: n for nid, n in graph.nodes.items() if nid not in hidden}
    edges = {
        eid: e for eid, e in graph.edges.items()
        if e.source in nodes and e.target in nodes
    }
    return Graph(nodes=nodes, edges=edges)


def collapse_non_latest(engine: GraphEngine) -> List[str]:
    """
    Collapse every expanded version that is not its package's latest.

    A version counts as expanded when it has outgoing edges. Returns the ids
    that were collapsed, in graph order.
    """
    collapsed: List[str] = []
    for versions in versions_by_package(engine.graph).values():
        if len(versions) < 2:
            continue
        latest = _latest(versions)
        for version in versions:
            if version.id == latest.id or not engine.graph.has_node(version.id):
                continue
            if engine.graph.outgoing(version.id):
                engine.collapse(version.id)
                collapsed.append(version.id)

    if collapsed:
        logger.info(f"Collapsed {len(collapsed)} non-latest version(s)")
    return collapsed
