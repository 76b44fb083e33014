"""
Depex - Incremental Dependency-Graph Materializer.

Depex builds a partial, in-memory view of a software dependency graph
(packages, versions and requirement files) by lazily fetching the
neighborhood of a node on demand, and undoes any portion of that view
without leaking stale nodes, edges or fetch state.

Key Components:
- core: Data types, merge utilities, fetch gate, expansion tracker and engine
- fetching: Neighborhood fetchers (Depex API, static fixtures)
- analysis: Graph statistics and the latest-version view

Usage:
    from depex import GraphEngine, GraphNode, NodeType
    from depex.fetching import DepexApiFetcher

    seed = GraphNode.seed("pkg:pypi/requests", "requests", NodeType.PYPI_PACKAGE)
    async with DepexApiFetcher() as fetcher:
        engine = GraphEngine(seed, fetcher)
        await engine.expand(seed.id)
"""

__version__ = "0.1.0"

from .core.engine import CollapseOutcome, ExpansionOutcome, ExpansionStatus, GraphEngine
from .core.types import (
    Graph, GraphEdge, GraphFragment, GraphNode, NodeType, RelationshipType,
)

__all__ = [
    "__version__",
    "CollapseOutcome",
    "ExpansionOutcome",
    "ExpansionStatus",
    "Graph",
    "GraphEdge",
    "GraphEngine",
    "GraphFragment",
    "GraphNode",
    "NodeType",
    "RelationshipType",
]
