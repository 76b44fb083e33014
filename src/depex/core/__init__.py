"""
depex Core Module.

Core Types & Merging:
    - GraphNode, GraphEdge, GraphFragment, Graph: graph data structures
    - merge_nodes, merge_edges, merge_fragment: pure merge utilities

Expansion Bookkeeping:
    - FetchGate: per-node fetched/loading flags
    - ExpansionTracker: which nodes each expansion introduced

Engine:
    - GraphEngine: expand / collapse / reset over one materialized view

Submodules are imported directly (e.g. `from depex.core.engine import
GraphEngine`); the engine depends on depex.fetching, which in turn depends
on depex.core.types.
"""
