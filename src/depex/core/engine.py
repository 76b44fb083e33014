"""
Graph Engine - the incremental dependency-graph materializer.

Owns the visible graph and its per-node fetch state, and implements the
three structural operations:

- expand:   fetch a node's neighborhood and merge it in.
- collapse: retract everything a node's expansion (transitively) introduced.
- reset:    discard the whole view and start over from a new seed.

The engine runs on a single asyncio event loop. Every mutation is
synchronous; only the fetch inside expand awaits. While a node's fetch is in
flight the Fetch Gate blocks a second expansion of it, but other nodes can
be expanded or collapsed freely.

An expansion whose node was collapsed away (or reset) while its fetch was in
flight is discarded on arrival. Each expansion takes a ticket when it starts;
collapse and reset revoke the tickets of the nodes they remove, and a result
is only merged if its ticket is still current.
"""

import asyncio
import itertools
import logging
from enum import StrEnum
from typing import Dict, List, Sequence

from pydantic import BaseModel, Field

from ..fetching.base import NeighborhoodFetcher, build_request
from .exceptions import FetchError, NodeNotFoundError
from .gate import FetchGate
from .merge import merge_fragment
from .result import Err, Ok, Result
from .tracker import ExpansionTracker
from .types import Graph, GraphNode, MergeDiagnostic

logger = logging.getLogger(__name__)

# Soft limit on visible nodes; past it callers should stop expanding.
DEFAULT_MAX_NODES = 200


class ExpansionStatus(StrEnum):
    EXPANDED = "expanded"
    SKIPPED = "skipped"
    DISCARDED = "discarded"


class ExpansionOutcome(BaseModel):
    """What a completed expand call did to the graph."""
    node_id: str
    status: ExpansionStatus
    added_ids: List[str] = Field(default_factory=list)
    dropped: int = 0
    truncated: bool = False


class CollapseOutcome(BaseModel):
    """What a collapse call removed."""
    node_id: str
    removed_ids: List[str] = Field(default_factory=list)
    removed_edge_ids: List[str] = Field(default_factory=list)


class GraphEngine:
    """
    Materializes a partial dependency graph around a seed node.

    Args:
        seed: The entity being inspected; the graph starts with it alone.
        fetcher: Source of node neighborhoods.
        max_nodes: Soft limit reported by node_limit_reached.
    """

    def __init__(self, seed: GraphNode, fetcher: NeighborhoodFetcher, max_nodes: int = DEFAULT_MAX_NODES):
        self._fetcher = fetcher
        self.max_nodes = max_nodes
        self._gate = FetchGate()
        self._tracker = ExpansionTracker()
        self._tickets: Dict[str, int] = {}
        self._ticket_counter = itertools.count(1)
        self._diagnostics: List[MergeDiagnostic] = []
        self._graph = Graph.from_node(seed.model_copy(deep=True))
        self._root_id: str = seed.id

    # --- Observers ---

    @property
    def graph(self) -> Graph:
        """A private copy of the visible graph; editing it never reaches the engine."""
        return self._graph.model_copy(deep=True)

    @property
    def root_id(self) -> str:
        return self._root_id

    @property
    def fetched(self) -> Dict[str, bool]:
        return self._gate.fetched

    @property
    def loading(self) -> Dict[str, bool]:
        return self._gate.loading

    @property
    def expansions(self) -> Dict[str, List[str]]:
        return self._tracker.records

    @property
    def diagnostics(self) -> List[MergeDiagnostic]:
        """Every fragment entry dropped since the last reset."""
        return [d.model_copy(deep=True) for d in self._diagnostics]

    @property
    def node_limit_reached(self) -> bool:
        return self._graph.node_count >= self.max_nodes

    def is_fetched(self, node_id: str) -> bool:
        return self._gate.is_fetched(node_id)

    def is_loading(self, node_id: str) -> bool:
        return self._gate.is_loading(node_id)

    # --- Operations ---

    async def expand(self, node_id: str) -> Result[ExpansionOutcome, FetchError]:
        """
        Fetch and merge the neighborhood of node_id.

        Returns Ok(SKIPPED) without fetching when the node is already fetched
        or loading. A failed fetch leaves the graph untouched and the node
        expandable again, and comes back as Err.

        Raises:
            NodeNotFoundError: If node_id is not in the graph.
        """
        if not self._gate.can_expand(node_id):
            logger.debug(f"{node_id}: already fetched or loading, skipping")
            return Ok(ExpansionOutcome(node_id=node_id, status=ExpansionStatus.SKIPPED))

        node = self._graph.get_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)

        request = build_request(node, self._graph)
        ticket = next(self._ticket_counter)
        self._tickets[node_id] = ticket
        self._gate.begin_loading(node_id)

        try:
            try:
                fragment = await self._fetcher.fetch(request)
            except Exception as e:
                error = e if isinstance(e, FetchError) else FetchError(f"{type(e).__name__}: {e}", node_id=node_id)
                if error.node_id is None:
                    error.node_id = node_id
                logger.warning(f"Error expanding node {node_id}: {error}")
                return Err(error)

            if not self._holds_ticket(node_id, ticket):
                logger.info(f"{node_id}: removed while loading, discarding its neighborhood")
                return Ok(ExpansionOutcome(node_id=node_id, status=ExpansionStatus.DISCARDED))

            # Merge, record provenance and mark fetched with no await in between.
            merged = merge_fragment(self._graph, fragment)
            self._graph = merged.graph
            self._tracker.record_expansion(node_id, merged.added_ids)
            self._gate.mark_fetched(node_id)
            self._diagnostics.extend(merged.dropped)

            logger.debug(f"{node_id}: expanded, {len(merged.added_ids)} new node(s)")
            return Ok(ExpansionOutcome(
                node_id=node_id,
                status=ExpansionStatus.EXPANDED,
                added_ids=merged.added_ids,
                dropped=len(merged.dropped),
                truncated=fragment.truncated,
            ))
        finally:
            if self._holds_ticket(node_id, ticket):
                del self._tickets[node_id]
                self._gate.end_loading(node_id)

    async def expand_many(self, node_ids: Sequence[str]) -> List[Result[ExpansionOutcome, FetchError]]:
        """Expand several nodes concurrently; results come back in input order."""
        return list(await asyncio.gather(*(self.expand(node_id) for node_id in node_ids)))

    def collapse(self, node_id: str) -> CollapseOutcome:
        """
        Retract every node introduced, directly or transitively, by expanding node_id.

        node_id stays in the graph, loses its outgoing edges, and becomes
        expandable again. Removed nodes lose their fetch state and expansion
        records; any of their fetches still in flight will be discarded.

        Raises:
            NodeNotFoundError: If node_id is not in the graph.
        """
        if not self._graph.has_node(node_id):
            raise NodeNotFoundError(node_id)

        to_remove = self._tracker.collect_descendants(node_id)

        if not to_remove:
            nodes = self._graph.nodes
            edges = {eid: e for eid, e in self._graph.edges.items() if e.source != node_id}
        else:
            nodes = {nid: n for nid, n in self._graph.nodes.items() if nid not in to_remove}
            edges = {
                eid: e for eid, e in self._graph.edges.items()
                if not (e.touches(to_remove) or e.source == node_id)
            }

        removed_edge_ids = [eid for eid in self._graph.edges if eid not in edges]
        removed_ids = [nid for nid in self._graph.nodes if nid in to_remove]
        self._graph = Graph(nodes=nodes, edges=edges)

        for removed_id in to_remove:
            self._revoke(removed_id)
            self._gate.clear(removed_id)
            self._tracker.forget(removed_id)

        self._revoke(node_id)
        self._tracker.forget(node_id)
        self._gate.mark_unfetched(node_id)

        logger.info(f"Collapsed {node_id}: {len(removed_ids)} node(s), {len(removed_edge_ids)} edge(s) removed")
        return CollapseOutcome(node_id=node_id, removed_ids=removed_ids, removed_edge_ids=removed_edge_ids)

    def reset(self, seed: GraphNode) -> None:
        """Discard the whole view and start over from seed."""
        self._graph = Graph.from_node(seed.model_copy(deep=True))
        self._root_id = seed.id
        self._gate.reset()
        self._tracker.reset()
        self._tickets.clear()
        self._diagnostics.clear()
        logger.debug(f"Reset graph to seed {seed.id}")

    # --- Internals ---

    def _holds_ticket(self, node_id: str, ticket: int) -> bool:
        return self._tickets.get(node_id) == ticket

    def _revoke(self, node_id: str) -> None:
        if self._tickets.pop(node_id, None) is not None:
            self._gate.end_loading(node_id)
            logger.debug(f"{node_id}: in-flight expansion revoked")
