"""
Neighborhood Fetcher contract.

A fetcher turns a NeighborhoodRequest into a GraphFragment. How the request
is shaped depends on the node kind:

- Version nodes are expanded by version purl.
- Requirement files are expanded by their backend id.
- Package nodes are expanded by package purl, together with the version
  constraints of the REQUIRE edge that pulled the package into the graph.
"""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from ..core.types import Graph, GraphFragment, GraphNode, NodeType, RelationshipType


class NeighborhoodRequest(BaseModel):
    node_type: NodeType
    node_identity: str
    constraints: str | None = None

    model_config = ConfigDict(frozen=True)


@runtime_checkable
class NeighborhoodFetcher(Protocol):
    async def fetch(self, request: NeighborhoodRequest) -> GraphFragment:
        ...


def build_request(node: GraphNode, graph: Graph) -> NeighborhoodRequest:
    """
    Derive the external request for expanding node.

    Only the first inbound REQUIRE edge is consulted for constraints.
    """
    if node.id is None:
        raise ValueError("Cannot build a request for a node without id")

    if node.type == NodeType.VERSION:
        return NeighborhoodRequest(node_type=node.type, node_identity=node.purl or node.id)

    if node.type == NodeType.REQUIREMENT_FILE:
        return NeighborhoodRequest(node_type=node.type, node_identity=node.id)

    require_edges = graph.incoming(node.id, RelationshipType.REQUIRE)
    constraints = require_edges[0].constraints if require_edges else None
    return NeighborhoodRequest(
        node_type=node.type,
        node_identity=node.purl or node.id,
        constraints=constraints,
    )
