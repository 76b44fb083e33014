"""
Core type definitions for depex.

Nodes and edges arrive from the Depex backend as loosely-typed JSON. They are
validated here, once, so that everything past the fetcher boundary works with
typed models. Identity fields stay Optional because the backend occasionally
sends entries with null ids; the merge step drops those.
"""

import logging
from enum import StrEnum
from typing import Any, Dict, Iterator, List, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class NodeType(StrEnum):
    """Kinds of entities in the dependency graph."""
    PYPI_PACKAGE = "PyPIPackage"
    NPM_PACKAGE = "NPMPackage"
    NUGET_PACKAGE = "NuGetPackage"
    CARGO_PACKAGE = "CargoPackage"
    RUBYGEMS_PACKAGE = "RubyGemsPackage"
    MAVEN_PACKAGE = "MavenPackage"
    VERSION = "Version"
    REQUIREMENT_FILE = "RequirementFile"
    UNKNOWN = "Unknown"

    @property
    def is_package(self) -> bool:
        return self.value.endswith("Package")

    @property
    def ecosystem(self) -> str | None:
        """Display label of the package ecosystem, None for non-package nodes."""
        return _ECOSYSTEMS.get(self)


_ECOSYSTEMS: Dict[NodeType, str] = {
    NodeType.PYPI_PACKAGE: "PyPI",
    NodeType.NPM_PACKAGE: "npm",
    NodeType.NUGET_PACKAGE: "NuGet",
    NodeType.CARGO_PACKAGE: "Cargo",
    NodeType.RUBYGEMS_PACKAGE: "RubyGems",
    NodeType.MAVEN_PACKAGE: "Maven",
}


class RelationshipType(StrEnum):
    """Relationship kinds emitted by the backend."""
    REQUIRE = "REQUIRE"
    HAVE = "HAVE"
    DEPENDS_ON = "DEPENDS_ON"


class MergeDiagnostic(BaseModel):
    """
    A fragment entry that was dropped instead of merged.

    kind is "node" or "edge"; entry holds whatever the backend sent.
    """
    kind: str
    reason: str
    entry: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class GraphNode(BaseModel):
    """
    One entity of the dependency graph: a package, a version or a requirement file.
    """
    id: str | None = None
    label: str = ""
    type: NodeType = NodeType.UNKNOWN
    props: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("label", mode="before")
    @classmethod
    def _none_label(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> NodeType:
        if isinstance(value, NodeType):
            return value
        try:
            return NodeType(value)
        except ValueError:
            logger.debug(f"Unrecognized node type {value!r}, treating as Unknown")
            return NodeType.UNKNOWN

    @field_validator("props", mode="before")
    @classmethod
    def _none_props(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def purl(self) -> str | None:
        return self.props.get("purl")

    @classmethod
    def seed(cls, node_id: str, label: str, node_type: NodeType | str) -> "GraphNode":
        """
        Build the node a session starts from.

        Requirement files are identified by a backend id, not a package URL,
        so only the other kinds carry a purl prop.
        """
        node = cls(id=node_id, label=label, type=node_type)
        props: Dict[str, Any] = {"name": label}
        if node.type != NodeType.REQUIREMENT_FILE:
            props["purl"] = node_id
        return node.model_copy(update={"props": props})


class GraphEdge(BaseModel):
    """
    Directed relationship between two nodes (e.g. REQUIRE, HAVE).
    """
    id: str | None = None
    source: str | None = None
    target: str | None = None
    type: str | None = None
    props: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("props", mode="before")
    @classmethod
    def _none_props(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def constraints(self) -> str | None:
        return self.props.get("constraints")

    def touches(self, node_ids: set) -> bool:
        return self.source in node_ids or self.target in node_ids


class GraphFragment(BaseModel):
    """
    Neighborhood of one node as returned by a fetcher.

    May repeat nodes and edges already in the graph; merging makes that safe.
    """
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    total_neighbors: int | None = Field(default=None, alias="totalNeighbors")
    truncated: bool = False
    diagnostics: List[MergeDiagnostic] = Field(default_factory=list, exclude=True)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GraphFragment":
        """
        Validate a raw backend payload entry by entry.

        Entries that are not objects, or whose fields have the wrong shape,
        are dropped and reported in `diagnostics` so one bad entry does not
        sink the rest of the fragment.

        Raises:
            TypeError: If the payload itself is not a mapping of lists.
        """
        if not isinstance(payload, Mapping):
            raise TypeError(f"Fragment payload must be an object, got {type(payload).__name__}")

        raw_nodes = payload.get("nodes") or []
        raw_edges = payload.get("edges") or []
        if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
            raise TypeError("Fragment 'nodes' and 'edges' must be lists")

        diagnostics: List[MergeDiagnostic] = []
        nodes = _validate_entries(GraphNode, "node", raw_nodes, diagnostics)
        edges = _validate_entries(GraphEdge, "edge", raw_edges, diagnostics)

        return cls(
            nodes=nodes,
            edges=edges,
            total_neighbors=payload.get("totalNeighbors", payload.get("total_neighbors")),
            truncated=bool(payload.get("truncated", False)),
            diagnostics=diagnostics,
        )


def _validate_entries(model: type, kind: str, entries: List[Any], diagnostics: List[MergeDiagnostic]) -> list:
    valid = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            diagnostics.append(MergeDiagnostic(kind=kind, reason="entry is not an object", entry={"value": repr(entry)}))
            logger.warning(f"Skipping {kind} that is not an object: {entry!r}")
            continue
        try:
            valid.append(model.model_validate(entry))
        except ValidationError as e:
            diagnostics.append(MergeDiagnostic(kind=kind, reason=f"invalid fields: {e.error_count()} error(s)", entry=dict(entry)))
            logger.warning(f"Skipping malformed {kind}: {entry!r}")
    return valid


class Graph(BaseModel):
    """
    Immutable snapshot of the visible graph.

    Nodes and edges are keyed by id, in insertion order. Every edge's source
    and target resolve to a node of the same snapshot.
    """
    nodes: Dict[str, GraphNode] = Field(default_factory=dict)
    edges: Dict[str, GraphEdge] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_node(cls, seed: GraphNode) -> "Graph":
        if seed.id is None:
            raise ValueError("Seed node must have an id")
        return cls(nodes={seed.id: seed}, edges={})

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    def get_node(self, node_id: str) -> GraphNode | None:
        return self.nodes.get(node_id)

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self.edges

    def iter_nodes(self) -> Iterator[GraphNode]:
        return iter(self.nodes.values())

    def iter_edges(self) -> Iterator[GraphEdge]:
        return iter(self.edges.values())

    def incoming(self, node_id: str, edge_type: str | None = None) -> List[GraphEdge]:
        """Edges targeting node_id, optionally of one relationship type."""
        return [
            e for e in self.edges.values()
            if e.target == node_id and (edge_type is None or e.type == edge_type)
        ]

    def outgoing(self, node_id: str, edge_type: str | None = None) -> List[GraphEdge]:
        """Edges leaving node_id, optionally of one relationship type."""
        return [
            e for e in self.edges.values()
            if e.source == node_id and (edge_type is None or e.type == edge_type)
        ]

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.model_dump(mode="json") for node in self.iter_nodes()],
            "edges": [edge.model_dump(mode="json") for edge in self.iter_edges()],
        }
