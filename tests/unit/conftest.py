"""Shared fixtures for unit tests."""

import asyncio
from typing import Any, Dict, List

import pytest

from depex.core.types import GraphFragment, GraphNode, NodeType
from depex.fetching.base import NeighborhoodRequest


class FakeFetcher:
    """
    In-memory NeighborhoodFetcher.

    fragments maps node identity -> payload; errors maps identity -> exception
    to raise; holds maps identity -> asyncio.Event the fetch waits on.
    Unknown identities answer with an empty fragment.
    """

    def __init__(self):
        self.fragments: Dict[str, Dict[str, Any]] = {}
        self.errors: Dict[str, Exception] = {}
        self.holds: Dict[str, asyncio.Event] = {}
        self.calls: List[NeighborhoodRequest] = []

    async def fetch(self, request: NeighborhoodRequest) -> GraphFragment:
        self.calls.append(request)
        hold = self.holds.get(request.node_identity)
        if hold is not None:
            await hold.wait()
        if request.node_identity in self.errors:
            raise self.errors[request.node_identity]
        return GraphFragment.from_payload(self.fragments.get(request.node_identity, {"nodes": [], "edges": []}))


def _pkg(node_id: str, label: str | None = None, **props) -> Dict[str, Any]:
    return {"id": node_id, "label": label or node_id, "type": "PyPIPackage", "props": {"purl": node_id, **props}}


def _link(edge_id: str, source: str, target: str, edge_type: str = "DEPENDS_ON", **props) -> Dict[str, Any]:
    return {"id": edge_id, "source": source, "target": target, "type": edge_type, "props": props}


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def seed():
    return GraphNode.seed("pkg:foo", "foo", NodeType.PYPI_PACKAGE)


@pytest.fixture
def chain(fetcher):
    """A -> B -> C -> D, each link served by expanding its source."""
    fetcher.fragments["A"] = {"nodes": [_pkg("B")], "edges": [_link("ab", "A", "B")]}
    fetcher.fragments["B"] = {"nodes": [_pkg("C")], "edges": [_link("bc", "B", "C")]}
    fetcher.fragments["C"] = {"nodes": [_pkg("D")], "edges": [_link("cd", "C", "D")]}
    return fetcher
