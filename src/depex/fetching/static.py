"""
Static fetcher - serves neighborhoods from an in-memory mapping or a JSON file.

Used for offline exploration (`depex explore --fixture`) and in tests. The
fixture file maps a node identity (purl or requirement-file id) to a
fragment payload:

    {
      "pkg:pypi/requests": {"nodes": [...], "edges": [...]},
      ...
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from ..core.exceptions import MalformedResponseError, NeighborhoodNotFoundError
from ..core.types import GraphFragment
from .base import NeighborhoodRequest

logger = logging.getLogger(__name__)


class StaticFetcher:
    """NeighborhoodFetcher answering from a fixed identity -> payload mapping."""

    def __init__(self, fragments: Mapping[str, Mapping[str, Any]]):
        self._fragments: Dict[str, Mapping[str, Any]] = dict(fragments)
        self.requests: List[NeighborhoodRequest] = []

    @classmethod
    def from_file(cls, path: Path) -> "StaticFetcher":
        data = json.loads(Path(path).read_text())
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Fixture {path} must contain an object")
        return cls(data)

    async def fetch(self, request: NeighborhoodRequest) -> GraphFragment:
        self.requests.append(request)
        payload = self._fragments.get(request.node_identity)
        if payload is None:
            raise NeighborhoodNotFoundError("No neighborhood in fixture", node_id=request.node_identity)
        try:
            return GraphFragment.from_payload(payload)
        except TypeError as err:
            raise MalformedResponseError(str(err), node_id=request.node_identity) from err
