"""
Neighborhood fetchers.

- NeighborhoodFetcher: the protocol the engine depends on
- DepexApiFetcher: expands nodes against the Depex REST API
- StaticFetcher: serves fragments from a mapping or JSON fixture
"""

from .base import NeighborhoodFetcher, NeighborhoodRequest, build_request
from .http import DepexApiFetcher
from .static import StaticFetcher

__all__ = [
    "DepexApiFetcher",
    "NeighborhoodFetcher",
    "NeighborhoodRequest",
    "StaticFetcher",
    "build_request",
]
