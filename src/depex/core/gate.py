"""
Fetch Gate - per-node bookkeeping of completed and in-flight expansions.

A node may be expanded only when it is neither fetched nor loading. All
transitions are idempotent.
"""

import logging
from typing import Dict, Set

logger = logging.getLogger(__name__)


class FetchGate:
    """Tracks which nodes are fetched and which have a fetch in flight."""

    def __init__(self):
        self._fetched: Set[str] = set()
        self._loading: Set[str] = set()

    def can_expand(self, node_id: str) -> bool:
        return node_id not in self._fetched and node_id not in self._loading

    def begin_loading(self, node_id: str) -> None:
        logger.debug(f"{node_id}: loading")
        self._loading.add(node_id)

    def end_loading(self, node_id: str) -> None:
        self._loading.discard(node_id)

    def mark_fetched(self, node_id: str) -> None:
        logger.debug(f"{node_id}: fetched")
        self._fetched.add(node_id)

    def mark_unfetched(self, node_id: str) -> None:
        self._fetched.discard(node_id)

    def is_fetched(self, node_id: str) -> bool:
        return node_id in self._fetched

    def is_loading(self, node_id: str) -> bool:
        return node_id in self._loading

    def clear(self, node_id: str) -> None:
        """Forget everything about node_id."""
        self._fetched.discard(node_id)
        self._loading.discard(node_id)

    def reset(self) -> None:
        self._fetched.clear()
        self._loading.clear()

    @property
    def fetched(self) -> Dict[str, bool]:
        """Snapshot of the nodes currently marked fetched."""
        return {node_id: True for node_id in self._fetched}

    @property
    def loading(self) -> Dict[str, bool]:
        """Snapshot of the nodes currently loading."""
        return {node_id: True for node_id in self._loading}
