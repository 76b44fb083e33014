"""
Expansion Tracker - which nodes each expansion introduced.

This is the bookkeeping behind cascading collapse. Each node is owned by the
expansion that most recently introduced it; recording an id under a new
parent removes it from its previous parent's list.
"""

from typing import Dict, Iterable, List, Set


class ExpansionTracker:
    """Maps an expanded node id to the ordered ids its expansion added."""

    def __init__(self):
        self._records: Dict[str, List[str]] = {}
        self._owner: Dict[str, str] = {}

    def record_expansion(self, parent_id: str, added_ids: Iterable[str]) -> None:
        added = list(added_ids)
        if not added:
            return

        for child_id in added:
            previous = self._owner.get(child_id)
            if previous is not None and previous != parent_id and previous in self._records:
                remaining = [c for c in self._records[previous] if c != child_id]
                if remaining:
                    self._records[previous] = remaining
                else:
                    del self._records[previous]
            self._owner[child_id] = parent_id

        existing = self._records.get(parent_id, [])
        self._records[parent_id] = existing + [c for c in added if c not in existing]

    def children(self, node_id: str) -> List[str]:
        return list(self._records.get(node_id, []))

    def collect_descendants(self, node_id: str) -> Set[str]:
        """
        Every id reachable through expansion records from node_id.

        Iterative with a visited set: each id is visited once, and cycles in
        the records cannot loop. node_id itself is never part of the result.
        """
        visited: Set[str] = {node_id}
        stack = list(self._records.get(node_id, []))

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            stack.extend(self._records.get(current, []))

        visited.discard(node_id)
        return visited

    def forget(self, node_id: str) -> None:
        """Drop the record of node_id's expansion."""
        for child_id in self._records.pop(node_id, []):
            if self._owner.get(child_id) == node_id:
                del self._owner[child_id]

    def reset(self) -> None:
        self._records.clear()
        self._owner.clear()

    @property
    def records(self) -> Dict[str, List[str]]:
        return {parent: list(children) for parent, children in self._records.items()}
