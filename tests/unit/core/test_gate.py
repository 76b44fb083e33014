"""Unit tests for the FetchGate."""

from depex.core.gate import FetchGate


class TestFetchGate:
    def test_fresh_node_can_expand(self):
        assert FetchGate().can_expand("a")

    def test_loading_blocks_expansion(self):
        gate = FetchGate()
        gate.begin_loading("a")

        assert not gate.can_expand("a")
        assert gate.can_expand("b")
        assert gate.loading == {"a": True}

    def test_fetched_blocks_expansion_until_unfetched(self):
        gate = FetchGate()
        gate.mark_fetched("a")
        assert not gate.can_expand("a")

        gate.mark_unfetched("a")
        assert gate.can_expand("a")

    def test_transitions_are_idempotent(self):
        gate = FetchGate()
        gate.begin_loading("a")
        gate.begin_loading("a")
        gate.end_loading("a")
        assert gate.can_expand("a")

        gate.end_loading("a")
        gate.mark_unfetched("a")
        assert gate.fetched == {}
        assert gate.loading == {}

    def test_clear_and_reset(self):
        gate = FetchGate()
        gate.mark_fetched("a")
        gate.begin_loading("b")

        gate.clear("a")
        assert gate.fetched == {}
        assert gate.is_loading("b")

        gate.reset()
        assert gate.loading == {}
