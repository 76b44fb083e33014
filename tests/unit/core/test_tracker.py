"""Unit tests for the ExpansionTracker."""

from depex.core.tracker import ExpansionTracker


class TestExpansionTracker:
    def test_record_appends(self):
        tracker = ExpansionTracker()
        tracker.record_expansion("a", ["b"])
        tracker.record_expansion("a", ["c", "b"])

        assert tracker.children("a") == ["b", "c"]

    def test_empty_expansion_is_not_recorded(self):
        tracker = ExpansionTracker()
        tracker.record_expansion("a", [])

        assert tracker.records == {}

    def test_collect_descendants_is_transitive(self):
        tracker = ExpansionTracker()
        tracker.record_expansion("a", ["b", "c"])
        tracker.record_expansion("b", ["d"])
        tracker.record_expansion("d", ["e"])

        assert tracker.collect_descendants("a") == {"b", "c", "d", "e"}
        assert tracker.collect_descendants("b") == {"d", "e"}
        assert tracker.collect_descendants("e") == set()

    def test_cycles_terminate_and_exclude_start(self):
        tracker = ExpansionTracker()
        tracker.record_expansion("a", ["b"])
        tracker.record_expansion("b", ["c"])
        tracker.record_expansion("c", ["a"])

        assert tracker.collect_descendants("a") == {"b", "c"}

    def test_deep_chain_does_not_recurse(self):
        tracker = ExpansionTracker()
        for i in range(5000):
            tracker.record_expansion(f"n{i}", [f"n{i + 1}"])

        assert len(tracker.collect_descendants("n0")) == 5000

    def test_most_recent_expansion_owns_node(self):
        tracker = ExpansionTracker()
        tracker.record_expansion("a", ["x"])
        tracker.record_expansion("b", ["x"])

        assert tracker.children("a") == []
        assert tracker.collect_descendants("b") == {"x"}

    def test_forget(self):
        tracker = ExpansionTracker()
        tracker.record_expansion("a", ["b"])
        tracker.record_expansion("b", ["c"])

        tracker.forget("b")

        assert tracker.records == {"a": ["b"]}
        assert tracker.collect_descendants("a") == {"b"}
