"""Unit tests for PrototypeCreationTracker."""

import threading

import pytest

from lite_ioc.application.prototype_tracker import PrototypeCreationTracker
from lite_ioc.domain import CircularPrototypeDependency


class TestPushAndPop:
    """Test cases for entering and leaving prototype construction."""

    def test_push_returns_chain(self):
        """Test that each push reports the prototypes under construction."""
        tracker = PrototypeCreationTracker()

        assert tracker.push("a") == ["a"]
        assert tracker.push("b") == ["a", "b"]
        assert tracker.is_in_creation("a") and tracker.is_in_creation("b")

    def test_returned_chain_is_a_copy(self):
        """Test that mutating the returned chain does not affect tracking."""
        tracker = PrototypeCreationTracker()

        tracker.push("a").append("ghost")

        assert not tracker.is_in_creation("ghost")

    def test_self_cycle(self):
        """Test that entering a name twice raises with the cycle."""
        tracker = PrototypeCreationTracker()
        tracker.push("p")

        with pytest.raises(CircularPrototypeDependency) as exc_info:
            tracker.push("p")

        assert exc_info.value.dependency_chain == ["p", "p"]

    def test_cycle_chain_starts_at_first_occurrence(self):
        """Test that the chain only contains the names taking part in the cycle."""
        tracker = PrototypeCreationTracker()
        for name in ("root", "p", "q"):
            tracker.push(name)

        with pytest.raises(CircularPrototypeDependency) as exc_info:
            tracker.push("p")

        assert exc_info.value.dependency_chain == ["p", "q", "p"]

    def test_pop_drops_names_entered_later(self):
        """Test that leaving a name also leaves everything nested inside it."""
        tracker = PrototypeCreationTracker()
        for name in ("a", "b", "c"):
            tracker.push(name)

        tracker.pop("b")

        assert tracker.is_in_creation("a")
        assert not tracker.is_in_creation("b")
        assert not tracker.is_in_creation("c")

    def test_pop_unknown_name(self):
        """Test that leaving a name that was never entered is harmless."""
        tracker = PrototypeCreationTracker()
        tracker.push("a")

        tracker.pop("missing")

        assert tracker.is_in_creation("a")

    def test_clear(self):
        """Test clearing the current thread's chain."""
        tracker = PrototypeCreationTracker()
        tracker.push("a")
        tracker.push("b")

        tracker.clear()

        assert not tracker.is_in_creation("a")
        assert not tracker.is_in_creation("b")


class TestCreatingBlock:
    """Test cases for the creating() context manager."""

    def test_yields_chain_and_leaves_on_exit(self):
        """Test that the block sees the chain and the name is released afterwards."""
        tracker = PrototypeCreationTracker()

        with tracker.creating("outer") as outer_chain:
            with tracker.creating("inner") as inner_chain:
                assert inner_chain == ["outer", "inner"]
            assert outer_chain == ["outer"]
            assert not tracker.is_in_creation("inner")

        assert not tracker.is_in_creation("outer")

    def test_released_when_block_raises(self):
        """Test that a failing construction does not leave its name behind."""
        tracker = PrototypeCreationTracker()

        with pytest.raises(ValueError):
            with tracker.creating("p"):
                raise ValueError("boom")

        assert not tracker.is_in_creation("p")
        assert tracker.push("p") == ["p"]

    def test_cycle_inside_block_keeps_outer_entry(self):
        """Test that a detected cycle leaves the enclosing construction tracked."""
        tracker = PrototypeCreationTracker()

        with tracker.creating("p"):
            with pytest.raises(CircularPrototypeDependency):
                with tracker.creating("p"):
                    pass
            assert tracker.is_in_creation("p")

        assert not tracker.is_in_creation("p")

    def test_threads_are_isolated(self):
        """Test that each thread tracks its own creations."""
        tracker = PrototypeCreationTracker()
        seen_in_other_thread = []

        def worker():
            seen_in_other_thread.append(tracker.is_in_creation("shared"))
            with tracker.creating("shared") as chain:
                seen_in_other_thread.append(chain)

        with tracker.creating("shared"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()
            assert tracker.is_in_creation("shared")

        assert seen_in_other_thread == [False, ["shared"]]
