"""Tests for Computed values."""

import logging

import pytest

from fast_reactor import (
    Computed,
    EvaluationPolicy,
    InvalidOperationError,
    State,
    computed,
)


def _counting(fn):
    """Wrap fn so each call increments counter["calls"]."""
    counter = {"calls": 0}

    def wrapped():
        counter["calls"] += 1
        return fn()

    return wrapped, counter


class TestComputed:
    def test_initial_value(self):
        c = Computed(lambda: 42)
        assert c.peek() == 42
        assert c.value == 42

    def test_evaluates_once_on_construction(self):
        fn, counter = _counting(lambda: 1)
        Computed(fn)
        assert counter["calls"] == 1

    def test_caches_until_dirty(self):
        fn, counter = _counting(lambda: 42)
        c = Computed(fn)
        c.peek()
        c.get()
        c.read()
        assert counter["calls"] == 1

    def test_invalidation(self):
        s = State(1)
        c = Computed(lambda: s.get() * 2)
        assert c.peek() == 2
        s.set(5)
        assert c.dirty
        assert c.peek() == 10
        assert not c.dirty

    def test_lazy_under_many_mutations(self):
        s = State(0)
        fn, counter = _counting(lambda: s.get() * 2)
        c = Computed(fn)
        for value in range(1, 6):
            s.set(value)
        assert counter["calls"] == 1
        assert c.peek() == 10
        assert counter["calls"] == 2

    def test_chained_computed(self):
        s = State(1)
        intermediate = Computed(lambda: s.get() * 2)
        final = Computed(lambda: intermediate.get() + 5)
        assert final.peek() == 7
        s.set(3)
        assert final.peek() == 11

    def test_dynamic_dependencies(self):
        toggle = State(True)
        a = State(1)
        b = State(10)
        c = Computed(lambda: a.get() if toggle.get() else b.get())
        assert c.peek() == 1
        a.set(5)
        assert c.peek() == 5
        toggle.set(False)
        assert c.peek() == 10
        a.set(20)
        assert c.peek() == 10  # no longer reads a
        b.set(30)
        assert c.peek() == 30

    def test_untaken_branch_does_not_invalidate(self):
        toggle = State(False)
        a = State(1)
        b = State(2)
        c = Computed(lambda: a.get() if toggle.get() else b.get())
        a.set(99)
        assert not c.dirty

    def test_set_raises(self):
        c = Computed(lambda: 1)
        with pytest.raises(InvalidOperationError):
            c.set(2)

    def test_value_assignment_raises(self):
        c = Computed(lambda: 1)
        with pytest.raises(InvalidOperationError):
            c.value = 2

    def test_recompute_manually(self):
        fn, counter = _counting(lambda: 1)
        c = Computed(fn)
        c.recompute()
        assert counter["calls"] == 2

    def test_failed_recompute_stays_dirty_and_retries(self):
        s = State(1)

        def fn():
            if s.get() < 0:
                raise ValueError("negative")
            return s.get()

        c = Computed(fn)
        s.set(-1)
        with pytest.raises(ValueError, match="negative"):
            c.peek()
        assert c.dirty
        s.set(3)
        assert c.peek() == 3

    def test_failed_direct_recompute_leaves_value_dirty(self):
        s = State(1)
        broken = State(False)

        def fn():
            if broken.peek():
                raise ValueError("broken")
            return s.get()

        c = Computed(fn)
        broken.set(True)
        with pytest.raises(ValueError, match="broken"):
            c.recompute()
        assert c.dirty
        broken.set(False)
        assert c.peek() == 1
        s.set(5)
        assert c.peek() == 5

    def test_failed_recompute_logs_debug(self, caplog):
        rows = State([])
        c = Computed(lambda: len(rows.get()))
        rows.set(None)
        with caplog.at_level(logging.DEBUG, logger="fast_reactor.computed"):
            with pytest.raises(TypeError):
                c.peek()
        assert "Recompute of" in caplog.text

    def test_dispose(self):
        s = State(5)
        fn, counter = _counting(lambda: s.get() * 2)
        c = Computed(fn)
        log = []
        c.on_change(log.append)
        c.dispose()
        s.set(10)
        assert log == []
        assert counter["calls"] == 1
        # get() re-evaluates from scratch and re-attaches
        assert c.get() == 20
        s.set(11)
        assert c.dirty

    def test_dispose_detaches_downstream(self):
        s = State(1)
        c = Computed(lambda: s.get())
        downstream = Computed(lambda: c.get() + 1)
        c.dispose()
        s.set(2)
        assert not downstream.dirty

    def test_repr(self):
        def answer():
            return 42

        c = Computed(answer)
        assert repr(c) == "Computed(answer, cached=42)"


class TestChangeListeners:
    def test_notifies_when_value_changes(self):
        s = State(1)
        c = Computed(lambda: s.get() * 2)
        log = []
        c.on_change(log.append)
        s.set(5)
        assert log == [10]

    def test_no_notification_when_value_same(self):
        s = State("test")
        c = Computed(lambda: s.get().upper())
        log = []
        c.on_change(log.append)
        s.set("TEST")
        assert log == []

    def test_new_container_counts_as_change(self):
        s = State(1)
        c = Computed(lambda: [s.get() // 10])
        log = []
        c.on_change(log.append)
        s.set(2)  # still [0], but a new list
        assert log == [[0]]

    def test_listener_makes_eager(self):
        s = State(1)
        fn, counter = _counting(lambda: s.get() * 2)
        c = Computed(fn)
        assert c.policy is EvaluationPolicy.LAZY
        unsubscribe = c.on_change(lambda v: None)
        assert c.policy is EvaluationPolicy.EAGER
        s.set(2)
        s.set(3)
        assert counter["calls"] == 3
        unsubscribe()
        assert c.policy is EvaluationPolicy.LAZY
        s.set(4)
        assert counter["calls"] == 3


class TestForceEager:
    def test_lazy_by_default(self):
        s = State(1)
        fn, counter = _counting(lambda: s.get() * 2)
        c = Computed(fn)
        s.set(5)
        assert counter["calls"] == 1
        c.recompute()
        assert counter["calls"] == 2

    def test_recomputes_immediately(self):
        s = State(1)
        fn, counter = _counting(lambda: s.get() * 2)
        c = Computed(fn, force_eager=True)
        assert c.policy is EvaluationPolicy.EAGER
        s.set(5)
        assert counter["calls"] == 2
        assert not c.dirty

    def test_property_with_listener(self):
        s = State(1)
        c = Computed(lambda: s.get() * 2)
        c.force_eager = True
        log = []
        c.on_change(log.append)
        assert c.peek() == 2
        s.set(5)
        assert log == [10]

    def test_enabling_while_dirty_recomputes_now(self):
        s = State(1)
        fn, counter = _counting(lambda: s.get() * 2)
        c = Computed(fn)
        s.set(2)
        assert c.dirty
        c.set_force_eager(True)
        assert not c.dirty
        assert counter["calls"] == 2

    def test_disabling_returns_to_lazy(self):
        s = State(1)
        fn, counter = _counting(lambda: s.get())
        c = Computed(fn, force_eager=True)
        c.set_force_eager(False)
        assert c.policy is EvaluationPolicy.LAZY
        s.set(2)
        assert counter["calls"] == 1


class TestDerived:
    def test_map(self):
        s = State(2)
        doubled = Computed(lambda: s.get() * 2)
        quadrupled = doubled.map(lambda x: x * 2)
        assert quadrupled.peek() == 8
        s.set(3)
        assert quadrupled.peek() == 12

    def test_filter(self):
        s = State(4)
        c = Computed(lambda: s.get())
        is_big = c.filter(lambda x: x > 3)
        assert is_big.peek() is True
        s.set(1)
        assert is_big.peek() is False

    def test_sequence_helpers(self):
        items = State([1, 2, 3, 4])
        c = Computed(lambda: items.get())
        assert c.map_items(lambda x: x * 10).peek() == [10, 20, 30, 40]
        assert c.filter_items(lambda x: x % 2 == 0).peek() == [2, 4]
        assert c.every(lambda x: x > 0).peek() is True
        assert c.some(lambda x: x > 3).peek() is True

    def test_sequence_helpers_follow_changes(self):
        items = State([1, 2])
        c = Computed(lambda: items.get())
        evens = c.filter_items(lambda x: x % 2 == 0)
        any_big = c.some(lambda x: x > 5)
        items.set([6, 7, 8])
        assert evens.peek() == [6, 8]
        assert any_big.peek() is True

    def test_sequence_helpers_accept_tuples(self):
        c = Computed(lambda: (1, 2, 3))
        assert c.map_items(str).peek() == ["1", "2", "3"]

    @pytest.mark.parametrize("helper", ["map_items", "filter_items", "every", "some"])
    def test_sequence_helpers_reject_non_sequences(self, helper):
        """Only sequence-valued computeds accept these helpers.

        An earlier guard raised for lists and accepted everything else; the
        check is now the documented one: raise when the value is NOT a list or tuple.
        """
        c = Computed(lambda: 5)
        with pytest.raises(InvalidOperationError):
            getattr(c, helper)(lambda x: x)

    def test_strings_are_not_sequences_here(self):
        c = Computed(lambda: "abc")
        with pytest.raises(InvalidOperationError):
            c.every(lambda ch: ch.isalpha())


class TestComputedDecorator:
    def test_decorator_factory(self):
        s = State(7)

        @computed
        def doubled():
            return s.get() * 2

        assert doubled.get() == 14
        s.set(3)
        assert doubled.get() == 6
