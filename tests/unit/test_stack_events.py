"""
Unit tests for stack events and EventDispatcher.

Tests subscription, emission, history, and the events a
TransactionStack emits for each transition.
"""

import pytest
from unittest.mock import Mock

from tps.events import EventDispatcher, StackEvent, StackEventType


class TestEventDispatcherBasics:
    """Tests for basic EventDispatcher functionality."""

    def test_creation(self):
        dispatcher = EventDispatcher(stack_id="doc-1")
        assert dispatcher.stack_id == "doc-1"
        assert dispatcher.handler_count == 0
        assert dispatcher.event_count == 0

    def test_subscribe_and_emit(self, dispatcher):
        handler = Mock()
        sub_id = dispatcher.subscribe(StackEventType.TRANSACTION_ADDED, handler)

        event = StackEvent(event_type=StackEventType.TRANSACTION_ADDED)
        dispatcher.emit(event)

        assert sub_id != ""
        handler.assert_called_once_with(event)

    def test_duplicate_subscription_ignored(self, dispatcher):
        handler = Mock()
        dispatcher.subscribe(StackEventType.TRANSACTION_ADDED, handler)

        assert dispatcher.subscribe(StackEventType.TRANSACTION_ADDED, handler) == ""
        assert dispatcher.handler_count == 1

    def test_type_filtering(self, dispatcher):
        handler = Mock()
        dispatcher.subscribe(StackEventType.TRANSACTION_UNDONE, handler)

        dispatcher.emit(StackEvent(event_type=StackEventType.TRANSACTION_ADDED))

        handler.assert_not_called()

    def test_wildcard(self, dispatcher):
        handler = Mock()
        dispatcher.subscribe_all(handler)

        dispatcher.emit(StackEvent(event_type=StackEventType.TRANSACTION_ADDED))
        dispatcher.emit(StackEvent(event_type=StackEventType.STACK_CLEARED))

        assert handler.call_count == 2

    def test_unsubscribe(self, dispatcher):
        handler = Mock()
        dispatcher.subscribe(StackEventType.TRANSACTION_ADDED, handler)
        dispatcher.subscribe_all(handler)

        assert dispatcher.unsubscribe(StackEventType.TRANSACTION_ADDED, handler) is True
        assert dispatcher.unsubscribe_all(handler) is True
        assert dispatcher.unsubscribe_all(handler) is False
        assert dispatcher.handler_count == 0

    def test_failing_handler_does_not_block_others(self, dispatcher):
        bad = Mock(side_effect=ValueError("boom"))
        good = Mock()
        dispatcher.subscribe(StackEventType.TRANSACTION_ADDED, bad)
        dispatcher.subscribe_all(good)

        dispatcher.emit(StackEvent(event_type=StackEventType.TRANSACTION_ADDED))

        good.assert_called_once()

    def test_pause_drops_events(self, dispatcher):
        handler = Mock()
        dispatcher.subscribe_all(handler)

        dispatcher.pause()
        dispatcher.emit(StackEvent())
        assert dispatcher.is_paused is True
        dispatcher.resume()
        dispatcher.emit(StackEvent())

        assert handler.call_count == 1
        assert dispatcher.event_count == 1

    def test_history_limit(self):
        dispatcher = EventDispatcher(max_history=3)
        for i in range(5):
            dispatcher.emit(StackEvent(cursor=i))

        history = dispatcher.get_history(limit=10)
        assert [e.cursor for e in history] == [2, 3, 4]

    def test_zero_history_keeps_nothing(self):
        """max_history=0 retains no events but still notifies handlers."""
        dispatcher = EventDispatcher(max_history=0)
        handler = Mock()
        dispatcher.subscribe_all(handler)

        for i in range(50):
            dispatcher.emit(StackEvent(cursor=i))

        assert dispatcher.event_count == 0
        assert dispatcher.get_history() == []
        assert handler.call_count == 50

    def test_get_history_non_positive_limit(self, dispatcher):
        for i in range(3):
            dispatcher.emit(StackEvent(cursor=i))

        assert dispatcher.get_history(limit=0) == []
        assert dispatcher.get_history(limit=-1) == []
        assert len(dispatcher.get_history(limit=2)) == 2

    def test_history_filter(self, dispatcher):
        dispatcher.emit(StackEvent(event_type=StackEventType.TRANSACTION_ADDED))
        dispatcher.emit(StackEvent(event_type=StackEventType.TRANSACTION_UNDONE))

        undone = dispatcher.get_history(event_type=StackEventType.TRANSACTION_UNDONE)

        assert len(undone) == 1
        dispatcher.clear_history()
        assert dispatcher.event_count == 0

    def test_stack_id_stamped(self, dispatcher):
        event = StackEvent()
        dispatcher.emit(event)
        assert event.stack_id == "test"

    def test_clear_handlers(self, dispatcher):
        dispatcher.subscribe(StackEventType.TRANSACTION_ADDED, Mock())
        dispatcher.subscribe_all(Mock())

        dispatcher.clear_handlers(StackEventType.TRANSACTION_ADDED)
        assert dispatcher.handler_count == 1
        dispatcher.clear_handlers()
        assert dispatcher.handler_count == 0


class TestStackEvent:
    """Tests for StackEvent serialization."""

    def test_to_dict(self):
        event = StackEvent(
            event_type=StackEventType.BRANCH_DISCARDED,
            stack_id="doc",
            cursor=1,
            size=2,
            discarded=3,
        )

        d = event.to_dict()

        assert d["event_type"] == "branch_discarded"
        assert d["cursor"] == 1
        assert d["size"] == 2
        assert d["discarded"] == 3
        assert d["error"] is None
        assert len(d["event_id"]) == 12


class TestStackEmission:
    """Events emitted by TransactionStack."""

    def _types(self, dispatcher):
        return [e.event_type for e in dispatcher.get_history(limit=100)]

    def test_add_emits_added(self, observed_stack, dispatcher, make_append):
        observed_stack.add(make_append("one"))

        (event,) = dispatcher.get_history()
        assert event.event_type == StackEventType.TRANSACTION_ADDED
        assert event.cursor == 0
        assert event.size == 1
        assert event.description == "Append 'one'"

    def test_undo_and_redo(self, observed_stack, dispatcher, make_append):
        observed_stack.add(make_append("one"))
        observed_stack.undo()
        observed_stack.redo()

        assert self._types(dispatcher) == [
            StackEventType.TRANSACTION_ADDED,
            StackEventType.TRANSACTION_UNDONE,
            StackEventType.TRANSACTION_DONE,
        ]

    def test_noops_emit_nothing(self, observed_stack, dispatcher):
        observed_stack.undo()
        observed_stack.redo()

        assert dispatcher.event_count == 0

    def test_branching(self, observed_stack, dispatcher, make_append):
        for text in ("1", "2", "3"):
            observed_stack.add(make_append(text))
        observed_stack.undo()
        observed_stack.undo()
        dispatcher.clear_history()

        observed_stack.add(make_append("4"))

        discarded, added = dispatcher.get_history()
        assert discarded.event_type == StackEventType.BRANCH_DISCARDED
        assert discarded.discarded == 2
        assert added.event_type == StackEventType.TRANSACTION_ADDED
        assert added.size == 2

    def test_clear(self, observed_stack, dispatcher, make_append):
        observed_stack.add(make_append("one"))
        observed_stack.add(make_append("two"))

        observed_stack.clear()

        event = dispatcher.get_history(limit=1)[0]
        assert event.event_type == StackEventType.STACK_CLEARED
        assert event.discarded == 2
        assert event.cursor == -1

    def test_failure(self, observed_stack, dispatcher, make_failing):
        with pytest.raises(RuntimeError):
            observed_stack.add(make_failing("apply"))

        (event,) = dispatcher.get_history()
        assert event.event_type == StackEventType.TRANSACTION_FAILED
        assert event.error == "apply exploded"
        assert event.size == 0

    def test_listener_sees_settled_stack(self, observed_stack, dispatcher, make_append):
        seen = []

        def listener(event):
            seen.append((observed_stack.is_applying, observed_stack.cursor))

        dispatcher.subscribe(StackEventType.TRANSACTION_ADDED, listener)
        observed_stack.add(make_append("one"))

        assert seen == [(False, 0)]

    def test_failing_listener_does_not_break_stack(self, observed_stack, dispatcher, make_append):
        dispatcher.subscribe_all(Mock(side_effect=RuntimeError("listener")))

        observed_stack.add(make_append("one"))

        assert observed_stack.cursor == 0

    def test_events_disabled(self, make_stack, dispatcher, make_append):
        stack = make_stack(dispatcher=dispatcher, emit_events=False)

        stack.add(make_append("one"))

        assert dispatcher.event_count == 0
