"""
Test configuration and fixtures.

Provides a small host "document" and transactions that edit it, so stack
behavior can be checked against observable application state.
"""

import pytest
from typing import List, Optional, Tuple

from tps.bootstrap.config import StackConfig, reset_config
from tps.events import EventDispatcher
from tps.transactions import Transaction, TransactionStack


class Document:
    """Host application state edited by the test transactions."""

    def __init__(self):
        self.lines: List[str] = []


class AppendLine(Transaction):
    """Appends a line on apply, removes it on reverse."""

    def __init__(self, document: Document, text: str):
        self.document = document
        self.text = text
        self.apply_calls = 0
        self.reverse_calls = 0

    def apply(self) -> None:
        self.document.lines.append(self.text)
        self.apply_calls += 1

    def reverse(self) -> None:
        removed = self.document.lines.pop()
        assert removed == self.text
        self.reverse_calls += 1

    def describe(self) -> str:
        return f"Append {self.text!r}"


class FlagProbe(Transaction):
    """Records the stack's is_applying/is_reversing flags seen inside callbacks."""

    def __init__(self, stack: TransactionStack):
        self.stack = stack
        self.seen: List[Tuple[str, bool, bool]] = []

    def apply(self) -> None:
        self.seen.append(("apply", self.stack.is_applying, self.stack.is_reversing))

    def reverse(self) -> None:
        self.seen.append(("reverse", self.stack.is_applying, self.stack.is_reversing))


class FailingTransaction(Transaction):
    """Raises RuntimeError from apply() or reverse()."""

    def __init__(self, fail_on: str = "apply"):
        self.fail_on = fail_on
        self.applied = False

    def apply(self) -> None:
        if self.fail_on == "apply":
            raise RuntimeError("apply exploded")
        self.applied = True

    def reverse(self) -> None:
        if self.fail_on == "reverse":
            raise RuntimeError("reverse exploded")
        self.applied = False


@pytest.fixture
def document() -> Document:
    return Document()


@pytest.fixture
def make_append(document):
    """Factory for AppendLine transactions on the shared document."""
    def _make(text: str) -> AppendLine:
        return AppendLine(document, text)
    return _make


@pytest.fixture
def make_probe():
    def _make(stack: TransactionStack) -> FlagProbe:
        return FlagProbe(stack)
    return _make


@pytest.fixture
def make_failing():
    def _make(fail_on: str = "apply") -> FailingTransaction:
        return FailingTransaction(fail_on)
    return _make


@pytest.fixture
def stack() -> TransactionStack:
    """Plain stack with no dispatcher."""
    return TransactionStack()


@pytest.fixture
def dispatcher() -> EventDispatcher:
    return EventDispatcher(stack_id="test")


@pytest.fixture
def observed_stack(dispatcher) -> TransactionStack:
    """Stack wired to the dispatcher fixture."""
    return TransactionStack(dispatcher=dispatcher)


@pytest.fixture
def make_stack():
    """Factory for stacks with custom StackConfig switches."""
    def _make(dispatcher: Optional[EventDispatcher] = None, **switches) -> TransactionStack:
        return TransactionStack(dispatcher=dispatcher, config=StackConfig(**switches))
    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Remove TPS_* variables and the cached config."""
    import os

    for key in list(os.environ):
        if key.startswith("TPS_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()
