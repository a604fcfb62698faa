"""
transactions/schemas.py - Transaction capability and stack summary

A Transaction is an opaque unit of reversible work supplied by the host
application. The stack never looks inside one; it only calls apply(),
reverse() and describe().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional
import uuid

from pydantic import BaseModel, Field


class Transaction(ABC):
    """
    Base class for reversible work.

    Subclasses implement apply() and reverse(); reverse() must restore the
    observable state that existed before the matching apply().
    """

    @abstractmethod
    def apply(self) -> None:
        """Perform the forward effect."""

    @abstractmethod
    def reverse(self) -> None:
        """Undo the most recent apply()."""

    def describe(self) -> str:
        """Human-readable label for diagnostics."""
        return type(self).__name__

    def __str__(self) -> str:
        return self.describe()


class CallbackTransaction(Transaction):
    """
    Transaction built from a pair of callables.

    Usage:
        doc = []
        tx = CallbackTransaction(
            lambda: doc.append("x"),
            lambda: doc.pop(),
            description="Append x",
        )
    """

    def __init__(
        self,
        apply_fn: Callable[[], Any],
        reverse_fn: Callable[[], Any],
        description: str = "",
    ):
        self.transaction_id = uuid.uuid4().hex[:8]
        self._apply_fn = apply_fn
        self._reverse_fn = reverse_fn
        self._description = description

    def apply(self) -> None:
        self._apply_fn()

    def reverse(self) -> None:
        self._reverse_fn()

    def describe(self) -> str:
        return self._description or super().describe()

    def __repr__(self) -> str:
        return f"CallbackTransaction(id={self.transaction_id}, description={self.describe()!r})"


def describe_transaction(transaction: Any) -> str:
    """describe() of any transaction-like object, falling back to its class name."""
    describe = getattr(transaction, "describe", None)
    if callable(describe):
        return str(describe())
    return type(transaction).__name__


def is_transaction(transaction: Any) -> bool:
    """Check for the apply/reverse capabilities."""
    if transaction is None:
        return False
    return callable(getattr(transaction, "apply", None)) and callable(
        getattr(transaction, "reverse", None)
    )


class StackSummary(BaseModel):
    """Structural snapshot of a TransactionStack for diagnostics."""

    size: int = Field(..., ge=0, description="Total transactions held")
    cursor: int = Field(..., ge=-1, description="Index of most recently applied transaction")
    undo_count: int = Field(..., ge=0, description="Transactions that can be undone")
    redo_count: int = Field(..., ge=0, description="Transactions that can be redone")
    applied: List[str] = Field(
        default_factory=list,
        description="Descriptions of the applied range, oldest first",
    )
    pending: Optional[str] = Field(
        None, description="Description of the next transaction to redo"
    )

    def to_text(self) -> str:
        """Render the textual diagnostic format."""
        text = f"--Number of Transactions: {self.size}\n"
        text += f"--Current Index on Stack: {self.cursor}\n"
        text += "--Current Transaction Stack:\n"
        for description in self.applied:
            text += f"----{description}\n"
        return text
