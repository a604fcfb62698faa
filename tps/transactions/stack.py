"""
transactions/stack.py - Undo/redo transaction stack

The stack holds transactions in the order they were added and a cursor at
the most recently applied one (-1 when none is applied):

    [0 .. cursor]           applied, available to undo
    [cursor + 1 .. size-1]  undone, available to redo

Adding a transaction while the redo range is non-empty discards that range
for good. History is linear, never a tree.

Undo with nothing to undo and redo with nothing to redo are no-ops that
return False. Exceptions raised by a transaction's apply()/reverse()
propagate unchanged; the cursor is left where it was and the
is_applying/is_reversing flags are always cleared.
"""

from __future__ import annotations
from contextlib import contextmanager, nullcontext
from typing import Any, Iterator, List, Optional, Tuple, TYPE_CHECKING
import logging
import threading

from ..bootstrap.config import StackConfig
from ..errors import InvalidTransactionError, ReentrantOperationError
from ..events import EventDispatcher, StackEvent, StackEventType
from .schemas import StackSummary, describe_transaction, is_transaction

if TYPE_CHECKING:
    from .schemas import Transaction


logger = logging.getLogger("tps.stack")


class TransactionStack:
    """
    Linear undo/redo history of reversible transactions.

    Usage:
        stack = TransactionStack()
        stack.add(SetTitle(doc, "Draft 2"))   # applied immediately
        stack.undo()
        stack.redo()

    The stack is single-threaded unless StackConfig.thread_safe is set, in
    which case every public call runs under one lock per instance.
    """

    def __init__(
        self,
        dispatcher: Optional[EventDispatcher] = None,
        config: Optional[StackConfig] = None,
    ):
        """
        Initialize an empty stack.

        Args:
            dispatcher: Receives StackEvents after each transition (optional)
            config: Behavior switches, defaults to StackConfig()
        """
        self.config = config or StackConfig()
        self.dispatcher = dispatcher

        self._transactions: List[Any] = []
        self._cursor = -1

        # True only while a transaction callback runs
        self._applying = False
        self._reversing = False

        self._lock = threading.RLock() if self.config.thread_safe else None

    # === STATE ===

    @property
    def cursor(self) -> int:
        """Index of the most recently applied transaction, -1 if none."""
        return self._cursor

    @property
    def transactions(self) -> Tuple[Any, ...]:
        """Snapshot of all held transactions, oldest first."""
        with self._guard():
            return tuple(self._transactions)

    @property
    def is_applying(self) -> bool:
        """True while a transaction's apply() is running."""
        return self._applying

    @property
    def is_reversing(self) -> bool:
        """True while a transaction's reverse() is running."""
        return self._reversing

    # === OPERATIONS ===

    def add(self, transaction: "Transaction") -> None:
        """
        Add a transaction to the top of the stack and apply it.

        Any undone transactions above the cursor are discarded first. When
        this returns the new transaction is at the cursor and has been
        applied exactly once. If its apply() raises, the transaction is
        removed again and the exception propagates.

        Calling add() (or undo/redo/clear) from inside a transaction's own
        apply()/reverse() is not supported; enable guard_reentrancy to have
        such calls rejected. Without the guard the cursor is kept in bounds
        but the outer transaction may be dropped by the nested branch.

        Raises:
            InvalidTransactionError: transaction lacks apply()/reverse()
            ReentrantOperationError: called from inside apply()/reverse()
                while guard_reentrancy is enabled
        """
        if not is_transaction(transaction):
            raise InvalidTransactionError(transaction)

        with self._guard():
            self._check_reentrancy("add")

            discarded = self._discard_redo_range()
            self._transactions.append(transaction)

            try:
                self._apply_next()
            except Exception as e:
                if self._holds(len(self._transactions) - 1, transaction):
                    self._transactions.pop()
                self._emit_discarded(discarded)
                self._fail(transaction, "add", e)
                raise

            logger.debug(
                f"Added {describe_transaction(transaction)} "
                f"(cursor={self._cursor}, size={len(self._transactions)})"
            )
            self._emit_discarded(discarded)
            self._emit(StackEventType.TRANSACTION_ADDED, transaction)

    def add_transaction(self, transaction: "Transaction") -> None:
        """Alias for add()."""
        self.add(transaction)

    def do(self) -> bool:
        """
        Apply the next transaction in the redo range.

        Returns:
            True if a transaction was applied, False if there was nothing to redo
        """
        with self._guard():
            self._check_reentrancy("redo")

            if not self.has_redo():
                logger.debug("Nothing to redo")
                return False

            transaction = self._transactions[self._cursor + 1]
            try:
                self._apply_next()
            except Exception as e:
                self._fail(transaction, "redo", e)
                raise

            logger.debug(f"Redid {describe_transaction(transaction)} (cursor={self._cursor})")
            self._emit(StackEventType.TRANSACTION_DONE, transaction)
            return True

    def redo(self) -> bool:
        """Alias for do()."""
        return self.do()

    def undo(self) -> bool:
        """
        Reverse the transaction at the cursor.

        Returns:
            True if a transaction was reversed, False if there was nothing to undo
        """
        with self._guard():
            self._check_reentrancy("undo")

            if not self.has_undo():
                logger.debug("Nothing to undo")
                return False

            transaction = self._transactions[self._cursor]
            try:
                with self._performing("reverse"):
                    transaction.reverse()
                    if self._holds(self._cursor, transaction):
                        self._cursor -= 1
                    else:
                        self._warn_moved(transaction, "reverse")
            except Exception as e:
                self._fail(transaction, "undo", e)
                raise

            logger.debug(f"Undid {describe_transaction(transaction)} (cursor={self._cursor})")
            self._emit(StackEventType.TRANSACTION_UNDONE, transaction)
            return True

    def peek_undo(self) -> Optional["Transaction"]:
        """Transaction the next undo() would reverse, or None."""
        with self._guard():
            if self.has_undo():
                return self._transactions[self._cursor]
            return None

    def peek_do(self) -> Optional["Transaction"]:
        """Transaction the next redo() would apply, or None."""
        with self._guard():
            if self.has_redo():
                return self._transactions[self._cursor + 1]
            return None

    def clear(self) -> None:
        """
        Drop every transaction and reset the cursor.

        Nothing is reversed; reverse pending work first if it needs cleanup.
        """
        with self._guard():
            self._check_reentrancy("clear")

            discarded = len(self._transactions)
            self._transactions.clear()
            self._cursor = -1

            logger.debug(f"Cleared {discarded} transactions")
            self._emit(StackEventType.STACK_CLEARED, discarded=discarded)

    # === COUNTS ===

    def size(self) -> int:
        """Total transactions held, applied or not."""
        with self._guard():
            return len(self._transactions)

    def __len__(self) -> int:
        return self.size()

    def undo_count(self) -> int:
        """Number of transactions that can be undone."""
        with self._guard():
            return self._cursor + 1

    def redo_count(self) -> int:
        """Number of transactions that can be redone."""
        with self._guard():
            return len(self._transactions) - self._cursor - 1

    def has_undo(self) -> bool:
        with self._guard():
            return self._cursor >= 0

    def has_redo(self) -> bool:
        with self._guard():
            return self._cursor < len(self._transactions) - 1

    # === DIAGNOSTICS ===

    def summary(self) -> StackSummary:
        """Structural snapshot: counts plus descriptions of the applied range."""
        with self._guard():
            pending = self.peek_do()
            return StackSummary(
                size=len(self._transactions),
                cursor=self._cursor,
                undo_count=self._cursor + 1,
                redo_count=len(self._transactions) - self._cursor - 1,
                applied=[
                    describe_transaction(t)
                    for t in self._transactions[: self._cursor + 1]
                ],
                pending=describe_transaction(pending) if pending is not None else None,
            )

    def describe(self) -> str:
        """Textual summary of the stack."""
        return self.summary().to_text()

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"TransactionStack(size={len(self._transactions)}, cursor={self._cursor})"

    # === INTERNALS ===

    def _guard(self):
        return self._lock if self._lock is not None else nullcontext()

    @contextmanager
    def _performing(self, phase: str) -> Iterator[None]:
        """Raise the apply/reverse flag for the duration of a callback."""
        attr = "_applying" if phase == "apply" else "_reversing"
        setattr(self, attr, True)
        try:
            yield
        finally:
            setattr(self, attr, False)

    def _apply_next(self) -> None:
        transaction = self._transactions[self._cursor + 1]
        with self._performing("apply"):
            transaction.apply()
            if self._holds(self._cursor + 1, transaction):
                self._cursor += 1
            else:
                self._warn_moved(transaction, "apply")

    def _holds(self, index: int, transaction: Any) -> bool:
        """Check the transaction is still stored at index."""
        return 0 <= index < len(self._transactions) and self._transactions[index] is transaction

    def _warn_moved(self, transaction: Any, phase: str) -> None:
        # Stack was mutated from inside the callback; leave the cursor alone
        logger.warning(
            f"Stack changed during {phase} of {describe_transaction(transaction)}; "
            f"cursor left at {self._cursor}"
        )

    def _discard_redo_range(self) -> int:
        discarded = len(self._transactions) - (self._cursor + 1)
        if discarded > 0:
            del self._transactions[self._cursor + 1:]
            logger.debug(f"Branching: discarded {discarded} undone transactions")
        return discarded

    def _check_reentrancy(self, operation: str) -> None:
        if not self.config.guard_reentrancy:
            return
        if self._applying:
            raise ReentrantOperationError(operation, "applying")
        if self._reversing:
            raise ReentrantOperationError(operation, "reversing")

    def _fail(self, transaction: Any, operation: str, error: Exception) -> None:
        logger.error(
            f"Transaction {describe_transaction(transaction)} failed during {operation}: {error}"
        )
        self._emit(StackEventType.TRANSACTION_FAILED, transaction, error=str(error))

    def _emit_discarded(self, discarded: int) -> None:
        if discarded > 0:
            self._emit(StackEventType.BRANCH_DISCARDED, discarded=discarded)

    def _emit(
        self,
        event_type: StackEventType,
        transaction: Any = None,
        discarded: int = 0,
        error: Optional[str] = None,
    ) -> None:
        if self.dispatcher is None or not self.config.emit_events:
            return

        self.dispatcher.emit(StackEvent(
            event_type=event_type,
            cursor=self._cursor,
            size=len(self._transactions),
            description=describe_transaction(transaction) if transaction is not None else None,
            discarded=discarded,
            error=error,
        ))
