"""
transactions/ - Undo/redo transaction processing

Sequences externally supplied reversible transactions and replays them
for undo and redo.
"""

from .schemas import (
    Transaction,
    CallbackTransaction,
    StackSummary,
    describe_transaction,
    is_transaction,
)

from .stack import (
    TransactionStack,
)

__all__ = [
    # Schemas
    "Transaction",
    "CallbackTransaction",
    "StackSummary",
    "describe_transaction",
    "is_transaction",
    # Stack
    "TransactionStack",
]
