"""
errors/exceptions.py - Transaction stack exceptions

Invalid undo/redo requests are not errors; they are no-ops on the stack.
These exceptions cover misuse of the stack itself.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Specific error codes."""

    # Transaction (1xxx)
    TX_INVALID = 1001
    TX_FAILED = 1002

    # Stack (2xxx)
    STACK_REENTRANT = 2001


class TPSError(Exception):
    """Base exception for transaction stack operations."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TX_FAILED,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "code": self.code.value,
            "message": self.message,
            "recoverable": self.recoverable,
        }


class InvalidTransactionError(TPSError):
    """Raised when add() receives something that is not a transaction."""

    def __init__(self, transaction: Any, reason: Optional[str] = None):
        detail = reason or "missing callable apply()/reverse()"
        super().__init__(
            f"Cannot add {type(transaction).__name__}: {detail}",
            code=ErrorCode.TX_INVALID,
        )
        self.transaction = transaction


class ReentrantOperationError(TPSError):
    """Raised when the stack is mutated from inside apply()/reverse()."""

    def __init__(self, operation: str, phase: str):
        super().__init__(
            f"Cannot {operation} while a transaction is {phase}",
            code=ErrorCode.STACK_REENTRANT,
            recoverable=False,
        )
        self.operation = operation
        self.phase = phase
