"""
errors/ - Transaction stack exceptions
"""

from .exceptions import (
    ErrorCode,
    TPSError,
    InvalidTransactionError,
    ReentrantOperationError,
)

__all__ = [
    "ErrorCode",
    "TPSError",
    "InvalidTransactionError",
    "ReentrantOperationError",
]
