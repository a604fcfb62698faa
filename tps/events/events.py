"""
events/events.py - Stack event schemas

Events describe transitions of a TransactionStack. They are emitted after
the stack has settled, so listeners always see the final cursor and the
apply/reverse flags already cleared.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
import uuid


class StackEventType(str, Enum):
    """Types of stack events."""

    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DONE = "transaction_done"
    TRANSACTION_UNDONE = "transaction_undone"
    TRANSACTION_FAILED = "transaction_failed"

    BRANCH_DISCARDED = "branch_discarded"
    STACK_CLEARED = "stack_cleared"


@dataclass
class StackEvent:
    """
    A single stack transition.

    - cursor/size: stack state after the transition
    - description: describe() of the transaction involved, if any
    - discarded: entries dropped by branching or clear()
    - error: exception message for TRANSACTION_FAILED
    """
    event_id: str = field(default_factory=lambda: str(uuid.uuid4())[:12])
    event_type: StackEventType = StackEventType.TRANSACTION_ADDED
    stack_id: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    cursor: int = -1
    size: int = 0

    description: Optional[str] = None
    discarded: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "stack_id": self.stack_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "cursor": self.cursor,
            "size": self.size,
            "description": self.description,
            "discarded": self.discarded,
            "error": self.error,
        }
