"""
bootstrap/factory.py - Stack construction from configuration
"""

from __future__ import annotations
from typing import Optional, TYPE_CHECKING
import logging

from .config import TPSConfig, get_config

if TYPE_CHECKING:
    from tps.transactions.stack import TransactionStack

logger = logging.getLogger("tps.bootstrap.factory")


def create_stack(
    config: Optional[TPSConfig] = None,
    stack_id: str = "",
) -> "TransactionStack":
    """
    Build a TransactionStack wired to its own EventDispatcher.

    Args:
        config: Configuration (defaults to get_config())
        stack_id: Identifier stamped on emitted events

    Returns:
        New empty TransactionStack
    """
    # transactions.stack imports bootstrap.config
    from tps.events import EventDispatcher
    from tps.transactions.stack import TransactionStack

    config = config or get_config()

    dispatcher = None
    if config.stack.emit_events:
        dispatcher = EventDispatcher(
            stack_id=stack_id,
            max_history=config.stack.event_history,
        )

    logger.debug(
        f"Creating stack {stack_id or '<anonymous>'} "
        f"(thread_safe={config.stack.thread_safe}, "
        f"guard_reentrancy={config.stack.guard_reentrancy})"
    )
    return TransactionStack(dispatcher=dispatcher, config=config.stack)
