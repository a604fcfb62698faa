"""
events/ - Stack event notification

Lets host applications (toolbars, menus, status bars) react to undo/redo
transitions without polling the stack.
"""

from .events import (
    StackEventType,
    StackEvent,
)

from .dispatcher import (
    EventHandler,
    EventDispatcher,
)

__all__ = [
    "StackEventType",
    "StackEvent",
    "EventHandler",
    "EventDispatcher",
]
