"""
Commit-boundary events and the interceptor pipeline built on them.
"""

from .events import Event, EventHandler, PostSaveEventArgs, PreSaveEventArgs, SaveEventArgs
from .manager import (
    CallbackInterceptor,
    EventManager,
    Interceptor,
    InterceptorResult,
    register_event_manager,
)

__all__ = [
    "CallbackInterceptor",
    "Event",
    "EventHandler",
    "EventManager",
    "Interceptor",
    "InterceptorResult",
    "PostSaveEventArgs",
    "PreSaveEventArgs",
    "SaveEventArgs",
    "register_event_manager",
]
