"""
Waypoint public package initialization.

Re-exports the data context, its configuration and the commit-boundary hooks.
"""

from .config import ConnectionConfig, SSLConfig  # noqa: F401
from .exceptions import ConfigurationError, WaypointError  # noqa: F401
from .hooks import (  # noqa: F401
    CallbackInterceptor,
    Event,
    EventManager,
    Interceptor,
    InterceptorResult,
    PostSaveEventArgs,
    PreSaveEventArgs,
    register_event_manager,
)
from .persistence import DataContext, SqlParameter, TableMapping  # noqa: F401

__all__ = [
    "DataContext",
    "SqlParameter",
    "TableMapping",
    "ConnectionConfig",
    "SSLConfig",
    "Event",
    "EventManager",
    "Interceptor",
    "CallbackInterceptor",
    "InterceptorResult",
    "PreSaveEventArgs",
    "PostSaveEventArgs",
    "register_event_manager",
    "WaypointError",
    "ConfigurationError",
]
