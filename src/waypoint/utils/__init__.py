"""
Utility helpers shared across Waypoint packages.
"""

from .logging import TRACE, configure_logging, get_logger, time_call, trace

__all__ = ["TRACE", "configure_logging", "get_logger", "time_call", "trace"]
