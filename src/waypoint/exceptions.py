"""
Error hierarchy for Waypoint.

Persistence failures are never wrapped: anything raised by SQLAlchemy or the
database driver reaches the caller as-is. These types cover the layers Waypoint
owns itself.
"""


class WaypointError(RuntimeError):
    """Base error for Waypoint-specific failures."""


class ConfigurationError(WaypointError):
    """Raised when connection configuration or DSN values are invalid."""
