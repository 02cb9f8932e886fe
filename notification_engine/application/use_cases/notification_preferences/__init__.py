"""Use cases for reading and updating notification preferences."""

from .preferences import get_preferences, update_preferences

__all__ = ["get_preferences", "update_preferences"]
