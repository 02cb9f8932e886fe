"""Utility helpers for reusable functionality."""

from .datetime import (
    app_local_time,
    ensure_app_naive_datetime,
    ensure_app_timezone,
    get_app_timezone,
    now_in_app_naive_datetime,
    now_in_app_timezone,
    parse_timezone,
)

__all__ = [
    "app_local_time",
    "ensure_app_naive_datetime",
    "ensure_app_timezone",
    "get_app_timezone",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
    "parse_timezone",
]
