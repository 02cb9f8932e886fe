"""Domain entities describing per-user notification preferences."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import time
from typing import Any

from .notification import NOTIFICATION_CATEGORIES, DeliveryChannel


@dataclass(frozen=True)
class CategoryPreferences:
    """Channel opt-ins for a single notification category."""

    in_app: bool = True
    email: bool = True
    sms: bool = False

    def allows(self, channel: DeliveryChannel) -> bool:
        if channel is DeliveryChannel.PUSH:
            return self.in_app
        if channel is DeliveryChannel.EMAIL:
            return self.email
        return self.sms


@dataclass(frozen=True)
class QuietHours:
    """Daily window during which non-urgent SMS are held back."""

    enabled: bool = False
    start: time = time(22, 0)
    end: time = time(7, 0)

    def contains(self, moment: time) -> bool:
        """Return ``True`` when ``moment`` falls inside the window."""

        if not self.enabled or self.start == self.end:
            return False
        if self.start < self.end:
            return self.start <= moment < self.end
        # Window wraps past midnight.
        return moment >= self.start or moment < self.end


def _default_categories() -> dict[str, CategoryPreferences]:
    base = CategoryPreferences()
    return {
        "job": base,
        "dispatch": replace(base, sms=True),
        "financial": base,
        "expense": replace(base, email=False),
        "timesheet": base,
        "inventory": replace(base, email=False),
        "fleet": base,
        "safety": replace(base, sms=True),
        "system": replace(base, email=False),
    }


@dataclass
class UserPreferences:
    """Opt-in/opt-out configuration consulted before delivering a notification."""

    categories: dict[str, CategoryPreferences] = field(default_factory=_default_categories)
    real_time: bool = True
    quiet_hours: QuietHours = field(default_factory=QuietHours)

    def for_category(self, category: str) -> CategoryPreferences:
        return self.categories.get(category) or CategoryPreferences()

    def merged_with(self, partial: Mapping[str, Any]) -> "UserPreferences":
        """Return a copy updated with the keys present in ``partial``."""

        categories = dict(self.categories)
        for category, values in (partial.get("categories") or {}).items():
            if category not in NOTIFICATION_CATEGORIES:
                raise ValueError(f"Unknown notification category '{category}'")
            if not isinstance(values, Mapping):
                raise ValueError(f"Preferences for '{category}' must be an object")
            current = categories.get(category) or CategoryPreferences()
            categories[category] = replace(
                current,
                **{
                    key: bool(values[key])
                    for key in ("in_app", "email", "sms")
                    if key in values
                },
            )

        quiet_hours = self.quiet_hours
        raw_quiet_hours = partial.get("quiet_hours")
        if raw_quiet_hours is not None:
            quiet_hours = _merge_quiet_hours(quiet_hours, raw_quiet_hours)

        real_time = self.real_time
        if "real_time" in partial:
            real_time = bool(partial["real_time"])

        return UserPreferences(
            categories=categories, real_time=real_time, quiet_hours=quiet_hours
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "categories": {
                name: {"in_app": prefs.in_app, "email": prefs.email, "sms": prefs.sms}
                for name, prefs in self.categories.items()
            },
            "real_time": self.real_time,
            "quiet_hours": {
                "enabled": self.quiet_hours.enabled,
                "start": self.quiet_hours.start.strftime("%H:%M"),
                "end": self.quiet_hours.end.strftime("%H:%M"),
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "UserPreferences":
        """Build preferences from stored JSON, filling gaps with defaults."""

        if not data:
            return cls()
        return cls().merged_with(data)


def _merge_quiet_hours(current: QuietHours, raw: Any) -> QuietHours:
    if not isinstance(raw, Mapping):
        raise ValueError("quiet_hours must be an object")
    updated = current
    if "enabled" in raw:
        updated = replace(updated, enabled=bool(raw["enabled"]))
    for key in ("start", "end"):
        if key in raw:
            updated = replace(updated, **{key: _parse_clock(raw[key], key)})
    return updated


def _parse_clock(value: Any, label: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(f"quiet_hours.{label} must use HH:MM format") from exc


__all__ = ["CategoryPreferences", "QuietHours", "UserPreferences"]
