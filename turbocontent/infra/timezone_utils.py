"""Timezone-aware date helpers for daily usage resets."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from turbocontent.config import settings


def get_app_timezone(name: str | None = None) -> tzinfo:
    """Configured app timezone.

    Falls back to UTC if the configured timezone is invalid.
    """
    try:
        return ZoneInfo(name or settings.app_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
