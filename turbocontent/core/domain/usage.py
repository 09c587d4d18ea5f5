"""Free-tier daily usage accounting -- pure functions, no IO."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Optional


@dataclass(frozen=True)
class UsageRecord:
    """Per-user counters embedded in the user row.

    ``last_request_time`` is stored as naive UTC (matching the DB column).
    """

    last_request_time: Optional[datetime]
    request_count: int = 0


def _local_date(ts: datetime, tz: tzinfo) -> date:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz).date()


def requests_used_today(record: UsageRecord, *, now: datetime, tz: tzinfo) -> int:
    if record.last_request_time is None:
        return 0
    if _local_date(record.last_request_time, tz) != _local_date(now, tz):
        return 0
    return record.request_count


def next_usage(
    record: UsageRecord, *, now: datetime, tz: tzinfo, limit: int,
) -> Optional[UsageRecord]:
    """Return the record to persist for one more request, or None if over *limit*.

    Calendar days are compared in *tz*. A new day resets the count to 1
    regardless of the previous day's count.
    """
    stamp = now.astimezone(timezone.utc).replace(tzinfo=None)

    if record.last_request_time is None:
        return UsageRecord(last_request_time=stamp, request_count=1)

    if _local_date(record.last_request_time, tz) != _local_date(now, tz):
        return UsageRecord(last_request_time=stamp, request_count=1)

    if record.request_count >= limit:
        return None

    return UsageRecord(last_request_time=stamp, request_count=record.request_count + 1)
