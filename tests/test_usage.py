"""Tests for free-tier daily usage accounting and the usage gate."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from conftest import FakeUser, FakeUserStore, FixedClock
from turbocontent.core.domain.exceptions import PersistenceError, QuotaExceededError
from turbocontent.core.domain.usage import UsageRecord, next_usage, requests_used_today
from turbocontent.usecases.usage_gate import UsageGate

UTC = timezone.utc
NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


class TestNextUsage:
    def test_first_ever_request_starts_at_one(self):
        rec = next_usage(UsageRecord(None, 0), now=NOW, tz=UTC, limit=3)
        assert rec.request_count == 1
        assert rec.last_request_time == NOW.replace(tzinfo=None)

    def test_same_day_increments(self):
        prior = UsageRecord(datetime(2025, 3, 10, 8, 0), 1)
        rec = next_usage(prior, now=NOW, tz=UTC, limit=3)
        assert rec.request_count == 2

    def test_same_day_at_limit_rejected(self):
        prior = UsageRecord(datetime(2025, 3, 10, 8, 0), 3)
        assert next_usage(prior, now=NOW, tz=UTC, limit=3) is None

    def test_new_day_resets_to_one_even_after_limit(self):
        prior = UsageRecord(datetime(2025, 3, 9, 23, 59), 3)
        rec = next_usage(prior, now=NOW, tz=UTC, limit=3)
        assert rec.request_count == 1

    def test_day_boundary_follows_configured_timezone(self):
        ny = ZoneInfo("America/New_York")
        # 03:00 UTC on the 11th is still the evening of the 10th in New York
        prior = UsageRecord(datetime(2025, 3, 10, 16, 0), 3)
        now = datetime(2025, 3, 11, 3, 0, tzinfo=UTC)
        assert next_usage(prior, now=now, tz=ny, limit=3) is None
        assert next_usage(prior, now=now, tz=UTC, limit=3).request_count == 1

    def test_stored_stamp_is_naive_utc(self):
        now = datetime(2025, 3, 10, 14, 0, tzinfo=ZoneInfo("Europe/Berlin"))
        rec = next_usage(UsageRecord(None, 0), now=now, tz=UTC, limit=3)
        assert rec.last_request_time == datetime(2025, 3, 10, 13, 0)
        assert rec.last_request_time.tzinfo is None


class TestRequestsUsedToday:
    def test_no_history(self):
        assert requests_used_today(UsageRecord(None, 0), now=NOW, tz=UTC) == 0

    def test_stale_day_counts_as_zero(self):
        rec = UsageRecord(NOW.replace(tzinfo=None) - timedelta(days=1), 3)
        assert requests_used_today(rec, now=NOW, tz=UTC) == 0

    def test_today(self):
        rec = UsageRecord(NOW.replace(tzinfo=None) - timedelta(hours=1), 2)
        assert requests_used_today(rec, now=NOW, tz=UTC) == 2


def _gate(store, clock, limit=3):
    return UsageGate(store, daily_limit=limit, tz=UTC, clock=clock)


class TestUsageGate:
    @pytest.mark.asyncio
    async def test_fourth_request_same_day_rejected(self, free_user, clock):
        store = FakeUserStore(free_user)
        gate = _gate(store, clock)

        for expected in (1, 2, 3):
            await gate.check("user-a")
            assert free_user.ai_request_count == expected

        with pytest.raises(QuotaExceededError) as exc_info:
            await gate.check("user-a")
        assert exc_info.value.limit == 3
        # rejection does not write
        assert store.saved == [("user-a", 1), ("user-a", 2), ("user-a", 3)]
        assert free_user.ai_request_count == 3

    @pytest.mark.asyncio
    async def test_next_day_allowed_again(self, free_user, clock):
        store = FakeUserStore(free_user)
        gate = _gate(store, clock)
        for _ in range(3):
            await gate.check("user-a")

        clock.now = clock.now + timedelta(days=1)
        await gate.check("user-a")
        assert free_user.ai_request_count == 1

    @pytest.mark.asyncio
    async def test_paid_user_bypasses_without_write(self, paid_user, clock):
        store = FakeUserStore(paid_user)
        gate = _gate(store, clock)
        for _ in range(10):
            await gate.check("user-p")
        assert store.saved == []
        assert paid_user.ai_request_count == 0

    @pytest.mark.asyncio
    async def test_trialing_counts_as_paid(self, clock):
        user = FakeUser(id="t", subscription_status="trialing", ai_request_count=3,
                        last_ai_request_time=clock.now.replace(tzinfo=None))
        await _gate(FakeUserStore(user), clock).check("t")

    @pytest.mark.asyncio
    async def test_past_due_is_gated(self, clock):
        user = FakeUser(id="pd", subscription_status="past_due", ai_request_count=3,
                        last_ai_request_time=clock.now.replace(tzinfo=None))
        with pytest.raises(QuotaExceededError):
            await _gate(FakeUserStore(user), clock).check("pd")

    @pytest.mark.asyncio
    async def test_unknown_user_fails_closed(self, clock):
        with pytest.raises(PersistenceError):
            await _gate(FakeUserStore(), clock).check("ghost")

    @pytest.mark.asyncio
    async def test_save_failure_aborts(self, free_user, clock):
        gate = _gate(FakeUserStore(free_user, fail_on_save=True), clock)
        with pytest.raises(PersistenceError):
            await gate.check("user-a")

    @pytest.mark.asyncio
    async def test_status_reports_remaining(self, free_user, clock):
        gate = _gate(FakeUserStore(free_user), clock)
        await gate.check("user-a")
        status = await gate.status("user-a")
        assert (status.used, status.limit, status.remaining, status.unlimited) == (1, 3, 2, False)

    @pytest.mark.asyncio
    async def test_status_for_paid_user(self, paid_user, clock):
        status = await _gate(FakeUserStore(paid_user), clock).status("user-p")
        assert status.unlimited is True

    @pytest.mark.asyncio
    async def test_limit_is_configurable(self, free_user):
        gate = UsageGate(FakeUserStore(free_user), daily_limit=1, tz=UTC, clock=FixedClock(NOW))
        await gate.check("user-a")
        with pytest.raises(QuotaExceededError):
            await gate.check("user-a")
