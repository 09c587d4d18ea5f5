"""Daily AI-request ceiling for users without a paid subscription.

The check is a plain read-modify-write on the user row with no lock or
row-level isolation. Two simultaneous requests from the same account can
both read count N and both write N+1, letting one extra request through.
The ceiling is an abuse deterrent, not a billing guarantee, so this race is
accepted. Serialising it (SELECT ... FOR UPDATE) would change observable
behaviour and has to be an explicit decision.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Any, Callable, Protocol

from turbocontent.core.domain.exceptions import PersistenceError, QuotaExceededError
from turbocontent.core.domain.schemas import PAID_STATUSES, UsageStatus
from turbocontent.core.domain.usage import UsageRecord, next_usage, requests_used_today
from turbocontent.infra.timezone_utils import utcnow

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    """Persistence collaborator for the gate.

    Implementations raise PersistenceError on storage failure.
    """

    async def get_user(self, user_id: str) -> Any | None:
        ...

    async def save_user(self, user: Any) -> None:
        ...


class UsageGate:

    def __init__(
        self,
        store: UserStore,
        *,
        daily_limit: int,
        tz: tzinfo,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self.daily_limit = daily_limit
        self._tz = tz
        self._clock = clock

    async def _load(self, user_id: str) -> Any:
        user = await self._store.get_user(user_id)
        if user is None:
            # fail closed: an unknown account never gets a free pass
            raise PersistenceError("usage lookup", f"user {user_id} not found")
        return user

    async def check(self, user_id: str) -> None:
        """Allow one generation for *user_id* or raise QuotaExceededError.

        Allowed requests are persisted before this returns.
        """
        user = await self._load(user_id)
        if user.subscription_status in PAID_STATUSES:
            return

        current = UsageRecord(
            last_request_time=user.last_ai_request_time,
            request_count=user.ai_request_count or 0,
        )
        updated = next_usage(current, now=self._clock(), tz=self._tz, limit=self.daily_limit)
        if updated is None:
            logger.info(
                "Daily AI limit reached for user %s (%d/%d)",
                user_id, current.request_count, self.daily_limit,
            )
            raise QuotaExceededError(user_id, limit=self.daily_limit)

        user.last_ai_request_time = updated.last_request_time
        user.ai_request_count = updated.request_count
        await self._store.save_user(user)
        logger.debug("AI usage for user %s now %d/%d", user_id, updated.request_count, self.daily_limit)

    async def status(self, user_id: str) -> UsageStatus:
        user = await self._load(user_id)
        if user.subscription_status in PAID_STATUSES:
            return UsageStatus(used=0, limit=self.daily_limit, remaining=self.daily_limit, unlimited=True)

        used = requests_used_today(
            UsageRecord(user.last_ai_request_time, user.ai_request_count or 0),
            now=self._clock(),
            tz=self._tz,
        )
        return UsageStatus(
            used=used,
            limit=self.daily_limit,
            remaining=max(self.daily_limit - used, 0),
        )
