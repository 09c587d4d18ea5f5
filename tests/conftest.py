from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

# settings are read at import time; keep tests off real keys and dirs
os.environ.setdefault("ENABLED_BACKENDS", "")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest

from turbocontent.core.domain.exceptions import PersistenceError
from turbocontent.core.domain.generation import BackendRequest


class FakeBackend:
    """Records every request; returns *reply* or raises *exc*."""

    def __init__(self, provider: str, reply: str = "generated post", exc: Optional[BaseException] = None):
        self.provider = provider
        self.reply = reply
        self.exc = exc
        self.calls: list[BackendRequest] = []

    async def generate(self, request: BackendRequest) -> str:
        self.calls.append(request)
        if self.exc is not None:
            raise self.exc
        return self.reply


@dataclass
class FakeUser:
    id: str
    subscription_status: str = "free"
    last_ai_request_time: Optional[datetime] = None
    ai_request_count: int = 0
    is_admin: bool = False
    email: str = "user@example.com"


class FakeUserStore:

    def __init__(self, *users: FakeUser, fail_on_save: bool = False) -> None:
        self.users = {u.id: u for u in users}
        self.saved: list[tuple[str, int]] = []
        self.fail_on_save = fail_on_save

    async def get_user(self, user_id: str) -> Any:
        return self.users.get(user_id)

    async def save_user(self, user: Any) -> None:
        if self.fail_on_save:
            raise PersistenceError("save_user", "database unavailable")
        self.saved.append((user.id, user.ai_request_count))


@dataclass
class FakeContentStore:
    fail: bool = False
    rows: list[dict] = field(default_factory=list)
    commits: int = 0
    rollbacks: int = 0

    async def create_content(self, **fields: Any) -> dict:
        if self.fail:
            raise PersistenceError("create_content", "database unavailable")
        self.rows.append(fields)
        return fields

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def free_user() -> FakeUser:
    return FakeUser(id="user-a")


@pytest.fixture
def paid_user() -> FakeUser:
    return FakeUser(id="user-p", subscription_status="active")
