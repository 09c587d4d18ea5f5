"""Pydantic v2 domain models -- no IO deps."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- enums ---

class BackendKind(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    GROK = "grok"
    DEEPSEEK = "deepseek"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    FREE = "free"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    INCOMPLETE_EXPIRED = "incomplete_expired"


# statuses that bypass the daily usage gate
PAID_STATUSES: frozenset[str] = frozenset(
    {SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value}
)


class FeedbackType(str, Enum):
    BUG = "bug"
    FEATURE = "feature"
    OTHER = "other"


# --- generation ---

class GenerateRequest(BaseModel):
    """Either a raw ``prompt`` or the four social-post fields."""

    prompt: Optional[str] = None
    topic: Optional[str] = None
    goal: Optional[str] = None
    platform: Optional[str] = None
    tone: Optional[str] = None
    model: Optional[str] = Field(default=None, description="modelId; server default when omitted")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    image: Optional[str] = Field(
        default=None,
        description="Inline image as base64 or data URL (image-capable models only)",
    )

    @model_validator(mode="after")
    def _prompt_or_brief(self) -> "GenerateRequest":
        if self.prompt and self.prompt.strip():
            return self
        missing = [
            name for name in ("topic", "goal", "platform", "tone")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise ValueError(
                "Missing required parameters: topic, goal, platform, and tone are required."
            )
        return self

    @property
    def is_brief(self) -> bool:
        return not (self.prompt and self.prompt.strip())


class GenerateResponse(BaseModel):
    # wire name stays camelCase for existing clients
    model_config = ConfigDict(populate_by_name=True)

    content: str
    save_error: Optional[str] = Field(default=None, alias="saveError")


class UsageStatus(BaseModel):
    used: int
    limit: int
    remaining: int
    unlimited: bool = False


class ModelRouteOut(BaseModel):
    id: str
    backend: BackendKind
    label: str
    supports_image: bool


# --- auth / profile ---

class SignupRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=128)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    subscription_status: str
    is_admin: Optional[bool] = False
    preferences: Optional[dict[str, Any]] = None
    ai_request_count: Optional[int] = 0
    last_ai_request_time: Optional[datetime] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    token: str
    user: UserOut


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    preferences: Optional[dict[str, Any]] = None


# --- content / feedback ---

class ContentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    topic: Optional[str] = None
    goal: Optional[str] = None
    platform: Optional[str] = None
    tone: Optional[str] = None
    model: Optional[str] = None
    content: str
    is_private: Optional[bool] = False
    created_at: Optional[datetime] = None


class FeedbackCreate(BaseModel):
    type: FeedbackType
    message: str = Field(min_length=1, max_length=5000)


class FeedbackOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    type: str
    message: str
    created_at: Optional[datetime] = None


# --- admin ---

class SubscriptionUpdate(BaseModel):
    subscription_status: SubscriptionStatus


class PrivacyUpdate(BaseModel):
    is_private: bool


class DailyCount(BaseModel):
    date: str
    count: int


class DashboardStats(BaseModel):
    total_users: int
    premium_users: int
    trialing_users: int
    conversion_rate: str
    user_growth: list[DailyCount]
    total_content: int
    content_growth: list[DailyCount]


class ModelUsageCount(BaseModel):
    model: Optional[str]
    count: int
