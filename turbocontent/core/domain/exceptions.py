"""Domain exceptions -- catch specific, re-raise with context."""

from __future__ import annotations

from typing import Optional


class TurboContentError(Exception):
    """Root for all domain errors."""


class InvalidModelError(TurboContentError):
    """modelId is not in the route table (or its backend is disabled)."""

    def __init__(self, model_id: str) -> None:
        super().__init__(f"Unsupported model: {model_id}")
        self.model_id = model_id


class InvalidRequestError(TurboContentError):
    """Caller sent a request the dispatcher cannot route (empty prompt, stray image)."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class QuotaExceededError(TurboContentError):
    """Free-tier daily ceiling reached."""

    def __init__(self, user_id: str, *, limit: int) -> None:
        super().__init__(
            f"Daily limit of {limit} AI requests reached. Upgrade to continue today."
        )
        self.user_id = user_id
        self.limit = limit


class ProviderError(TurboContentError):
    """Wraps provider-specific backend failures."""

    def __init__(self, provider: str, detail: str, *, failure: Optional[str] = None) -> None:
        super().__init__(f"[{provider}] {detail}")
        self.provider = provider
        self.detail = detail
        self.failure = failure


class PersistenceError(TurboContentError):
    """Usage/user record could not be read or written -- the request is denied."""

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"Persistence failure during {operation}: {detail}")
        self.operation = operation
        self.detail = detail


class ImageProcessingError(TurboContentError):
    """Generated image bytes could not be decoded or re-encoded."""


class MissingCredentialError(TurboContentError):
    """An enabled backend has no API key configured. Raised at startup."""

    def __init__(self, provider: str, env_name: str) -> None:
        super().__init__(
            f"No API key found for enabled backend '{provider}'. "
            f"Set {env_name} or remove it from ENABLED_BACKENDS."
        )
        self.provider = provider
        self.env_name = env_name


class UserNotFoundError(TurboContentError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class ContentNotFoundError(TurboContentError):
    def __init__(self, content_id: str) -> None:
        super().__init__(f"Content not found: {content_id}")
        self.content_id = content_id


class FeedbackNotFoundError(TurboContentError):
    def __init__(self, feedback_id: str) -> None:
        super().__init__(f"Feedback not found: {feedback_id}")
        self.feedback_id = feedback_id


class EmailAlreadyRegisteredError(TurboContentError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Email already in use: {email}")
        self.email = email
