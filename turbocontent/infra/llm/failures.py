"""Classify provider exceptions into coarse failure kinds for logging and responses."""

from __future__ import annotations

import asyncio
import re
from enum import Enum
from typing import Optional

# Regex pattern for detecting billing/quota-related error messages
BILLING_KEYWORDS = re.compile(
    r"(billing|quota|credits?|plan|spend\s*limit|balance|payment|subscription|account\s*limit|budget)",
    re.IGNORECASE,
)


class ProviderFailure(str, Enum):
    INVALID_KEY = "invalid_key"
    NO_FUNDS_OR_BUDGET = "no_funds_or_budget"
    RATE_LIMIT = "rate_limit"
    PERMISSION_OR_REGION = "permission_or_region"
    BAD_REQUEST = "bad_request"
    PROVIDER_OUTAGE = "provider_outage"
    TIMEOUT = "timeout"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN_ERROR = "unknown_error"


def classify_error(
    status_code: Optional[int],
    error_message: Optional[str],
    error_type: Optional[str] = None,
) -> ProviderFailure:
    """Classify error based on HTTP status, message, and provider-specific type.

    Args:
        status_code: HTTP status code from the API response
        error_message: Error message from the exception
        error_type: Provider-specific error type field (e.g., Anthropic's "type")
    """
    if status_code is None:
        status_match = re.search(r"\b(40[0-9]|42[0-9]|50[0-9])\b", error_message or "")
        if status_match:
            status_code = int(status_match.group(1))
        else:
            msg_lower = (error_message or "").lower()
            if (
                "authentication" in msg_lower
                or "api key" in msg_lower
                or "unauthorized" in msg_lower
            ):
                return ProviderFailure.INVALID_KEY
            return ProviderFailure.UNKNOWN_ERROR

    if status_code == 401:
        return ProviderFailure.INVALID_KEY
    if status_code == 403:
        return ProviderFailure.PERMISSION_OR_REGION
    if status_code == 429:
        # billing exhaustion also comes back as 429
        msg = (error_message or "").lower()
        error_type_lower = (error_type or "").lower()
        if (
            BILLING_KEYWORDS.search(msg)
            or BILLING_KEYWORDS.search(error_type_lower)
            or "insufficient" in msg
            or ("exceeded" in msg and ("quota" in msg or "limit" in msg))
        ):
            return ProviderFailure.NO_FUNDS_OR_BUDGET
        return ProviderFailure.RATE_LIMIT
    if status_code == 402:
        return ProviderFailure.NO_FUNDS_OR_BUDGET
    if status_code == 408:
        return ProviderFailure.TIMEOUT
    if status_code in (400, 404, 422):
        return ProviderFailure.BAD_REQUEST
    if status_code in (500, 502, 503, 504, 529):
        return ProviderFailure.PROVIDER_OUTAGE
    return ProviderFailure.UNKNOWN_ERROR


def classify_exception(exc: BaseException) -> ProviderFailure:
    """Best-effort classification of an SDK exception.

    OpenAI/Anthropic errors expose ``status_code``; google-genai exposes ``code``.
    """
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return ProviderFailure.TIMEOUT
    if "timeout" in type(exc).__name__.lower():
        return ProviderFailure.TIMEOUT

    status = getattr(exc, "status_code", None) or getattr(exc, "code", None)
    if not isinstance(status, int):
        status = None

    body = getattr(exc, "body", None)
    error_type = None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            error_type = err.get("type") or err.get("code")

    return classify_error(status, str(exc), error_type if isinstance(error_type, str) else None)
