from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from turbocontent.api.rate_limit import limiter
from turbocontent.api.routes.admin import router as admin_router
from turbocontent.api.routes.auth import router as auth_router
from turbocontent.api.routes.feedback import router as feedback_router
from turbocontent.api.routes.generate import router as generate_router
from turbocontent.api.routes.profile import router as profile_router
from turbocontent.config import settings
from turbocontent.core.domain.exceptions import (
    ContentNotFoundError,
    EmailAlreadyRegisteredError,
    FeedbackNotFoundError,
    InvalidModelError,
    InvalidRequestError,
    PersistenceError,
    ProviderError,
    QuotaExceededError,
    TurboContentError,
    UserNotFoundError,
)
from turbocontent.infra.db.session import init_db
from turbocontent.infra.llm.factory import build_dispatcher
from turbocontent.infra.llm.failures import ProviderFailure
from turbocontent.infra.logging_config import ShortPathFormatter, configure_logging
from turbocontent.infra.media import ImageStore

formatter = ShortPathFormatter(
    "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
)
configure_logging(formatter, level=settings.log_level_int)

logger = logging.getLogger(__name__)

# exception class -> (HTTP status, error kind); first match wins
_ERROR_MAP: tuple[tuple[type[TurboContentError], int, str], ...] = (
    (QuotaExceededError, 429, "quota_exceeded"),
    (InvalidModelError, 400, "invalid_model"),
    (InvalidRequestError, 400, "invalid_request"),
    (ProviderError, 500, "provider_error"),
    (PersistenceError, 500, "persistence_error"),
    (UserNotFoundError, 404, "not_found"),
    (ContentNotFoundError, 404, "not_found"),
    (FeedbackNotFoundError, 404, "not_found"),
    (EmailAlreadyRegisteredError, 409, "conflict"),
)


def error_status(exc: TurboContentError) -> tuple[int, str]:
    for cls, status_code, kind in _ERROR_MAP:
        if isinstance(exc, cls):
            return status_code, kind
    return 500, "internal_error"


_PROVIDER_FAILURE_DETAIL: dict[str, str] = {
    ProviderFailure.INVALID_KEY.value: "AI provider rejected the configured credentials",
    ProviderFailure.NO_FUNDS_OR_BUDGET.value: "AI provider account is out of credit",
    ProviderFailure.RATE_LIMIT.value: "Rate limited by AI provider, try again shortly",
    ProviderFailure.PERMISSION_OR_REGION.value: "AI provider denied access to this model",
    ProviderFailure.BAD_REQUEST.value: "AI provider rejected the request",
    ProviderFailure.PROVIDER_OUTAGE.value: "AI provider is unavailable, try again later",
    ProviderFailure.TIMEOUT.value: "AI provider timed out",
    ProviderFailure.MALFORMED_RESPONSE.value: "AI provider returned an unusable response",
}
_PROVIDER_FAILURE_FALLBACK = "AI content generation failed"


def _public_detail(exc: TurboContentError, status_code: int) -> str:
    if isinstance(exc, ProviderError):
        # built from the failure kind only; never the SDK text
        return _PROVIDER_FAILURE_DETAIL.get(exc.failure or "", _PROVIDER_FAILURE_FALLBACK)
    if status_code >= 500 and not settings.debug:
        return "Internal server error"
    return str(exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        logger.info("Initialising database tables...")
        await init_db()

        media = ImageStore(settings.media_dir, url_prefix=settings.media_url_prefix)
        media.ensure_dir()

        # raises MissingCredentialError for an enabled backend without a key
        app.state.dispatcher = build_dispatcher(media=media)
        logger.info("TurboContent ready.")
    except asyncio.CancelledError:
        logger.debug("Startup cancelled (likely due to hot reload)")
        raise
    except Exception:
        logger.exception("Error during application startup")
        raise

    try:
        yield
    finally:
        logger.info("Shutting down.")


app = FastAPI(
    title="TurboContent",
    description="AI social-media content generation",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(TurboContentError)
async def _domain_exception_handler(request: Request, exc: TurboContentError):
    status_code, kind = error_status(exc)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", kind, request.method, request.url.path, exc)
    else:
        logger.info("%s on %s %s: %s", kind, request.method, request.url.path, exc)

    content = {"error": kind, "detail": _public_detail(exc, status_code)}
    if isinstance(exc, ProviderError):
        content["provider"] = exc.provider
        if exc.failure:
            content["failure"] = exc.failure
    elif isinstance(exc, QuotaExceededError):
        content["limit"] = exc.limit
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(RequestValidationError)
async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    # pydantic prefixes model_validator messages with "Value error, "
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    message = message.removeprefix("Value error, ")
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_request", "detail": message},
    )


@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(status_code=500, content={"error": "internal_error", "detail": detail})


app.include_router(generate_router)
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(feedback_router)
app.include_router(admin_router)

# directory is created in the lifespan
app.mount(
    settings.media_url_prefix,
    StaticFiles(directory=settings.media_dir, check_dir=False),
    name="media",
)


@app.get("/health")
async def health():
    return {"status": "ok"}
