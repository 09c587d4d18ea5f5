"""Tests for modelId routing in the ProviderDispatcher."""

import asyncio

import pytest

from conftest import FakeBackend
from turbocontent.core.domain.exceptions import (
    ImageProcessingError,
    InvalidModelError,
    InvalidRequestError,
    ProviderError,
)
from turbocontent.core.domain.generation import InlineImage
from turbocontent.core.domain.schemas import BackendKind
from turbocontent.infra.llm.dispatcher import ProviderDispatcher


class _StatusError(Exception):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


@pytest.fixture
def backends() -> dict[BackendKind, FakeBackend]:
    return {kind: FakeBackend(kind.value, reply=f"from {kind.value}") for kind in BackendKind}


@pytest.fixture
def dispatcher(backends) -> ProviderDispatcher:
    return ProviderDispatcher(backends)


class TestRouting:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("model_id,kind", [
        ("gpt-4o-mini", BackendKind.OPENAI),
        ("o3-mini", BackendKind.OPENAI),
        ("claude-3-7-sonnet-20250219", BackendKind.ANTHROPIC),
        ("gemini-2.0-flash-exp-image-generation", BackendKind.GEMINI),
        ("grok-2-latest", BackendKind.GROK),
        ("deepseek-reasoner", BackendKind.DEEPSEEK),
    ])
    async def test_model_reaches_its_backend_only(self, dispatcher, backends, model_id, kind):
        text = await dispatcher.generate("hello", model_id)
        assert text == f"from {kind.value}"
        assert [r.model_name for r in backends[kind].calls] == [model_id]
        others = [b for k, b in backends.items() if k is not kind]
        assert all(not b.calls for b in others)

    @pytest.mark.asyncio
    async def test_unknown_model_makes_no_call(self, dispatcher, backends):
        with pytest.raises(InvalidModelError) as exc_info:
            await dispatcher.generate("hello", "gpt-99")
        assert exc_info.value.model_id == "gpt-99"
        assert all(not b.calls for b in backends.values())

    @pytest.mark.asyncio
    async def test_disabled_backend_behaves_like_unknown(self):
        dispatcher = ProviderDispatcher({BackendKind.OPENAI: FakeBackend("openai")})
        with pytest.raises(InvalidModelError):
            await dispatcher.generate("hello", "grok-2-latest")
        assert {r.backend for r in dispatcher.routes} == {BackendKind.OPENAI}

    @pytest.mark.asyncio
    async def test_empty_prompt_rejected(self, dispatcher, backends):
        with pytest.raises(InvalidRequestError):
            await dispatcher.generate("   ", "gpt-4o")
        assert all(not b.calls for b in backends.values())


class TestRequestShaping:
    @pytest.mark.asyncio
    async def test_route_default_temperature(self, dispatcher, backends):
        await dispatcher.generate("hi", "deepseek-chat")
        await dispatcher.generate("hi", "grok-2-latest")
        assert backends[BackendKind.DEEPSEEK].calls[0].temperature == 0.7
        assert backends[BackendKind.GROK].calls[0].temperature == 0.0

    @pytest.mark.asyncio
    async def test_explicit_temperature_wins(self, dispatcher, backends):
        await dispatcher.generate("hi", "gpt-4o", 1.3)
        assert backends[BackendKind.OPENAI].calls[0].temperature == 1.3

    @pytest.mark.asyncio
    async def test_reasoning_model_drops_temperature(self, dispatcher, backends):
        await dispatcher.generate("hi", "o3-mini", 0.2)
        req = backends[BackendKind.OPENAI].calls[0]
        assert req.temperature is None
        assert req.reasoning_effort == "high"

    @pytest.mark.asyncio
    async def test_image_model_requests_image_output(self, dispatcher, backends):
        image = InlineImage(data=b"\x89PNG")
        await dispatcher.generate("hi", "gemini-2.0-flash-exp-image-generation", image=image)
        req = backends[BackendKind.GEMINI].calls[0]
        assert req.image_output is True
        assert req.image == image

    @pytest.mark.asyncio
    async def test_image_for_text_only_model_rejected(self, dispatcher, backends):
        with pytest.raises(InvalidRequestError):
            await dispatcher.generate("hi", "gpt-4o", image=InlineImage(data=b"x"))
        assert not backends[BackendKind.OPENAI].calls


class TestTemperatureRange:
    @pytest.mark.asyncio
    async def test_anthropic_rejects_above_one(self, dispatcher, backends):
        with pytest.raises(InvalidRequestError, match="between 0 and 1"):
            await dispatcher.generate("hi", "claude-3-5-haiku-20241022", temperature=1.5)
        assert not backends[BackendKind.ANTHROPIC].calls

    @pytest.mark.asyncio
    async def test_anthropic_accepts_one(self, dispatcher, backends):
        await dispatcher.generate("hi", "claude-3-7-sonnet-20250219", temperature=1.0)
        assert backends[BackendKind.ANTHROPIC].calls[0].temperature == 1.0

    @pytest.mark.asyncio
    async def test_openai_accepts_up_to_two(self, dispatcher, backends):
        await dispatcher.generate("hi", "gpt-4o", temperature=1.5)
        assert backends[BackendKind.OPENAI].calls[0].temperature == 1.5

    @pytest.mark.asyncio
    async def test_reasoning_model_ignores_temperature(self, dispatcher, backends):
        await dispatcher.generate("hi", "o3-mini", temperature=1.9)
        assert backends[BackendKind.OPENAI].calls[0].temperature is None

    def test_validate_returns_route_without_calling_backend(self, dispatcher, backends):
        route = dispatcher.validate("claude-3-5-haiku-20241022", temperature=0.7)
        assert route.backend is BackendKind.ANTHROPIC
        assert not backends[BackendKind.ANTHROPIC].calls


class TestFailures:
    @pytest.mark.asyncio
    async def test_sdk_error_wrapped_and_classified(self):
        err = _StatusError("Incorrect API key provided: sk-abc***", 401)
        dispatcher = ProviderDispatcher({BackendKind.OPENAI: FakeBackend("openai", exc=err)})
        with pytest.raises(ProviderError) as exc_info:
            await dispatcher.generate("hi", "gpt-4o-mini")
        assert exc_info.value.provider == "openai"
        assert exc_info.value.failure == "invalid_key"
        assert "sk-abc" not in str(exc_info.value)
        assert exc_info.value.__cause__ is err

    @pytest.mark.asyncio
    async def test_timeout_classified(self):
        dispatcher = ProviderDispatcher(
            {BackendKind.ANTHROPIC: FakeBackend("anthropic", exc=asyncio.TimeoutError())}
        )
        with pytest.raises(ProviderError) as exc_info:
            await dispatcher.generate("hi", "claude-3-5-haiku-20241022")
        assert exc_info.value.failure == "timeout"

    @pytest.mark.asyncio
    async def test_provider_error_passes_through(self):
        original = ProviderError("grok", "response contained no text", failure="malformed_response")
        dispatcher = ProviderDispatcher({BackendKind.GROK: FakeBackend("grok", exc=original)})
        with pytest.raises(ProviderError) as exc_info:
            await dispatcher.generate("hi", "grok-2-latest")
        assert exc_info.value is original

    @pytest.mark.asyncio
    async def test_image_processing_failure_becomes_provider_error(self):
        dispatcher = ProviderDispatcher(
            {BackendKind.GEMINI: FakeBackend("gemini", exc=ImageProcessingError("bad jpeg"))}
        )
        with pytest.raises(ProviderError) as exc_info:
            await dispatcher.generate("hi", "gemini-2.0-flash-exp-image-generation")
        assert exc_info.value.failure == "malformed_response"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        dispatcher = ProviderDispatcher(
            {BackendKind.OPENAI: FakeBackend("openai", exc=asyncio.CancelledError())}
        )
        with pytest.raises(asyncio.CancelledError):
            await dispatcher.generate("hi", "gpt-4o")

    @pytest.mark.asyncio
    async def test_failure_is_not_retried(self):
        backend = FakeBackend("deepseek", exc=_StatusError("overloaded", 503))
        dispatcher = ProviderDispatcher({BackendKind.DEEPSEEK: backend})
        with pytest.raises(ProviderError) as exc_info:
            await dispatcher.generate("hi", "deepseek-chat")
        assert exc_info.value.failure == "provider_outage"
        assert len(backend.calls) == 1
