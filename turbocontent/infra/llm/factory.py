"""Backend factory – build one client per enabled backend at startup."""

from __future__ import annotations

import logging
from typing import Iterable

from turbocontent.config import Settings, settings
from turbocontent.core.domain.exceptions import MissingCredentialError
from turbocontent.core.domain.schemas import BackendKind
from turbocontent.infra.media import ImageStore

from .anthropic_client import AnthropicBackend
from .base import TextBackend
from .deepseek_client import DeepSeekBackend
from .dispatcher import ProviderDispatcher
from .gemini_client import GeminiBackend
from .grok_client import GrokBackend
from .openai_client import OpenAIBackend

logger = logging.getLogger(__name__)

_BACKENDS: dict[BackendKind, type] = {
    BackendKind.OPENAI: OpenAIBackend,
    BackendKind.ANTHROPIC: AnthropicBackend,
    BackendKind.GEMINI: GeminiBackend,
    BackendKind.GROK: GrokBackend,
    BackendKind.DEEPSEEK: DeepSeekBackend,
}


def _parse_kinds(names: Iterable[str]) -> list[BackendKind]:
    kinds: list[BackendKind] = []
    for name in names:
        try:
            kinds.append(BackendKind(name.lower()))
        except ValueError:
            raise ValueError(
                f"Unknown backend '{name}'. "
                f"Supported: {', '.join(k.value for k in _BACKENDS)}"
            ) from None
    return kinds


def build_backends(
    *,
    media: ImageStore,
    cfg: Settings = settings,
) -> dict[BackendKind, TextBackend]:
    """Instantiate every enabled backend.

    Raises MissingCredentialError if an enabled backend has no API key, so a
    misconfigured deployment fails at startup instead of per request.
    """
    backends: dict[BackendKind, TextBackend] = {}
    for kind in _parse_kinds(cfg.enabled_backend_kinds):
        api_key = (cfg.get_api_key(kind.value) or "").strip()
        if not api_key:
            raise MissingCredentialError(kind.value, f"{kind.value.upper()}_API_KEY")

        cls = _BACKENDS[kind]
        if kind is BackendKind.GEMINI:
            backends[kind] = cls(api_key=api_key, media=media)
        else:
            backends[kind] = cls(api_key=api_key)
        logger.debug("Backend ready: %s", kind.value)

    if not backends:
        logger.warning("ENABLED_BACKENDS is empty -- every generate request will be rejected")
    return backends


def build_dispatcher(*, media: ImageStore, cfg: Settings = settings) -> ProviderDispatcher:
    dispatcher = ProviderDispatcher(build_backends(media=media, cfg=cfg))
    logger.info(
        "Provider dispatcher ready: %d model(s) over %s",
        len(dispatcher.routes),
        ", ".join(cfg.enabled_backend_kinds) or "no backends",
    )
    return dispatcher
