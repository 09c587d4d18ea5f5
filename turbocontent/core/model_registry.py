"""Static route table: modelId -> backend kind + invocation defaults.

Adding a model is one entry here; adding a backend is one entry in
``infra.llm.factory``. Nothing else switches on model names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from turbocontent.core.domain.exceptions import InvalidModelError
from turbocontent.core.domain.schemas import BackendKind


@dataclass(frozen=True)
class ProviderRoute:
    model_id: str
    backend: BackendKind
    model_name: str
    label: str
    default_temperature: Optional[float] = 0.7
    reasoning_effort: Optional[str] = None
    accepts_temperature: bool = True
    max_temperature: float = 2.0
    supports_image: bool = False


def _route(model_id: str, backend: BackendKind, label: str, **kwargs) -> ProviderRoute:
    return ProviderRoute(
        model_id=model_id,
        backend=backend,
        model_name=kwargs.pop("model_name", model_id),
        label=label,
        **kwargs,
    )


MODEL_ROUTES: Mapping[str, ProviderRoute] = {
    r.model_id: r
    for r in (
        _route("gpt-4o-mini", BackendKind.OPENAI, "GPT-4o mini"),
        _route("gpt-4o", BackendKind.OPENAI, "GPT-4o"),
        # reasoning models reject temperature
        _route(
            "o3-mini", BackendKind.OPENAI, "o3-mini (high reasoning)",
            default_temperature=None, reasoning_effort="high", accepts_temperature=False,
        ),
        # messages API caps temperature at 1.0
        _route(
            "claude-3-7-sonnet-20250219", BackendKind.ANTHROPIC, "Claude 3.7 Sonnet",
            max_temperature=1.0,
        ),
        _route(
            "claude-3-5-haiku-20241022", BackendKind.ANTHROPIC, "Claude 3.5 Haiku",
            max_temperature=1.0,
        ),
        _route("gemini-2.0-flash", BackendKind.GEMINI, "Gemini 2.0 Flash"),
        _route(
            "gemini-2.0-flash-exp-image-generation", BackendKind.GEMINI,
            "Gemini 2.0 Flash (text + images)", supports_image=True,
        ),
        _route("grok-2-latest", BackendKind.GROK, "Grok 2", default_temperature=0.0),
        _route("deepseek-chat", BackendKind.DEEPSEEK, "DeepSeek V3"),
        _route("deepseek-reasoner", BackendKind.DEEPSEEK, "DeepSeek R1"),
    )
}


def get_route(model_id: str, routes: Mapping[str, ProviderRoute] = MODEL_ROUTES) -> ProviderRoute:
    """Resolve *model_id* or raise InvalidModelError. Never falls back."""
    route = routes.get(model_id)
    if route is None:
        raise InvalidModelError(model_id)
    return route


def routes_for_backends(
    backends: Iterable[BackendKind],
    routes: Mapping[str, ProviderRoute] = MODEL_ROUTES,
) -> dict[str, ProviderRoute]:
    """Subset of *routes* served by the given backends."""
    enabled = set(backends)
    return {mid: r for mid, r in routes.items() if r.backend in enabled}
