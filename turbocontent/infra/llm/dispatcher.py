"""ProviderDispatcher – one table lookup from modelId to backend handler."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Mapping, Optional

from turbocontent.core.domain.exceptions import (
    ImageProcessingError,
    InvalidRequestError,
    ProviderError,
)
from turbocontent.core.domain.generation import BackendRequest, InlineImage
from turbocontent.core.domain.schemas import BackendKind
from turbocontent.core.model_registry import (
    MODEL_ROUTES,
    ProviderRoute,
    get_route,
    routes_for_backends,
)

from .base import TextBackend
from .failures import ProviderFailure, classify_exception

logger = logging.getLogger(__name__)


class ProviderDispatcher:
    """Routes generation requests to injected backends.

    Routes whose backend was not supplied are dropped, so their modelIds
    behave exactly like unknown ones.
    """

    def __init__(
        self,
        backends: Mapping[BackendKind, TextBackend],
        routes: Mapping[str, ProviderRoute] = MODEL_ROUTES,
    ) -> None:
        self._backends = dict(backends)
        self._routes = routes_for_backends(self._backends, routes)

    @property
    def routes(self) -> list[ProviderRoute]:
        return list(self._routes.values())

    def resolve(self, model_id: str) -> ProviderRoute:
        return get_route(model_id, self._routes)

    def validate(
        self,
        model_id: str,
        *,
        temperature: Optional[float] = None,
        image: Optional[InlineImage] = None,
    ) -> ProviderRoute:
        """Resolve *model_id* and reject parameters its route cannot take.

        Makes no network call, so callers can run it before spending quota.
        """
        route = self.resolve(model_id)
        if image is not None and not route.supports_image:
            raise InvalidRequestError(f"Model '{model_id}' does not accept image input")
        if (
            temperature is not None
            and route.accepts_temperature
            and not 0.0 <= temperature <= route.max_temperature
        ):
            raise InvalidRequestError(
                f"Model '{model_id}' accepts temperature between 0 and {route.max_temperature:g}"
            )
        return route

    def _build_request(
        self,
        route: ProviderRoute,
        prompt: str,
        temperature: Optional[float],
        image: Optional[InlineImage],
    ) -> BackendRequest:
        if not route.accepts_temperature:
            temperature = None
        elif temperature is None:
            temperature = route.default_temperature
        return BackendRequest(
            prompt=prompt,
            model_name=route.model_name,
            temperature=temperature,
            reasoning_effort=route.reasoning_effort,
            image=image,
            image_output=route.supports_image,
        )

    async def generate(
        self,
        prompt: str,
        model_id: str,
        temperature: Optional[float] = None,
        *,
        image: Optional[InlineImage] = None,
    ) -> str:
        """Generate text for *prompt* with the backend behind *model_id*.

        Raises:
            InvalidRequestError: empty prompt, an image for a text-only model,
                or a temperature outside the route's range.
            InvalidModelError: *model_id* is not routable. No network call is made.
            ProviderError: the backend call failed. Never retried.
        """
        if not prompt or not prompt.strip():
            raise InvalidRequestError("Prompt must not be empty")

        route = self.validate(model_id, temperature=temperature, image=image)

        backend = self._backends[route.backend]
        request = self._build_request(route, prompt, temperature, image)
        provider = route.backend.value

        t0 = time.perf_counter()
        try:
            text = await backend.generate(request)
        except asyncio.CancelledError:
            raise
        except ProviderError as exc:
            logger.error("Provider %s returned unusable output for %s: %s", provider, model_id, exc.detail)
            raise
        except ImageProcessingError as exc:
            logger.error("Provider %s image post-processing failed for %s: %s", provider, model_id, exc)
            raise ProviderError(
                provider, "generated image could not be processed",
                failure=ProviderFailure.MALFORMED_RESPONSE.value,
            ) from exc
        except Exception as exc:
            failure = classify_exception(exc)
            logger.error(
                "Provider %s call failed for %s (%s): %s",
                provider, model_id, failure.value, exc,
            )
            # SDK messages can echo key fragments; keep them out of the detail
            raise ProviderError(
                provider, f"request failed ({failure.value})", failure=failure.value,
            ) from exc

        latency = int((time.perf_counter() - t0) * 1000)
        logger.info("Generated %d chars with %s/%s in %dms", len(text), provider, model_id, latency)
        return text
