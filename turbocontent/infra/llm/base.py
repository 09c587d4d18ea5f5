"""TextBackend Protocol – core contract for all provider adapters."""

from __future__ import annotations

from typing import Protocol

from turbocontent.core.domain.generation import BackendRequest


class TextBackend(Protocol):
    """Every provider must implement this interface.

    One call is one network round trip: no retries, no streaming. SDK
    exceptions propagate unchanged; the dispatcher wraps them.
    """

    provider: str

    async def generate(self, request: BackendRequest) -> str:
        """Return the model's primary text response."""
        ...
