"""Grok (xAI) backend – OpenAI-compatible, different base URL."""

from .openai_compatible import OpenAICompatibleBackend


class GrokBackend(OpenAICompatibleBackend):
    provider = "grok"
    BASE_URL = "https://api.x.ai/v1"
