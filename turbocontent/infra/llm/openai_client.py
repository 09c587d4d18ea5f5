"""OpenAI backend – chat completions, reasoning effort for o-series models."""

from .openai_compatible import OpenAICompatibleBackend


class OpenAIBackend(OpenAICompatibleBackend):
    provider = "openai"
    BASE_URL = "https://api.openai.com/v1"
    # high reasoning effort can take minutes
    TIMEOUT_S = 300.0
