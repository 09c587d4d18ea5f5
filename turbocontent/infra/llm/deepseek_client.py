"""DeepSeek backend – OpenAI-compatible, just a different base URL."""

from .openai_compatible import OpenAICompatibleBackend


class DeepSeekBackend(OpenAICompatibleBackend):
    provider = "deepseek"
    BASE_URL = "https://api.deepseek.com"
    TIMEOUT_S = 180.0
