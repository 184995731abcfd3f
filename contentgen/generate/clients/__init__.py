# Model clients. Each exposes generate(messages) -> (text, meta).

from contentgen.errors import ProviderConfigError
from .echo_dev_client import EchoDevClient
from .gemini_client import GeminiClient
from .openai_client import OpenAIClient

CLIENTS = {
    OpenAIClient.engine: OpenAIClient,
    GeminiClient.engine: GeminiClient,
}


def build_model_client(provider: str, settings):
    """Instantiate the client registered for `provider` from settings."""
    cls = CLIENTS.get(provider)
    if cls is None:
        raise ProviderConfigError(f"Unknown LLM provider: {provider}")
    return cls.from_settings(settings)


__all__ = ["CLIENTS", "EchoDevClient", "GeminiClient", "OpenAIClient", "build_model_client"]
