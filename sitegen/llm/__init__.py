"""Provider clients and the provider adapter."""

from sitegen.llm.adapter import ProviderAdapter, ProviderRegistration, build_adapter
from sitegen.llm.client import (
    IMAGE,
    TEXT,
    AnthropicClient,
    ImageRequest,
    ImageResponse,
    LLMResponse,
    OpenAICompatibleClient,
    OpenAIImageClient,
    ProviderClient,
    TextRequest,
)
from sitegen.llm.mock_client import MockProviderClient

__all__ = [
    "IMAGE",
    "TEXT",
    "AnthropicClient",
    "ImageRequest",
    "ImageResponse",
    "LLMResponse",
    "MockProviderClient",
    "OpenAICompatibleClient",
    "OpenAIImageClient",
    "ProviderAdapter",
    "ProviderClient",
    "ProviderRegistration",
    "TextRequest",
    "build_adapter",
]
