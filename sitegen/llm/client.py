"""Provider clients for text and image generation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import anthropic
import httpx
import openai

from sitegen.config.settings import IMAGE, TEXT


@dataclass(frozen=True)
class TextRequest:
    """Prompt for a text-completion provider."""

    system_prompt: str
    user_prompt: str
    max_tokens: int = 2048
    temperature: float = 0.7
    json_mode: bool = True


@dataclass(frozen=True)
class ImageRequest:
    """Specification for an image-generation provider."""

    prompt: str
    size: str = "1792x1024"
    quality: str = "standard"
    style_hint: str = ""

    @property
    def full_prompt(self) -> str:
        if self.style_hint:
            return f"{self.prompt}. Style: {self.style_hint}"
        return self.prompt


@dataclass
class LLMResponse:
    """Response from a text provider."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    finish_reason: str = "stop"
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        """Total tokens used."""
        return self.usage.get("total_tokens", 0)


@dataclass
class ImageResponse:
    """Response from an image provider."""

    url: str
    model: str
    revised_prompt: str | None = None


class ProviderClient(ABC):
    """Uniform interface over one external generation provider.

    Clients raise on transport or API errors. The ProviderAdapter turns
    those into StageResult failures and enforces timeouts.
    """

    provider_id: str = "provider"
    kind: str = TEXT

    @abstractmethod
    async def invoke(self, request: TextRequest | ImageRequest) -> LLMResponse | ImageResponse:
        """Send one request to the provider.

        Args:
            request: TextRequest for text providers, ImageRequest for image providers.

        Returns:
            LLMResponse or ImageResponse.
        """
        pass

    async def aclose(self) -> None:
        """Release network resources held by the client."""
        return None


class AnthropicClient(ProviderClient):
    """Claude Messages API client."""

    kind = TEXT

    def __init__(
        self,
        provider_id: str = "anthropic",
        api_key: str | None = None,
        model: str = "claude-3-5-haiku-latest",
        timeout: float = 30.0,
    ):
        """Initialize Claude client.

        Args:
            provider_id: Identifier the adapter registers this client under.
            api_key: Anthropic API key. If None, uses ANTHROPIC_API_KEY env var.
            model: Model ID to use.
            timeout: SDK-level request timeout in seconds.
        """
        self.provider_id = provider_id
        self.model = model
        # SDK retries off; the stage falls through to the next provider instead
        self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def invoke(self, request: TextRequest) -> LLMResponse:
        """Generate a completion using Claude."""
        system = request.system_prompt
        if request.json_mode:
            system = f"{system}\n\nRespond with a single JSON object and nothing else."

        message = await self._client.messages.create(
            model=self.model,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            system=system,
            messages=[
                {"role": "user", "content": request.user_prompt}
            ],
        )

        return LLMResponse(
            content=message.content[0].text,
            model=message.model,
            usage={
                "input_tokens": message.usage.input_tokens,
                "output_tokens": message.usage.output_tokens,
                "total_tokens": message.usage.input_tokens + message.usage.output_tokens,
            },
            finish_reason=message.stop_reason or "stop",
        )

    async def aclose(self) -> None:
        await self._client.close()


class OpenAICompatibleClient(ProviderClient):
    """Chat-completions client for OpenAI and OpenAI-compatible endpoints.

    Gemini is reached through its OpenAI-compatible base URL, so the same
    client serves both vendors.
    """

    kind = TEXT

    def __init__(
        self,
        provider_id: str = "openai",
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            provider_id: Identifier the adapter registers this client under.
            api_key: API key for the endpoint.
            model: Model name.
            base_url: Endpoint override; None means api.openai.com.
            timeout: Read/write timeout in seconds.
        """
        self.provider_id = provider_id
        self.model = model
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=10.0, read=timeout, write=timeout, pool=10.0),
        )
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            http_client=self._http_client,
            max_retries=0,
        )

    async def invoke(self, request: TextRequest) -> LLMResponse:
        """Generate a chat completion."""
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.user_prompt})

        kwargs: dict[str, Any] = {}
        if request.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=request.max_tokens,
            temperature=request.temperature,
            **kwargs,
        )

        choice = response.choices[0]
        usage = {}
        if response.usage is not None:
            usage = {
                "input_tokens": response.usage.prompt_tokens,
                "output_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            usage=usage,
            finish_reason=choice.finish_reason or "stop",
        )

    async def aclose(self) -> None:
        await self._client.close()


class OpenAIImageClient(ProviderClient):
    """OpenAI images API client."""

    kind = IMAGE

    def __init__(
        self,
        provider_id: str = "openai-images",
        api_key: str | None = None,
        model: str = "dall-e-3",
        base_url: str | None = None,
        timeout: float = 90.0,
    ):
        self.provider_id = provider_id
        self.model = model
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(connect=10.0, read=timeout, write=timeout, pool=10.0),
        )
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            http_client=self._http_client,
            max_retries=0,
        )

    async def invoke(self, request: ImageRequest) -> ImageResponse:
        """Generate a single image and return its URL."""
        response = await self._client.images.generate(
            model=self.model,
            prompt=request.full_prompt,
            size=request.size,
            quality=request.quality,
            n=1,
        )

        image = response.data[0]
        if not image.url:
            raise ValueError(f"{self.provider_id} returned no image URL")

        return ImageResponse(
            url=image.url,
            model=self.model,
            revised_prompt=getattr(image, "revised_prompt", None),
        )

    async def aclose(self) -> None:
        await self._client.close()
