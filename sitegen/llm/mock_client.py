"""Mock provider client for testing."""

from __future__ import annotations

import asyncio
from typing import Callable

from sitegen.llm.client import (
    IMAGE,
    TEXT,
    ImageRequest,
    ImageResponse,
    LLMResponse,
    ProviderClient,
    TextRequest,
)


class MockProviderClient(ProviderClient):
    """Mock provider client for testing without API calls."""

    def __init__(
        self,
        provider_id: str = "mock",
        kind: str = TEXT,
        responses: dict[str, str] | None = None,
        default_response: str = "{}",
        response_fn: Callable[[str, str], str] | None = None,
        fail: bool = False,
        fail_prompts: list[str] | None = None,
        delay: float = 0.0,
        image_url: str = "https://images.example.com/mock.png",
    ):
        """Initialize mock client.

        Args:
            provider_id: Identifier to register under.
            kind: "text" or "image".
            responses: Dict mapping prompt substrings to responses.
            default_response: Default response if no match found.
            response_fn: Function of (system_prompt, user_prompt) returning content.
            fail: Raise ConnectionError on every call.
            fail_prompts: Raise only when the prompt contains one of these.
            delay: Seconds to sleep before answering.
            image_url: Base URL returned for image requests.
        """
        self.provider_id = provider_id
        self.kind = kind
        self.responses = responses or {}
        self.default_response = default_response
        self.response_fn = response_fn
        self.fail = fail
        self.fail_prompts = fail_prompts or []
        self.delay = delay
        self.image_url = image_url
        self.call_history: list[dict] = []

    async def invoke(self, request: TextRequest | ImageRequest) -> LLMResponse | ImageResponse:
        """Return a canned response, optionally after a delay or failure."""
        if isinstance(request, ImageRequest):
            prompt = request.prompt
            self.call_history.append({"prompt": prompt, "size": request.size})
        else:
            prompt = f"{request.system_prompt}\n{request.user_prompt}"
            self.call_history.append({
                "system_prompt": request.system_prompt,
                "user_prompt": request.user_prompt,
                "max_tokens": request.max_tokens,
                "temperature": request.temperature,
            })

        if self.delay:
            await asyncio.sleep(self.delay)

        if self.fail or any(trigger in prompt for trigger in self.fail_prompts):
            raise ConnectionError(f"{self.provider_id} unavailable")

        if self.kind == IMAGE or isinstance(request, ImageRequest):
            return ImageResponse(
                url=f"{self.image_url}?n={self.call_count}",
                model="mock-image",
                revised_prompt=prompt,
            )

        if self.response_fn:
            content = self.response_fn(request.system_prompt, request.user_prompt)
        else:
            content = self.default_response
            for key, response in self.responses.items():
                if key in request.user_prompt or key in request.system_prompt:
                    content = response
                    break

        return LLMResponse(
            content=content,
            model="mock",
            usage={"input_tokens": 100, "output_tokens": 50, "total_tokens": 150},
        )

    def add_response(self, trigger: str, response: str) -> None:
        """Add a response mapping."""
        self.responses[trigger] = response

    def clear_history(self) -> None:
        """Clear call history."""
        self.call_history = []

    @property
    def last_call(self) -> dict | None:
        """Get the last call made."""
        return self.call_history[-1] if self.call_history else None

    @property
    def call_count(self) -> int:
        """Get number of calls made."""
        return len(self.call_history)
