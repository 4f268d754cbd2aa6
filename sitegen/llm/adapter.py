"""Provider adapter: timeouts, cancellation and uniform results over provider clients."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections import Counter
from dataclasses import dataclass
from typing import Mapping

from sitegen.cancellation import CancellationToken
from sitegen.config.settings import GeneratorSettings, ProviderSettings
from sitegen.errors import ConfigurationError
from sitegen.llm.client import (
    AnthropicClient,
    ImageRequest,
    ImageResponse,
    LLMResponse,
    OpenAICompatibleClient,
    OpenAIImageClient,
    ProviderClient,
    TextRequest,
)
from sitegen.result import ErrorKind, StageResult

logger = logging.getLogger(__name__)


@dataclass
class ProviderRegistration:
    """A provider id bound to a client and its per-call timeout."""

    provider_id: str
    client: ProviderClient
    timeout_seconds: float = 30.0

    @property
    def kind(self) -> str:
        return self.client.kind


def _drain(task: asyncio.Future) -> None:
    # Abandoned calls may still finish with an error; read it so asyncio
    # does not report it as never retrieved.
    if not task.cancelled():
        task.exception()


class ProviderAdapter:
    """Uniform entry point to every registered provider.

    invoke() never raises for provider problems and never retries:
    timeouts and transport errors come back as PROVIDER_UNAVAILABLE,
    cancellation as CANCELLED.
    """

    def __init__(self) -> None:
        self._registrations: dict[str, ProviderRegistration] = {}
        self.call_counts: Counter[str] = Counter()

    def register(
        self,
        provider_id: str,
        client: ProviderClient,
        timeout_seconds: float = 30.0,
    ) -> ProviderRegistration:
        """Register a client under an identifier.

        Args:
            provider_id: Identifier stages use to address the provider.
            client: The provider client.
            timeout_seconds: Per-call timeout.

        Returns:
            The new registration.
        """
        if timeout_seconds <= 0:
            raise ConfigurationError(f"Provider {provider_id}: timeout must be positive")
        registration = ProviderRegistration(provider_id, client, timeout_seconds)
        self._registrations[provider_id] = registration
        return registration

    def unregister(self, provider_id: str) -> None:
        self._registrations.pop(provider_id, None)

    def is_registered(self, provider_id: str) -> bool:
        return provider_id in self._registrations

    def get(self, provider_id: str) -> ProviderRegistration | None:
        return self._registrations.get(provider_id)

    @property
    def provider_ids(self) -> list[str]:
        return list(self._registrations)

    def available(self, provider_ids: list[str]) -> list[str]:
        """Filter a priority list down to registered providers, keeping order."""
        return [pid for pid in provider_ids if pid in self._registrations]

    def call_count(self, provider_id: str | None = None) -> int:
        """Calls started, for one provider or in total."""
        if provider_id is None:
            return sum(self.call_counts.values())
        return self.call_counts[provider_id]

    async def invoke(
        self,
        provider_id: str,
        request: TextRequest | ImageRequest,
        cancel_token: CancellationToken | None = None,
    ) -> StageResult[LLMResponse | ImageResponse]:
        """Send one request through a registered provider.

        Args:
            provider_id: Registered provider identifier.
            request: Provider-specific request payload.
            cancel_token: Aborts the in-flight call when cancelled.

        Returns:
            StageResult wrapping the raw provider response.
        """
        registration = self._registrations.get(provider_id)
        if registration is None:
            return StageResult.failure(
                ErrorKind.PROVIDER_UNAVAILABLE,
                f"Provider not registered: {provider_id}",
                provider_id=provider_id,
            )

        if cancel_token is not None and cancel_token.cancelled:
            return StageResult.failure(
                ErrorKind.CANCELLED,
                "Cancelled before provider call",
                provider_id=provider_id,
            )

        self.call_counts[provider_id] += 1
        started = time.monotonic()
        call = asyncio.ensure_future(registration.client.invoke(request))
        waiters: set[asyncio.Future] = {call}
        cancel_wait = None
        if cancel_token is not None:
            cancel_wait = asyncio.ensure_future(cancel_token.wait())
            waiters.add(cancel_wait)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=registration.timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            call.cancel()
            raise
        finally:
            if cancel_wait is not None and not cancel_wait.done():
                cancel_wait.cancel()

        latency_ms = (time.monotonic() - started) * 1000

        if call in done:
            try:
                response = call.result()
            except Exception as e:
                logger.warning(
                    "provider=%s outcome=error latency_ms=%.0f error=%s",
                    provider_id, latency_ms, e,
                )
                return StageResult.failure(
                    ErrorKind.PROVIDER_UNAVAILABLE,
                    f"{type(e).__name__}: {e}",
                    provider_id=provider_id,
                )
            logger.info("provider=%s outcome=ok latency_ms=%.0f", provider_id, latency_ms)
            return StageResult.success(response, provider_id=provider_id)

        call.cancel()
        call.add_done_callback(_drain)

        if cancel_wait is not None and cancel_wait in done:
            logger.info("provider=%s outcome=cancelled latency_ms=%.0f", provider_id, latency_ms)
            return StageResult.failure(
                ErrorKind.CANCELLED,
                cancel_token.reason or "Cancelled during provider call",
                provider_id=provider_id,
            )

        logger.warning(
            "provider=%s outcome=timeout latency_ms=%.0f timeout_s=%s",
            provider_id, latency_ms, registration.timeout_seconds,
        )
        return StageResult.failure(
            ErrorKind.PROVIDER_UNAVAILABLE,
            f"Timed out after {registration.timeout_seconds}s",
            provider_id=provider_id,
        )

    async def aclose(self) -> None:
        """Close every registered client."""
        for registration in self._registrations.values():
            await registration.client.aclose()


def create_client(provider: ProviderSettings, api_key: str) -> ProviderClient:
    """Instantiate the client implementation for a provider's vendor."""
    if provider.vendor == "anthropic":
        return AnthropicClient(
            provider_id=provider.provider_id,
            api_key=api_key,
            model=provider.model,
            timeout=provider.timeout_seconds,
        )
    if provider.vendor == "openai":
        return OpenAICompatibleClient(
            provider_id=provider.provider_id,
            api_key=api_key,
            model=provider.model,
            base_url=provider.base_url,
            timeout=provider.timeout_seconds,
        )
    if provider.vendor == "openai-images":
        return OpenAIImageClient(
            provider_id=provider.provider_id,
            api_key=api_key,
            model=provider.model,
            base_url=provider.base_url,
            timeout=provider.timeout_seconds,
        )
    raise ConfigurationError(f"Provider {provider.provider_id}: unknown vendor '{provider.vendor}'")


def build_adapter(
    settings: GeneratorSettings,
    env: Mapping[str, str] | None = None,
) -> ProviderAdapter:
    """Register every enabled provider whose API key is available.

    Providers without a key are skipped, so a machine with no keys
    gets an empty adapter and every stage runs its fallback.
    """
    env = os.environ if env is None else env
    adapter = ProviderAdapter()

    for provider in settings.providers.values():
        if not provider.enabled:
            continue
        api_key = provider.resolve_api_key(env)
        if not api_key:
            logger.debug("provider=%s skipped: no API key in %s", provider.provider_id, provider.api_key_env)
            continue
        adapter.register(
            provider.provider_id,
            create_client(provider, api_key),
            timeout_seconds=provider.timeout_seconds,
        )

    return adapter
