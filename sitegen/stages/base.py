"""Base class and shared helpers for generation stages."""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable

from sitegen.cancellation import CancellationToken
from sitegen.config.business import BusinessConfiguration
from sitegen.config.settings import TEXT
from sitegen.errors import MalformedResponseError
from sitegen.llm.adapter import ProviderAdapter
from sitegen.llm.client import LLMResponse, TextRequest
from sitegen.result import ErrorKind, StageResult

logger = logging.getLogger(__name__)

# Progress milestones a stage reports while running.
BUILDING_REQUEST = 10
CALLING_PROVIDER = 20
VALIDATING = 80
FALLBACK = 85

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)


def extract_json(text: str) -> Any:
    """Parse JSON out of a model completion.

    Accepts bare JSON, fenced ```json blocks, or JSON surrounded by prose.

    Raises:
        MalformedResponseError: If no JSON value can be decoded.
    """
    if not text or not text.strip():
        raise MalformedResponseError("Empty response", payload=text)

    candidates = [text.strip()]
    fenced = _FENCE_PATTERN.search(text)
    if fenced:
        candidates.insert(0, fenced.group(1).strip())

    for opener, closer in (("{", "}"), ("[", "]")):
        start = text.find(opener)
        end = text.rfind(closer)
        if start != -1 and end > start:
            candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue

    raise MalformedResponseError("Response is not valid JSON", payload=text)


def require(data: Any, key: str, kind: type | tuple[type, ...] = str) -> Any:
    """Fetch a required field from a decoded response.

    Raises:
        MalformedResponseError: If the field is absent, empty or of the wrong type.
    """
    if not isinstance(data, dict):
        raise MalformedResponseError("Expected a JSON object", payload=data)
    value = data.get(key)
    if value is None or not isinstance(value, kind):
        raise MalformedResponseError(f"Missing or invalid field '{key}'", payload=data)
    if isinstance(value, (str, list, dict)) and not value:
        raise MalformedResponseError(f"Empty field '{key}'", payload=data)
    return value


@dataclass
class StageContext:
    """Per-invocation collaborators handed to a stage by the scheduler.

    Attributes:
        stage_id: Stage being executed.
        adapter: Provider adapter, or None when running offline.
        provider_ids: Priority-ordered providers to try.
        cancel_token: Run-wide cancellation signal.
        reporter: Receives (stage_id, progress, message) milestones.
        max_concurrency: Fan-out bound for stages that call providers per item.
    """

    stage_id: str
    adapter: ProviderAdapter | None = None
    provider_ids: list[str] = field(default_factory=list)
    cancel_token: CancellationToken | None = None
    reporter: Callable[[str, int, str], None] | None = None
    max_concurrency: int = 10

    def report(self, progress: int, message: str) -> None:
        if self.reporter:
            self.reporter(self.stage_id, progress, message)

    def available_providers(self) -> list[str]:
        if self.adapter is None:
            return []
        return self.adapter.available(self.provider_ids)

    @property
    def cancelled(self) -> bool:
        return self.cancel_token is not None and self.cancel_token.cancelled


class BaseStage(ABC):
    """One generation phase with an AI path and a deterministic fallback.

    Subclasses provide build_request, validate and fallback. execute()
    tries each provider in priority order, validates the first usable
    response, and falls back to rule-based output when no provider is
    configured, every provider failed, or the response was malformed.
    """

    stage_id: str = ""
    description: str = ""
    kind: str = TEXT
    required_fields: tuple[str, ...] = ("project_name", "industry")
    inputs: tuple[str, ...] = ()

    system_prompt: str = "You are an expert website strategist. Return ONLY valid JSON."
    max_tokens: int = 2048
    temperature: float = 0.7

    async def execute(
        self,
        inputs: dict[str, Any],
        config: BusinessConfiguration,
        context: StageContext,
    ) -> StageResult:
        """Run the stage to a terminal StageResult.

        Args:
            inputs: Upstream stage values keyed by stage id.
            config: Business configuration.
            context: Adapter, providers, cancellation and progress sink.

        Returns:
            StageResult. Never raises for provider or validation problems.
        """
        missing = config.missing_fields(self.required_fields)
        if missing:
            logger.error("%s: configuration missing %s", self.stage_id, missing)
            return StageResult.failure(
                ErrorKind.CONFIGURATION_INVALID,
                f"{self.stage_id} requires: {', '.join(missing)}",
            )

        providers = context.available_providers()
        if not providers:
            logger.info("%s: path=fallback reason=no provider configured", self.stage_id)
            return self._fallback_result(inputs, config, context, "no provider configured")

        context.report(BUILDING_REQUEST, "building request")
        request = self.build_request(inputs, config)

        for index, provider_id in enumerate(providers):
            context.report(
                min(CALLING_PROVIDER + 20 * index, VALIDATING - 20),
                f"calling {provider_id}",
            )
            response = await context.adapter.invoke(provider_id, request, context.cancel_token)

            if response.is_cancelled:
                logger.info("%s: cancelled during %s", self.stage_id, provider_id)
                return StageResult.failure(
                    ErrorKind.CANCELLED, response.message, provider_id=provider_id
                )

            if not response.is_success:
                logger.warning(
                    "%s: provider %s failed (%s), trying next",
                    self.stage_id, provider_id, response.message,
                )
                continue

            context.report(VALIDATING, "validating response")
            try:
                value = self.parse(response.value, inputs, config)
            except MalformedResponseError as e:
                return self._malformed(e, provider_id, inputs, config, context)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                error = MalformedResponseError(f"{type(e).__name__}: {e}", payload=response.value)
                return self._malformed(error, provider_id, inputs, config, context)

            path = "primary provider" if index == 0 else "alternate provider"
            logger.info("%s: path=%s provider=%s", self.stage_id, path, provider_id)
            return StageResult.success(value, provider_id=provider_id, message=path)

        logger.info("%s: path=fallback reason=all providers failed", self.stage_id)
        return self._fallback_result(inputs, config, context, "all providers failed")

    def _malformed(
        self,
        error: MalformedResponseError,
        provider_id: str,
        inputs: dict[str, Any],
        config: BusinessConfiguration,
        context: StageContext,
    ) -> StageResult:
        logger.warning(
            "%s: malformed response from %s: %s payload=%.500r",
            self.stage_id, provider_id, error, error.payload,
        )
        return self._fallback_result(inputs, config, context, f"malformed response: {error}")

    def _fallback_result(
        self,
        inputs: dict[str, Any],
        config: BusinessConfiguration,
        context: StageContext,
        reason: str,
    ) -> StageResult:
        context.report(FALLBACK, "fallback invoked")
        value = self.fallback(inputs, config)
        return StageResult.success(value, used_fallback=True, message=f"fallback: {reason}")

    def parse(self, response: LLMResponse, inputs: dict[str, Any], config: BusinessConfiguration) -> Any:
        """Decode and validate a provider response."""
        return self.validate(extract_json(response.content), inputs, config)

    def text_request(self, payload: dict[str, Any], instructions: str = "") -> TextRequest:
        """Build a JSON-mode text request from a task payload."""
        user_prompt = json.dumps(payload, indent=2)
        if instructions:
            user_prompt = f"{user_prompt}\n\n{instructions}"
        return TextRequest(
            system_prompt=self.system_prompt,
            user_prompt=user_prompt,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

    def build_request(self, inputs: dict[str, Any], config: BusinessConfiguration) -> Any:
        """Build the provider request. Pure, no network access."""
        raise NotImplementedError(f"{self.stage_id} has no provider request")

    def validate(self, data: Any, inputs: dict[str, Any], config: BusinessConfiguration) -> Any:
        """Turn decoded JSON into the stage output.

        Raises:
            MalformedResponseError: If the structure violates the stage schema.
        """
        raise NotImplementedError(f"{self.stage_id} has no provider response")

    @abstractmethod
    def fallback(self, inputs: dict[str, Any], config: BusinessConfiguration) -> Any:
        """Deterministic rule-based output. Must not perform I/O."""
        pass
