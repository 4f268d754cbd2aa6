"""Image generator stage: concurrent per-image generation with placeholders."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

from sitegen.config.business import BusinessConfiguration
from sitegen.config.settings import IMAGE
from sitegen.llm.client import ImageRequest, ImageResponse
from sitegen.result import ErrorKind, StageResult
from sitegen.stages.base import CALLING_PROVIDER, FALLBACK, BaseStage, StageContext
from sitegen.stages.schemas import ImageAsset, ImageSet, ImageSpec

logger = logging.getLogger(__name__)

SIZES = {
    "hero": "1792x1024",
    "background": "1792x1024",
    "supporting": "1024x1024",
    "icon": "1024x1024",
}


def placeholder_url(spec: ImageSpec) -> str:
    size = SIZES.get(spec.purpose, "1024x1024")
    return f"https://placehold.co/{size}?text={quote(spec.section_key)}"


def placeholder_asset(spec: ImageSpec, error: str) -> ImageAsset:
    return ImageAsset(
        section_key=spec.section_key,
        purpose=spec.purpose,
        url=placeholder_url(spec),
        alt=spec.alt,
        placeholder=True,
        error=error,
    )


class ImageGeneratorStage(BaseStage):
    """Generates every planned image independently and concurrently.

    The returned ImageSet always holds one StageResult per planned image.
    A failed image becomes a placeholder flagged used_fallback; it never
    reduces the set or fails the stage.
    """

    stage_id = "image_generator"
    description = "Image generation"
    kind = IMAGE
    inputs = ("image_planner",)

    async def execute(
        self,
        inputs: dict[str, Any],
        config: BusinessConfiguration,
        context: StageContext,
    ) -> StageResult:
        missing = config.missing_fields(self.required_fields)
        if missing:
            return StageResult.failure(
                ErrorKind.CONFIGURATION_INVALID,
                f"{self.stage_id} requires: {', '.join(missing)}",
            )

        specs: list[ImageSpec] = inputs["image_planner"]
        providers = context.available_providers()

        if not providers:
            logger.info("%s: path=fallback reason=no provider configured", self.stage_id)
            context.report(FALLBACK, "fallback invoked")
            return StageResult.success(
                self.fallback(inputs, config),
                used_fallback=True,
                message="fallback: no provider configured",
            )

        semaphore = asyncio.Semaphore(max(1, context.max_concurrency))
        finished = 0
        total = len(specs)
        context.report(CALLING_PROVIDER, f"generating {total} images")

        async def generate(spec: ImageSpec) -> StageResult:
            nonlocal finished
            async with semaphore:
                result = await self._generate_one(spec, providers, context)
            finished += 1
            context.report(
                CALLING_PROVIDER + (70 * finished) // max(total, 1),
                f"image {finished}/{total} done",
            )
            return result

        results = await asyncio.gather(*(generate(spec) for spec in specs))

        if any(r.is_cancelled for r in results):
            return StageResult.failure(ErrorKind.CANCELLED, "Image generation cancelled")

        image_set = ImageSet(results=list(results))
        used_fallback = any(r.used_fallback for r in results)
        logger.info(
            "%s: generated=%d placeholders=%d",
            self.stage_id, image_set.generated_count, image_set.placeholder_count,
        )
        return StageResult.success(
            image_set,
            used_fallback=used_fallback,
            message=f"{image_set.generated_count}/{total} images generated",
        )

    async def _generate_one(
        self,
        spec: ImageSpec,
        providers: list[str],
        context: StageContext,
    ) -> StageResult:
        request = self.build_request_for(spec)
        last_error = "no provider succeeded"

        for provider_id in providers:
            response = await context.adapter.invoke(provider_id, request, context.cancel_token)
            if response.is_cancelled:
                return StageResult.failure(ErrorKind.CANCELLED, response.message, provider_id=provider_id)
            if response.is_success and isinstance(response.value, ImageResponse):
                return StageResult.success(
                    ImageAsset(
                        section_key=spec.section_key,
                        purpose=spec.purpose,
                        url=response.value.url,
                        alt=spec.alt,
                        provider_id=provider_id,
                    ),
                    provider_id=provider_id,
                )
            last_error = response.message or "unexpected response"
            logger.warning(
                "%s: %s failed on %s (%s)",
                self.stage_id, spec.section_key, provider_id, last_error,
            )

        return StageResult.success(
            placeholder_asset(spec, last_error),
            used_fallback=True,
            message=last_error,
        )

    def build_request_for(self, spec: ImageSpec) -> ImageRequest:
        """Image request for one planned image. Pure."""
        return ImageRequest(
            prompt=spec.prompt,
            size=SIZES.get(spec.purpose, "1024x1024"),
            quality="hd" if spec.purpose == "hero" else "standard",
            style_hint=spec.style_hint,
        )

    def build_request(self, inputs: dict[str, Any], config: BusinessConfiguration) -> list[ImageRequest]:
        return [self.build_request_for(spec) for spec in inputs["image_planner"]]

    def fallback(self, inputs: dict[str, Any], config: BusinessConfiguration) -> ImageSet:
        specs: list[ImageSpec] = inputs["image_planner"]
        return ImageSet(results=[
            StageResult.success(
                placeholder_asset(spec, "no image provider configured"),
                used_fallback=True,
            )
            for spec in specs
        ])
