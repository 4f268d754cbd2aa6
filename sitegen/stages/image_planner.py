"""Image planner stage: decides which images the site needs. No network calls."""

from __future__ import annotations

import logging
from typing import Any

from sitegen.config.business import BusinessConfiguration
from sitegen.result import ErrorKind, StageResult
from sitegen.stages.base import FALLBACK, BaseStage, StageContext
from sitegen.stages.industry import industry_category
from sitegen.stages.schemas import ImageSpec, Layout, StyleSystem

logger = logging.getLogger(__name__)

HERO_PROMPTS = {
    "legal": (
        "Professional law office interior with modern furniture, legal books, "
        "and serious atmosphere, clean lighting"
    ),
    "technology": (
        "Modern cloud dashboard UI with data visualizations, abstract tech elements, "
        "clean minimal design"
    ),
    "restaurant": (
        "Inviting restaurant interior with plated signature dishes on the table, "
        "warm ambient lighting"
    ),
    "healthcare": (
        "Bright modern clinic reception with friendly staff, clean and calming atmosphere"
    ),
    "finance": (
        "Confident financial advisors reviewing charts in a modern glass office, "
        "natural daylight"
    ),
    "real-estate": (
        "Elegant modern home exterior at golden hour with landscaped front garden"
    ),
}

MARINE_PROMPT = (
    "Underwater marine biology research scene with coral reefs, marine life, "
    "scientific equipment, cool teal lighting"
)

ALT_STOPWORDS = {"the", "and", "with", "from", "that", "this", "image", "photo", "picture"}


def alt_from_prompt(prompt: str) -> str:
    """Short alt text built from the most descriptive words of a prompt."""
    words = [w.strip(",.;:") for w in prompt.lower().split()]
    important = [w for w in words if len(w) > 4 and w not in ALT_STOPWORDS][:5]
    return " ".join(important) or "Website image"


def style_hints(style: StyleSystem | None) -> str:
    """Describe the palette and typography for image prompts."""
    if style is None:
        return ""
    hints = []

    red = int(style.primary_color[1:3], 16)
    blue = int(style.primary_color[5:7], 16)
    if blue > red:
        hints.append("cool blue tones")
    elif red > blue:
        hints.append("warm tones")

    background = style.background_color.upper()
    if background in ("#FFFFFF", "#F8FAFC") or int(background[1:3], 16) > 0xE0:
        hints.append("bright airy composition")
    else:
        hints.append("dark moody composition")

    if any(name in style.font_heading for name in ("Playfair", "Merriweather", "Serif")):
        hints.append("classic editorial feel")
    else:
        hints.append("clean modern aesthetic")

    return ", ".join(hints)


class ImagePlannerStage(BaseStage):
    """Plans images for the laid-out sections.

    Always rule-based, so every result carries used_fallback=True.
    """

    stage_id = "image_planner"
    description = "Image planning"
    inputs = ("layout_generator", "style_designer")

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

        context.report(FALLBACK, "planning images")
        plan = self.fallback(inputs, config)
        logger.info("%s: planned %d images", self.stage_id, len(plan))
        return StageResult.success(plan, used_fallback=True, message="rule-based plan")

    def fallback(self, inputs: dict[str, Any], config: BusinessConfiguration) -> list[ImageSpec]:
        layout: Layout = inputs["layout_generator"]
        style: StyleSystem | None = inputs.get("style_designer")
        industry = config.industry.lower() or "business"
        hint = style_hints(style)

        plans: list[ImageSpec] = []
        for section in layout.all_sections():
            if section.type == "hero":
                prompt = self._hero_prompt(industry)
                plans.append(ImageSpec(
                    section_key=section.key,
                    purpose="hero",
                    prompt=prompt,
                    placement="hero-banner",
                    alt=alt_from_prompt(prompt),
                    style_hint=hint,
                ))
            elif section.type == "about":
                prompt = f"Professional {industry} team or office environment"
                plans.append(ImageSpec(
                    section_key=section.key,
                    purpose="supporting",
                    prompt=prompt,
                    placement="inline",
                    alt=f"{industry} about image",
                    style_hint=hint,
                ))
            elif section.type in ("features", "services"):
                prompt = f"Simple icon-style illustration representing {industry} features"
                plans.append(ImageSpec(
                    section_key=section.key,
                    purpose="icon",
                    prompt=prompt,
                    placement="card",
                    alt=f"{industry} feature icon",
                    style_hint=hint,
                ))

        return plans

    def _hero_prompt(self, industry: str) -> str:
        if "marine" in industry or "ocean" in industry:
            return MARINE_PROMPT
        category = industry_category(industry)
        return HERO_PROMPTS.get(category, f"Professional {industry} hero image")
