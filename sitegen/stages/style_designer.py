"""Style designer stage: color palette and font pairing."""

from __future__ import annotations

import re
from typing import Any

from sitegen.config.business import BusinessConfiguration
from sitegen.errors import MalformedResponseError
from sitegen.llm.client import TextRequest
from sitegen.stages.base import BaseStage, require
from sitegen.stages.industry import industry_category
from sitegen.stages.schemas import StyleSystem


HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
FONT_NAME = re.compile(r"^[A-Za-z0-9 \-]+$")

COLOR_FIELDS = (
    ("primaryColor", "primary_color"),
    ("secondaryColor", "secondary_color"),
    ("accentColor", "accent_color"),
    ("backgroundColor", "background_color"),
    ("textColor", "text_color"),
)

# primary, secondary, accent, background, text
PALETTES: dict[str, tuple[str, str, str, str, str]] = {
    "technology": ("#3B82F6", "#1E40AF", "#06B6D4", "#0F172A", "#F8FAFC"),
    "healthcare": ("#10B981", "#059669", "#3B82F6", "#ECFDF5", "#065F46"),
    "finance": ("#1E3A5F", "#0F172A", "#D4AF37", "#FFFFFF", "#1E293B"),
    "restaurant": ("#DC2626", "#991B1B", "#F59E0B", "#FEF2F2", "#7F1D1D"),
    "legal": ("#1E3A5F", "#0C4A6E", "#B45309", "#FFFFFF", "#1E293B"),
    "real-estate": ("#1E40AF", "#1E3A8A", "#F59E0B", "#EFF6FF", "#1E3A8A"),
    "default": ("#3B82F6", "#2563EB", "#F59E0B", "#FFFFFF", "#1E293B"),
}

FONT_PAIRINGS: dict[str, tuple[str, str]] = {
    "legal": ("Playfair Display", "Source Sans Pro"),
    "finance": ("Merriweather", "Open Sans"),
    "restaurant": ("Playfair Display", "Lato"),
    "healthcare": ("Poppins", "Open Sans"),
    "technology": ("Inter", "Inter"),
    "real-estate": ("Montserrat", "Open Sans"),
    "default": ("Montserrat", "Open Sans"),
}


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(HEX_COLOR.match(value))


def is_font_name(value: Any) -> bool:
    return isinstance(value, str) and bool(FONT_NAME.match(value.strip()))


class StyleDesignerStage(BaseStage):
    """Designs the five-color palette and font pairing.

    A palette is accepted only when every color is a valid hex triplet;
    one bad color discards the whole AI palette.
    """

    stage_id = "style_designer"
    description = "Style design"
    system_prompt = (
        "You are a world-class brand designer. Choose an accessible color palette "
        "and a Google Fonts pairing. Return ONLY valid JSON."
    )
    temperature = 0.6

    def build_request(self, inputs: dict[str, Any], config: BusinessConfiguration) -> TextRequest:
        payload = {
            "task": "Design a website color palette and font pairing",
            "business": {
                "name": config.project_name,
                "industry": config.industry,
                "toneOfVoice": config.tone_of_voice,
                "targetAudiences": list(config.target_audiences),
            },
            "brandPreferences": config.brand.to_dict(),
        }
        instructions = (
            "Return a JSON object with primaryColor, secondaryColor, accentColor, "
            "backgroundColor, textColor (hex codes like \"#1A2B3C\"), fontHeading "
            "and fontBody (Google Fonts family names). Text and background must meet "
            "WCAG AA contrast."
        )
        return self.text_request(payload, instructions)

    def validate(self, data: Any, inputs: dict[str, Any], config: BusinessConfiguration) -> StyleSystem:
        if not isinstance(data, dict):
            raise MalformedResponseError("Expected a JSON object", payload=data)

        colors = {}
        for response_key, field_name in COLOR_FIELDS:
            value = data.get(response_key)
            if not is_hex_color(value):
                raise MalformedResponseError(
                    f"{response_key} is not a hex color: {value!r}", payload=data
                )
            colors[field_name] = value

        fonts = {}
        for response_key in ("fontHeading", "fontBody"):
            value = require(data, response_key)
            if not is_font_name(value):
                raise MalformedResponseError(
                    f"{response_key} is not a font family name: {value!r}", payload=data
                )
            fonts[response_key] = value.strip()

        return StyleSystem(
            **colors,
            font_heading=fonts["fontHeading"],
            font_body=fonts["fontBody"],
        )

    def fallback(self, inputs: dict[str, Any], config: BusinessConfiguration) -> StyleSystem:
        category = industry_category(config.industry)
        primary, secondary, accent, background, text = PALETTES.get(category, PALETTES["default"])
        heading, body = FONT_PAIRINGS.get(category, FONT_PAIRINGS["default"])

        brand = config.brand
        if is_hex_color(brand.primary_color):
            primary = brand.primary_color
        if is_hex_color(brand.secondary_color):
            secondary = brand.secondary_color

        return StyleSystem(
            primary_color=primary,
            secondary_color=secondary,
            accent_color=accent,
            background_color=background,
            text_color=text,
            font_heading=brand.font_heading if is_font_name(brand.font_heading) else heading,
            font_body=brand.font_body if is_font_name(brand.font_body) else body,
        )
