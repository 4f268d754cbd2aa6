"""Design strategy stage: brand personality, color mood and section priorities."""

from __future__ import annotations

from typing import Any

from sitegen.config.business import BusinessConfiguration
from sitegen.errors import MalformedResponseError
from sitegen.llm.client import TextRequest
from sitegen.stages.base import BaseStage, require
from sitegen.stages.industry import industry_category
from sitegen.stages.schemas import DesignStrategy


EMOTIONAL_TONES = (
    "professional",
    "friendly",
    "premium",
    "innovative",
    "trustworthy",
    "exciting",
    "playful",
    "authoritative",
)

PRIMARY_GOALS = ("learn", "book", "purchase", "signup", "contact", "explore")

COLOR_MOODS = {
    "legal": ("Authoritative and trustworthy", ["navy", "slate", "gold"]),
    "restaurant": ("Warm and appetizing", ["red", "amber", "cream"]),
    "healthcare": ("Calm and reassuring", ["green", "teal", "white"]),
    "technology": ("Modern and energetic", ["blue", "cyan", "dark"]),
    "finance": ("Stable and premium", ["navy", "gold", "white"]),
    "real-estate": ("Confident and welcoming", ["blue", "amber", "white"]),
    "default": ("Professional and trustworthy", ["blue", "gray", "white"]),
}

PRIMARY_GOAL_BY_CATEGORY = {
    "restaurant": "book",
    "healthcare": "book",
    "technology": "signup",
    "legal": "contact",
}

INSTRUCTIONS = """Return a JSON object with these fields:
{
  "emotionalTone": "professional|friendly|premium|innovative|trustworthy|exciting|playful|authoritative",
  "formality": "formal|casual|balanced",
  "modernity": "modern|traditional|balanced",
  "warmth": "warm|cool|neutral",
  "styleKeywords": ["keyword1", "keyword2", "keyword3"],
  "aestheticDirection": "A short description of the visual aesthetic",
  "colorMood": "Description of the color mood",
  "colorKeywords": ["color1", "color2", "color3"],
  "sectionPriority": ["hero", "section2", "section3"],
  "primaryGoal": "learn|book|purchase|signup|contact|explore",
  "trustBuilders": ["trust1", "trust2"]
}
Return ONLY valid JSON, no markdown."""


class DesignStrategyStage(BaseStage):
    """Reasons about brand personality before any visual decisions are made."""

    stage_id = "design_strategy"
    description = "Design strategy"
    system_prompt = (
        "You are an expert website design strategist. Analyze the business and "
        "create a design strategy. Return ONLY valid JSON."
    )
    temperature = 0.7

    def build_request(self, inputs: dict[str, Any], config: BusinessConfiguration) -> TextRequest:
        payload = {
            "task": "Create a comprehensive website design strategy for this business",
            "business": {
                "name": config.project_name,
                "industry": config.industry,
                "toneOfVoice": config.tone_of_voice,
                "targetAudiences": list(config.target_audiences),
                "services": config.service_names,
                "location": config.location.label,
                "specialNotes": config.special_notes,
            },
        }
        return self.text_request(payload, INSTRUCTIONS)

    def validate(self, data: Any, inputs: dict[str, Any], config: BusinessConfiguration) -> DesignStrategy:
        tone = require(data, "emotionalTone")
        if tone not in EMOTIONAL_TONES:
            raise MalformedResponseError(f"Unknown emotional tone '{tone}'", payload=data)

        goal = data.get("primaryGoal", "contact")
        if goal not in PRIMARY_GOALS:
            raise MalformedResponseError(f"Unknown primary goal '{goal}'", payload=data)

        priority = require(data, "sectionPriority", list)
        if not all(isinstance(item, str) for item in priority):
            raise MalformedResponseError("sectionPriority must be a list of strings", payload=data)

        return DesignStrategy(
            emotional_tone=tone,
            formality=data.get("formality", "balanced"),
            modernity=data.get("modernity", "balanced"),
            warmth=data.get("warmth", "neutral"),
            style_keywords=list(data.get("styleKeywords") or ["professional", "clean"]),
            aesthetic_direction=data.get("aestheticDirection") or "Modern and professional",
            color_mood=data.get("colorMood") or "Professional and trustworthy",
            color_keywords=list(data.get("colorKeywords") or []),
            section_priority=priority,
            primary_goal=goal,
            trust_builders=list(data.get("trustBuilders") or []),
        )

    def fallback(self, inputs: dict[str, Any], config: BusinessConfiguration) -> DesignStrategy:
        tone_text = config.tone_of_voice.lower()

        if "premium" in tone_text:
            tone = "premium"
        elif "friendly" in tone_text:
            tone = "friendly"
        elif "innovative" in tone_text:
            tone = "innovative"
        else:
            tone = "professional"

        if "formal" in tone_text:
            formality = "formal"
        elif "casual" in tone_text:
            formality = "casual"
        else:
            formality = "balanced"

        category = industry_category(config.industry)
        mood, color_keywords = COLOR_MOODS.get(category, COLOR_MOODS["default"])

        return DesignStrategy(
            emotional_tone=tone,
            formality=formality,
            modernity="modern",
            warmth="neutral",
            style_keywords=["professional", "clean", "modern"],
            aesthetic_direction="Modern and professional",
            color_mood=mood,
            color_keywords=list(color_keywords),
            section_priority=["hero", "services", "testimonials", "about", "contact"],
            primary_goal=PRIMARY_GOAL_BY_CATEGORY.get(category, "contact"),
            trust_builders=["testimonials", "credentials", "experience"],
        )
