"""Section planner stage: which homepage sections to build and in what order."""

from __future__ import annotations

from collections import Counter
from typing import Any

from sitegen.config.business import BusinessConfiguration
from sitegen.errors import MalformedResponseError
from sitegen.llm.client import TextRequest
from sitegen.stages.base import BaseStage, require
from sitegen.stages.schemas import IMPORTANCE_LEVELS, SECTION_TYPES, SectionPlan, SectionSpec


INSTRUCTIONS = """Return a JSON object:
{
  "sections": [
    {"key": "hero-1", "type": "hero", "importance": "high|medium|low", "notes": "...", "order": 1}
  ],
  "rationale": "Why this plan fits the business"
}
Allowed section types: %s.
The plan must include a hero and a contact section.""" % ", ".join(SECTION_TYPES)


class SectionPlannerStage(BaseStage):
    """Plans the ordered list of homepage sections."""

    stage_id = "section_planner"
    description = "Section planning"
    system_prompt = (
        "You are an expert website strategist who plans high-converting homepage "
        "section structures. Return ONLY valid JSON."
    )
    temperature = 0.5

    def build_request(self, inputs: dict[str, Any], config: BusinessConfiguration) -> TextRequest:
        payload = {
            "task": "Generate an optimal homepage section plan for this business",
            "business": {
                "name": config.project_name,
                "industry": config.industry,
                "toneOfVoice": config.tone_of_voice,
                "targetAudiences": list(config.target_audiences),
                "services": config.service_names,
                "location": config.location.label,
                "specialNotes": config.special_notes,
            },
            "requirements": {
                "primaryGoals": "Convert visitors to customers/clients",
                "mustInclude": ["hero", "contact"],
                "recommendedSections": ["value-proposition", "services", "testimonials"],
                "optionalSections": ["about", "faq", "pricing", "case-studies", "team", "process"],
            },
        }
        return self.text_request(payload, INSTRUCTIONS)

    def validate(self, data: Any, inputs: dict[str, Any], config: BusinessConfiguration) -> SectionPlan:
        raw_sections = require(data, "sections", list)

        sections: list[SectionSpec] = []
        type_counts: Counter[str] = Counter()
        for position, raw in enumerate(raw_sections):
            if not isinstance(raw, dict):
                raise MalformedResponseError("Section entries must be objects", payload=data)

            section_type = raw.get("type")
            if section_type not in SECTION_TYPES:
                raise MalformedResponseError(f"Unknown section type '{section_type}'", payload=data)

            importance = raw.get("importance", "medium")
            if importance not in IMPORTANCE_LEVELS:
                raise MalformedResponseError(f"Unknown importance '{importance}'", payload=data)

            order = raw.get("order", position + 1)
            if not isinstance(order, (int, float)) or isinstance(order, bool):
                raise MalformedResponseError(f"Invalid order '{order}'", payload=data)

            type_counts[section_type] += 1
            sections.append(SectionSpec(
                key=str(raw.get("key") or f"{section_type}-{type_counts[section_type]}"),
                type=section_type,
                importance=importance,
                notes=str(raw.get("notes", "")),
                order=order,
            ))

        types = {s.type for s in sections}
        for required in ("hero", "contact"):
            if required not in types:
                raise MalformedResponseError(f"Plan has no {required} section", payload=data)

        keys = [s.key for s in sections]
        if len(keys) != len(set(keys)):
            raise MalformedResponseError("Duplicate section keys", payload=data)

        # sorted() is stable: sections the model ranked equally keep response order.
        ordered = sorted(sections, key=lambda s: s.order)
        for index, section in enumerate(ordered, start=1):
            section.order = index

        return SectionPlan(sections=ordered, rationale=str(data.get("rationale", "")))

    def fallback(self, inputs: dict[str, Any], config: BusinessConfiguration) -> SectionPlan:
        industry = config.industry.lower()

        sections = [
            SectionSpec("hero-1", "hero", "high", "Primary value proposition and call-to-action"),
            SectionSpec("value-1", "value-proposition", "high", "Unique selling points and differentiators"),
        ]
        if config.services:
            sections.append(SectionSpec("services-1", "services", "high", "Core services offered"))
        sections.append(SectionSpec("testimonials-1", "testimonials", "medium", "Social proof and client testimonials"))
        sections.append(SectionSpec("about-1", "about", "medium", "Company background and mission"))
        if "service" in industry or "consulting" in industry:
            sections.append(SectionSpec("faq-1", "faq", "medium", "Common questions and answers"))
        sections.append(SectionSpec("contact-1", "contact", "high", "Contact information and form"))

        for index, section in enumerate(sections, start=1):
            section.order = index

        return SectionPlan(
            sections=sections,
            rationale="Rule-based fallback section plan based on industry and services",
        )
