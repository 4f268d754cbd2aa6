"""Copywriter stage: headline, body and bullet copy per section."""

from __future__ import annotations

from typing import Any

from sitegen.config.business import BusinessConfiguration
from sitegen.errors import MalformedResponseError
from sitegen.llm.client import TextRequest
from sitegen.stages.base import BaseStage, require
from sitegen.stages.industry import capitalize_first, industry_category, industry_service
from sitegen.stages.schemas import Layout, SectionCopy, SectionPlan


HERO_HEADLINES = {
    "legal": "{name}: Expert Legal Counsel You Can Trust",
    "restaurant": "{name}: Culinary Excellence in Every Bite",
    "technology": "{name}: Transform Your Workflow",
    "fitness": "{name}: Transform Your Body, Transform Your Life",
}

HERO_PARAGRAPHS = {
    "legal": (
        "{name} provides expert legal counsel with integrity and dedication. "
        "Trust our experienced team to protect your interests."
    ),
    "restaurant": (
        "{name} brings together fresh ingredients, skilled chefs, and warm "
        "hospitality to create memorable dining experiences."
    ),
}

CTAS = {
    "restaurant": "Make a Reservation",
    "legal": "Schedule Consultation",
    "technology": "Start Free Trial",
    "fitness": "Book a Class",
}

VALUE_HEADLINES = {
    "legal": "Why Clients Trust Us",
    "restaurant": "Why Guests Love Us",
    "technology": "Why Teams Choose Us",
}

HEADLINES = {
    "about": "About {name}",
    "services": "Our Services",
    "features": "Our Features",
    "value-proposition": "Why Choose Us",
    "benefits": "Why Choose Us",
    "testimonials": "What Our Clients Say",
    "social-proof": "Trusted by Our Clients",
    "faq": "Frequently Asked Questions",
    "contact": "Get in Touch",
    "cta": "Ready to Get Started?",
    "team": "Meet Our Team",
    "process": "How We Work",
    "how-it-works": "How It Works",
    "portfolio": "Our Work",
    "case-studies": "Case Studies",
    "pricing": "Pricing",
}


class CopywriterStage(BaseStage):
    """Writes copy for every planned section."""

    stage_id = "copywriter"
    description = "Copywriting"
    inputs = ("section_planner", "layout_generator")
    system_prompt = (
        "You are a conversion-focused website copywriter. Write concise, specific "
        "copy in the brand's tone. Return ONLY valid JSON."
    )
    max_tokens = 4096
    temperature = 0.8

    def build_request(self, inputs: dict[str, Any], config: BusinessConfiguration) -> TextRequest:
        plan: SectionPlan = inputs["section_planner"]
        layout: Layout = inputs["layout_generator"]
        variants = {section.key: section.variant for section in layout.all_sections()}
        payload = {
            "task": "Write website copy for each section",
            "business": {
                "name": config.project_name,
                "industry": config.industry,
                "toneOfVoice": config.tone_of_voice,
                "targetAudiences": list(config.target_audiences),
                "services": [s.to_dict() for s in config.services],
                "location": config.location.label,
                "specialNotes": config.special_notes,
            },
            "sections": [
                {"key": s.key, "type": s.type, "notes": s.notes, "variant": variants.get(s.key)}
                for s in plan.sections
            ],
        }
        instructions = (
            "Return a JSON object: {\"sections\": [{\"sectionKey\": \"hero-1\", "
            "\"headline\": \"...\", \"subheadline\": \"...\", \"paragraph\": \"...\", "
            "\"bullets\": [\"...\"], \"ctaLabel\": \"...\"}]}. Cover every section key."
        )
        return self.text_request(payload, instructions)

    def validate(self, data: Any, inputs: dict[str, Any], config: BusinessConfiguration) -> list[SectionCopy]:
        plan: SectionPlan = inputs["section_planner"]
        raw_sections = require(data, "sections", list)

        by_key: dict[str, SectionCopy] = {}
        for raw in raw_sections:
            if not isinstance(raw, dict):
                raise MalformedResponseError("Copy entries must be objects", payload=data)
            key = raw.get("sectionKey") or raw.get("key")
            headline = raw.get("headline")
            if not isinstance(headline, str) or not headline.strip():
                raise MalformedResponseError(f"Section {key} has no headline", payload=data)
            bullets = raw.get("bullets") or []
            if not isinstance(bullets, list):
                raise MalformedResponseError(f"Section {key} bullets must be a list", payload=data)
            by_key[key] = SectionCopy(
                section_key=key,
                headline=headline.strip(),
                subheadline=str(raw.get("subheadline") or ""),
                paragraph=str(raw.get("paragraph") or ""),
                bullets=[str(b) for b in bullets],
                cta_label=str(raw.get("ctaLabel") or ""),
            )

        missing = [key for key in plan.keys if key not in by_key]
        if missing:
            raise MalformedResponseError(f"No copy for sections: {', '.join(missing)}", payload=data)

        return [by_key[key] for key in plan.keys]

    def fallback(self, inputs: dict[str, Any], config: BusinessConfiguration) -> list[SectionCopy]:
        plan: SectionPlan = inputs["section_planner"]
        return [self._section_copy(s.key, s.type, config) for s in plan.sections]

    def _section_copy(
        self,
        key: str,
        section_type: str,
        config: BusinessConfiguration,
    ) -> SectionCopy:
        name = config.project_name
        industry = config.industry.lower()
        category = industry_category(industry)
        services = config.service_names
        primary_service = services[0] if services else industry_service(industry)
        location = config.location.label

        if section_type == "hero":
            if location:
                subheadline = f"Serving {location} with premium {primary_service}"
            else:
                subheadline = f"Premium {primary_service} tailored to your needs"
            paragraph = HERO_PARAGRAPHS.get(category, (
                "{name} delivers exceptional {service} with a commitment to excellence. "
                "We combine expertise, innovation, and personalized service to exceed "
                "your expectations."
            ))
            return SectionCopy(
                section_key=key,
                headline=HERO_HEADLINES.get(
                    category, "{name}: Excellence in {industry}"
                ).format(name=name, industry=capitalize_first(industry)),
                subheadline=subheadline,
                paragraph=paragraph.format(name=name, service=primary_service),
                cta_label=CTAS.get(category, "Contact Us"),
            )

        if section_type == "services":
            return SectionCopy(
                section_key=key,
                headline="Our Services" if services else f"Our {capitalize_first(primary_service)}",
                paragraph=(
                    f"Discover how {name} can help you with {primary_service}. We combine "
                    "expertise, innovation, and personalized service to deliver results."
                ),
                bullets=[
                    f"{s.name}: {s.short_description}" if s.short_description else s.name
                    for s in config.services
                ],
            )

        if section_type in ("value-proposition", "benefits"):
            return SectionCopy(
                section_key=key,
                headline=VALUE_HEADLINES.get(category, "Why Choose Us"),
                bullets=["Experienced professionals", "Personalized service", "Proven results"],
                paragraph=f"{name} combines deep {industry} expertise with genuine care for every client.",
            )

        if section_type == "about":
            where = f" in {location}" if location else ""
            return SectionCopy(
                section_key=key,
                headline=f"About {name}",
                paragraph=(
                    f"{name} is a trusted {industry} business{where}, dedicated to "
                    f"delivering outstanding {primary_service} to every client."
                ),
            )

        if section_type == "testimonials":
            return SectionCopy(
                section_key=key,
                headline="What Our Clients Say",
                subheadline="Trusted by satisfied customers",
            )

        if section_type == "faq":
            return SectionCopy(
                section_key=key,
                headline="Frequently Asked Questions",
                bullets=[
                    f"What {primary_service} does {name} offer?",
                    "How do I get started?",
                    "What areas do you serve?",
                ],
            )

        if section_type == "contact":
            return SectionCopy(
                section_key=key,
                headline="Get in Touch",
                paragraph=f"Ready to work with {name}? Reach out today and we will respond promptly.",
                cta_label="Contact Us",
            )

        if section_type == "cta":
            return SectionCopy(
                section_key=key,
                headline="Ready to Get Started?",
                paragraph=f"Contact {name} today to learn how we can help.",
                cta_label=CTAS.get(category, "Contact Us"),
            )

        headline = HEADLINES.get(section_type, capitalize_first(section_type))
        return SectionCopy(
            section_key=key,
            headline=headline.format(name=name),
            paragraph=f"{name} delivers exceptional {primary_service} in the {industry} industry.",
        )
