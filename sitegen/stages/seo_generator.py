"""SEO generator stage: title, description, keywords and structured data."""

from __future__ import annotations

from typing import Any

from sitegen.config.business import BusinessConfiguration
from sitegen.errors import MalformedResponseError
from sitegen.llm.client import TextRequest
from sitegen.stages.base import BaseStage, require
from sitegen.stages.industry import capitalize_first
from sitegen.stages.schemas import DesignStrategy, ImageSpec, Layout, SectionCopy, SEOMetadata


TITLE_MAX = 65
TITLE_MIN = 30
DESCRIPTION_MIN = 120
DESCRIPTION_MAX = 160

SCHEMA_TYPES: list[tuple[tuple[str, ...], str]] = [
    (("saas", "software", "app", "platform"), "SoftwareApplication"),
    (("nonprofit", "ngo", "foundation", "institute", "research"), "Organization"),
    (("law", "legal", "attorney", "lawyer"), "LegalService"),
    (("restaurant", "cafe", "food"), "Restaurant"),
    (("medical", "health", "clinic", "doctor"), "MedicalBusiness"),
    (("real estate", "realtor", "property"), "RealEstateAgent"),
    (("education", "school", "university"), "EducationalOrganization"),
]

LOCAL_BUSINESS_TYPES = {
    "LocalBusiness",
    "LegalService",
    "Restaurant",
    "MedicalBusiness",
    "RealEstateAgent",
}

DESCRIPTION_PADDING = (
    " Contact us today for more information.",
    " Trusted by clients who value quality and results.",
    " Get in touch to learn more.",
)


def schema_type_for(industry: str) -> str:
    """Structured-data @type for an industry, LocalBusiness when nothing matches."""
    text = industry.lower()
    for keywords, schema_type in SCHEMA_TYPES:
        if any(keyword in text for keyword in keywords):
            return schema_type
    return "LocalBusiness"


def adjust_title(title: str, project_name: str) -> str:
    """Bring a title into the 30-65 character band; never longer than 65."""
    title = " ".join(title.split())
    if len(title) < TITLE_MIN:
        title = f"{title} | {project_name}"
    if len(title) > TITLE_MAX:
        title = title[:TITLE_MAX - 3].rstrip() + "..."
    return title


def adjust_description(description: str) -> str:
    """Pad or trim a description to 120-160 characters."""
    description = " ".join(description.split())
    index = 0
    while len(description) < DESCRIPTION_MIN:
        description += DESCRIPTION_PADDING[index % len(DESCRIPTION_PADDING)]
        index += 1
    if len(description) > DESCRIPTION_MAX:
        description = description[:DESCRIPTION_MAX - 3] + "..."
    return description


def seo_score(metadata: SEOMetadata) -> int:
    """Rough 0-100 quality score for the generated metadata."""
    score = 100
    if not 50 <= len(metadata.title) <= TITLE_MAX:
        score -= 10
    if not 150 <= len(metadata.description) <= DESCRIPTION_MAX:
        score -= 10
    if len(metadata.keywords) < 3:
        score -= 20
    if not metadata.og_image:
        score -= 10
    if metadata.schema_type == "LocalBusiness":
        score -= 5
    return max(score, 0)


class SEOGeneratorStage(BaseStage):
    """Produces search metadata for the home page.

    Title and description are length-adjusted on both the AI and the
    fallback path, so every result satisfies the same bounds.
    """

    stage_id = "seo_generator"
    description = "SEO metadata"
    inputs = ("design_strategy", "layout_generator", "copywriter", "image_planner")
    system_prompt = (
        "You are an SEO specialist. Write a title of 60-65 characters and a meta "
        "description of 150-160 characters. Return ONLY valid JSON."
    )
    temperature = 0.4

    def build_request(self, inputs: dict[str, Any], config: BusinessConfiguration) -> TextRequest:
        strategy: DesignStrategy | None = inputs.get("design_strategy")
        copy: list[SectionCopy] = inputs.get("copywriter") or []
        layout: Layout | None = inputs.get("layout_generator")
        payload = {
            "task": "Generate SEO metadata for the home page",
            "business": {
                "name": config.project_name,
                "industry": config.industry,
                "services": config.service_names,
                "location": config.location.label,
                "targetAudiences": list(config.target_audiences),
            },
            "brandTone": strategy.emotional_tone if strategy else config.tone_of_voice,
            "headlines": [c.headline for c in copy],
            "pages": [p.title for p in layout.pages] if layout else [],
        }
        instructions = (
            "Return a JSON object with title, description, keywords (5-10 strings), "
            "ogTitle and ogDescription."
        )
        return self.text_request(payload, instructions)

    def validate(self, data: Any, inputs: dict[str, Any], config: BusinessConfiguration) -> SEOMetadata:
        title = require(data, "title")
        description = require(data, "description")
        keywords = require(data, "keywords", list)
        if not all(isinstance(k, str) for k in keywords):
            raise MalformedResponseError("keywords must be strings", payload=data)
        if not 10 <= len(title) <= 120:
            raise MalformedResponseError(f"Title length {len(title)} out of range", payload=data)
        if len(description) < 50:
            raise MalformedResponseError("Description too short", payload=data)

        return self._finalize(
            title=title,
            description=description,
            keywords=keywords,
            og_title=data.get("ogTitle") or "",
            og_description=data.get("ogDescription") or "",
            inputs=inputs,
            config=config,
        )

    def fallback(self, inputs: dict[str, Any], config: BusinessConfiguration) -> SEOMetadata:
        name = config.project_name
        industry = config.industry.lower()
        city = config.location.city

        where = f" in {city}" if city else ""
        description = (
            f"Professional {industry} services from {name}{where}. "
            "Contact us today for expert solutions."
        )
        keywords = [industry, f"{industry} services", name.lower()]
        keywords.extend(service.lower() for service in config.service_names)
        if city:
            keywords.append(f"{industry} {city.lower()}")

        return self._finalize(
            title=f"{name} - {capitalize_first(industry)} Services",
            description=description,
            keywords=keywords,
            og_title="",
            og_description="",
            inputs=inputs,
            config=config,
        )

    def _finalize(
        self,
        title: str,
        description: str,
        keywords: list[str],
        og_title: str,
        og_description: str,
        inputs: dict[str, Any],
        config: BusinessConfiguration,
    ) -> SEOMetadata:
        title = adjust_title(title, config.project_name)
        description = adjust_description(description)

        seen = set()
        unique_keywords = []
        for keyword in keywords:
            keyword = keyword.strip()
            if keyword and keyword.lower() not in seen:
                seen.add(keyword.lower())
                unique_keywords.append(keyword)

        metadata = SEOMetadata(
            title=title,
            description=description,
            keywords=unique_keywords,
            og_title=adjust_title(og_title, config.project_name) if og_title else title,
            og_description=adjust_description(og_description) if og_description else description,
            og_image=self._hero_image_ref(inputs),
            schema_ld=self._schema_ld(description, config),
            slug=config.slug,
        )
        metadata.seo_score = seo_score(metadata)
        return metadata

    def _hero_image_ref(self, inputs: dict[str, Any]) -> str:
        specs: list[ImageSpec] = inputs.get("image_planner") or []
        for spec in specs:
            if spec.purpose == "hero":
                return f"images/{spec.section_key}.png"
        return ""

    def _schema_ld(self, description: str, config: BusinessConfiguration) -> dict[str, Any]:
        schema_type = schema_type_for(config.industry)
        schema: dict[str, Any] = {
            "@context": "https://schema.org",
            "@type": schema_type,
            "name": config.project_name,
            "description": description,
            "url": f"https://example.com/{config.slug}",
        }

        location = config.location
        if schema_type in LOCAL_BUSINESS_TYPES and location.label:
            address = {"@type": "PostalAddress"}
            if location.city:
                address["addressLocality"] = location.city
            if location.region:
                address["addressRegion"] = location.region
            if location.country:
                address["addressCountry"] = location.country
            schema["address"] = address

        if config.services:
            schema["makesOffer"] = [
                {"@type": "Offer", "itemOffered": {"@type": "Service", "name": name}}
                for name in config.service_names
            ]

        return schema
