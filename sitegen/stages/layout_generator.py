"""Layout generator stage: arranges planned sections into pages."""

from __future__ import annotations

from typing import Any

from sitegen.config.business import BusinessConfiguration, slugify
from sitegen.errors import MalformedResponseError
from sitegen.llm.client import TextRequest
from sitegen.stages.base import BaseStage, require
from sitegen.stages.schemas import Layout, LayoutSection, PageLayout, SectionPlan


VARIANTS = (
    "default",
    "split",
    "centered",
    "full-bleed",
    "grid",
    "cards",
    "list",
    "carousel",
    "accordion",
    "form",
    "timeline",
)

BACKGROUNDS = ("background", "muted", "primary", "secondary", "accent")

DEFAULT_VARIANTS = {
    "hero": ("split", 2),
    "value-proposition": ("grid", 3),
    "features": ("grid", 3),
    "benefits": ("grid", 3),
    "services": ("cards", 3),
    "testimonials": ("carousel", 1),
    "social-proof": ("grid", 4),
    "about": ("split", 2),
    "team": ("grid", 4),
    "process": ("timeline", 1),
    "how-it-works": ("timeline", 1),
    "pricing": ("cards", 3),
    "faq": ("accordion", 1),
    "case-studies": ("cards", 2),
    "portfolio": ("grid", 3),
    "cta": ("centered", 1),
    "contact": ("form", 2),
}

NAV_TYPES = ("services", "about", "testimonials", "faq", "contact")


class LayoutGeneratorStage(BaseStage):
    """Places every planned section exactly once across the site's pages."""

    stage_id = "layout_generator"
    description = "Layout generation"
    inputs = ("section_planner",)
    system_prompt = (
        "You are a senior web layout designer. Arrange the planned sections into "
        "pages with visual variants. Return ONLY valid JSON."
    )
    temperature = 0.4

    def build_request(self, inputs: dict[str, Any], config: BusinessConfiguration) -> TextRequest:
        plan: SectionPlan = inputs["section_planner"]
        payload = {
            "task": "Arrange these sections into website pages",
            "business": {"name": config.project_name, "industry": config.industry},
            "sections": [s.to_dict() for s in plan.sections],
            "allowedVariants": list(VARIANTS),
            "allowedBackgrounds": list(BACKGROUNDS),
        }
        instructions = (
            "Return a JSON object: {\"pages\": [{\"slug\": \"home\", \"title\": \"Home\", "
            "\"sections\": [{\"key\": \"hero-1\", \"variant\": \"split\", "
            "\"background\": \"primary\", \"columns\": 2}]}], \"navigation\": [\"#services-1\"]}. "
            "The first page must be the home page. Place every section key exactly once."
        )
        return self.text_request(payload, instructions)

    def validate(self, data: Any, inputs: dict[str, Any], config: BusinessConfiguration) -> Layout:
        plan: SectionPlan = inputs["section_planner"]
        types_by_key = {s.key: s.type for s in plan.sections}

        raw_pages = require(data, "pages", list)
        pages: list[PageLayout] = []
        placed: list[str] = []

        for raw_page in raw_pages:
            if not isinstance(raw_page, dict):
                raise MalformedResponseError("Page entries must be objects", payload=data)
            slug = slugify(str(raw_page.get("slug", "")))
            if not slug:
                raise MalformedResponseError("Page without a slug", payload=data)
            if slug in {page.slug for page in pages}:
                raise MalformedResponseError(f"Duplicate page slug '{slug}'", payload=data)
            if pages and slug in ("home", "index"):
                raise MalformedResponseError(f"Page '{slug}' would overwrite the home page", payload=data)

            sections = []
            for raw in raw_page.get("sections") or []:
                key = raw.get("key") if isinstance(raw, dict) else None
                if key not in types_by_key:
                    raise MalformedResponseError(f"Unknown section key '{key}'", payload=data)
                variant = raw.get("variant", "default")
                if variant not in VARIANTS:
                    raise MalformedResponseError(f"Unknown variant '{variant}'", payload=data)
                background = raw.get("background", "background")
                if background not in BACKGROUNDS:
                    raise MalformedResponseError(f"Unknown background '{background}'", payload=data)
                columns = raw.get("columns", 1)
                if not isinstance(columns, int) or not 1 <= columns <= 4:
                    raise MalformedResponseError(f"Invalid column count '{columns}'", payload=data)

                placed.append(key)
                sections.append(LayoutSection(
                    key=key,
                    type=types_by_key[key],
                    variant=variant,
                    background=background,
                    columns=columns,
                ))

            pages.append(PageLayout(
                slug=slug,
                title=str(raw_page.get("title") or slug.replace("-", " ").title()),
                sections=sections,
            ))

        if pages[0].slug != "home":
            raise MalformedResponseError("First page must be the home page", payload=data)
        if sorted(placed) != sorted(types_by_key):
            raise MalformedResponseError("Every section must be placed exactly once", payload=data)

        navigation = [str(item) for item in data.get("navigation") or []]
        return Layout(pages=pages, navigation=navigation or self._navigation(pages))

    def fallback(self, inputs: dict[str, Any], config: BusinessConfiguration) -> Layout:
        plan: SectionPlan = inputs["section_planner"]

        sections = []
        for index, spec in enumerate(plan.sections):
            variant, columns = DEFAULT_VARIANTS.get(spec.type, ("default", 1))
            if spec.type == "hero":
                background = "primary"
            elif spec.type == "cta":
                background = "accent"
            else:
                background = "muted" if index % 2 else "background"
            sections.append(LayoutSection(
                key=spec.key,
                type=spec.type,
                variant=variant,
                background=background,
                columns=columns,
            ))

        pages = [PageLayout(slug="home", title="Home", sections=sections)]
        return Layout(pages=pages, navigation=self._navigation(pages))

    def _navigation(self, pages: list[PageLayout]) -> list[str]:
        navigation = []
        for page in pages:
            if page.slug != "home":
                navigation.append(page.path)
                continue
            navigation.extend(
                f"#{section.key}" for section in page.sections if section.type in NAV_TYPES
            )
        return navigation
