"""Typed outputs of the generation stages."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from sitegen.result import StageResult


SECTION_TYPES = (
    "hero",
    "value-proposition",
    "features",
    "services",
    "about",
    "testimonials",
    "case-studies",
    "team",
    "process",
    "pricing",
    "faq",
    "contact",
    "cta",
    "social-proof",
    "benefits",
    "how-it-works",
    "portfolio",
)

IMPORTANCE_LEVELS = ("high", "medium", "low")

IMAGE_PURPOSES = ("hero", "supporting", "icon", "background")


@dataclass
class DesignStrategy:
    """Brand personality and conversion strategy for the site."""

    emotional_tone: str = "professional"
    formality: str = "balanced"
    modernity: str = "modern"
    warmth: str = "neutral"
    style_keywords: list[str] = field(default_factory=list)
    aesthetic_direction: str = ""
    color_mood: str = ""
    color_keywords: list[str] = field(default_factory=list)
    section_priority: list[str] = field(default_factory=list)
    primary_goal: str = "contact"
    trust_builders: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SectionSpec:
    """One planned homepage section."""

    key: str
    type: str
    importance: str = "medium"
    notes: str = ""
    order: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SectionPlan:
    """Ordered list of planned sections."""

    sections: list[SectionSpec] = field(default_factory=list)
    rationale: str = ""

    def by_type(self, section_type: str) -> list[SectionSpec]:
        return [s for s in self.sections if s.type == section_type]

    @property
    def keys(self) -> list[str]:
        return [s.key for s in self.sections]

    def to_dict(self) -> dict[str, Any]:
        return {
            "sections": [s.to_dict() for s in self.sections],
            "rationale": self.rationale,
        }


@dataclass
class StyleSystem:
    """Five-color palette and a heading/body font pairing."""

    primary_color: str
    secondary_color: str
    accent_color: str
    background_color: str
    text_color: str
    font_heading: str
    font_body: str

    @property
    def colors(self) -> dict[str, str]:
        return {
            "primary": self.primary_color,
            "secondary": self.secondary_color,
            "accent": self.accent_color,
            "background": self.background_color,
            "text": self.text_color,
        }

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LayoutSection:
    """A planned section placed on a page."""

    key: str
    type: str
    variant: str = "default"
    background: str = "background"
    columns: int = 1

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PageLayout:
    """One page of the site."""

    slug: str
    title: str
    sections: list[LayoutSection] = field(default_factory=list)

    @property
    def path(self) -> str:
        return "index.html" if self.slug == "home" else f"{self.slug}.html"

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "title": self.title,
            "sections": [s.to_dict() for s in self.sections],
        }


@dataclass
class Layout:
    """All pages plus the navigation order."""

    pages: list[PageLayout] = field(default_factory=list)
    navigation: list[str] = field(default_factory=list)

    @property
    def home(self) -> PageLayout | None:
        return self.pages[0] if self.pages else None

    def all_sections(self) -> list[LayoutSection]:
        return [section for page in self.pages for section in page.sections]

    def to_dict(self) -> dict[str, Any]:
        return {
            "pages": [p.to_dict() for p in self.pages],
            "navigation": list(self.navigation),
        }


@dataclass
class ImageSpec:
    """A planned image. Produced without network access."""

    section_key: str
    purpose: str
    prompt: str
    placement: str = "inline"
    alt: str = ""
    style_hint: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ImageAsset:
    """A generated image, or a placeholder when generation failed."""

    section_key: str
    purpose: str
    url: str
    alt: str = ""
    placeholder: bool = False
    provider_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SectionCopy:
    """Copy for one section."""

    section_key: str
    headline: str
    subheadline: str = ""
    paragraph: str = ""
    bullets: list[str] = field(default_factory=list)
    cta_label: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SEOMetadata:
    """Search metadata for the home page."""

    title: str
    description: str
    keywords: list[str] = field(default_factory=list)
    og_title: str = ""
    og_description: str = ""
    og_image: str = ""
    schema_ld: dict[str, Any] = field(default_factory=dict)
    slug: str = ""
    seo_score: int = 0

    @property
    def schema_type(self) -> str:
        return self.schema_ld.get("@type", "")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ImageSet:
    """One result per planned image, in plan order."""

    results: list[StageResult] = field(default_factory=list)

    @property
    def assets(self) -> list[ImageAsset]:
        return [r.value for r in self.results if r.is_success and r.value is not None]

    @property
    def placeholder_count(self) -> int:
        return sum(1 for asset in self.assets if asset.placeholder)

    @property
    def generated_count(self) -> int:
        return sum(1 for asset in self.assets if not asset.placeholder)

    def for_section(self, section_key: str) -> list[ImageAsset]:
        return [asset for asset in self.assets if asset.section_key == section_key]

    def __len__(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {"results": [r.to_dict() for r in self.results]}
