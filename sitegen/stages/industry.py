"""Industry keyword tables shared by the fallback generators."""

from __future__ import annotations


INDUSTRY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "legal": ("legal", "law", "attorney", "lawyer"),
    "restaurant": ("restaurant", "cafe", "food", "coffee", "bakery", "dining"),
    "healthcare": ("health", "medical", "clinic", "doctor", "dental"),
    "technology": ("saas", "software", "tech", "app", "platform"),
    "finance": ("finance", "financial", "bank", "accounting", "insurance"),
    "real-estate": ("real estate", "realtor", "property", "real-estate"),
    "education": ("education", "school", "university", "tutoring"),
    "fitness": ("fitness", "gym", "yoga", "training"),
}

INDUSTRY_SERVICES = {
    "legal": "legal services",
    "restaurant": "culinary experiences",
    "healthcare": "healthcare services",
    "technology": "software solutions",
    "finance": "financial services",
    "real-estate": "real estate services",
    "education": "educational programs",
    "fitness": "fitness training",
}


def industry_category(industry: str) -> str:
    """Map a free-text industry to a known category, or "default"."""
    text = industry.lower()
    for category, keywords in INDUSTRY_KEYWORDS.items():
        if any(keyword in text for keyword in keywords):
            return category
    return "default"


def industry_service(industry: str) -> str:
    return INDUSTRY_SERVICES.get(industry_category(industry), "services")


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]
