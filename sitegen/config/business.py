"""Business configuration collected by the site wizard."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from sitegen.errors import ConfigurationError


REQUIRED_FIELDS = ("project_name", "industry")

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
_MAX_SLUG_LENGTH = 50


def slugify(text: str) -> str:
    """Lowercase, collapse non-alphanumerics to dashes, trim, cap at 50 chars."""
    slug = _SLUG_PATTERN.sub("-", text.lower()).strip("-")
    return slug[:_MAX_SLUG_LENGTH].rstrip("-")


@dataclass(frozen=True)
class Location:
    """Where the business operates."""

    city: str = ""
    region: str = ""
    country: str = ""

    @property
    def label(self) -> str:
        """Human readable location, e.g. 'Springfield, IL'."""
        return ", ".join(part for part in (self.city, self.region, self.country) if part)

    def to_dict(self) -> dict[str, str]:
        return {"city": self.city, "region": self.region, "country": self.country}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str | None) -> "Location":
        if not data:
            return cls()
        if isinstance(data, str):
            return cls(city=data)
        return cls(
            city=data.get("city", "") or "",
            region=data.get("region", data.get("state", "")) or "",
            country=data.get("country", "") or "",
        )


@dataclass(frozen=True)
class Service:
    """A service or product the business offers."""

    name: str
    short_description: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "short_description": self.short_description}

    @classmethod
    def from_value(cls, value: dict[str, Any] | str) -> "Service":
        if isinstance(value, str):
            return cls(name=value)
        return cls(
            name=value.get("name", ""),
            short_description=value.get(
                "short_description", value.get("shortDescription", "")
            ) or "",
        )


@dataclass(frozen=True)
class BrandPreferences:
    """Optional brand hints from the wizard."""

    primary_color: str = ""
    secondary_color: str = ""
    font_heading: str = ""
    font_body: str = ""
    style_keywords: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary_color": self.primary_color,
            "secondary_color": self.secondary_color,
            "font_heading": self.font_heading,
            "font_body": self.font_body,
            "style_keywords": list(self.style_keywords),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "BrandPreferences":
        data = data or {}
        return cls(
            primary_color=data.get("primary_color", data.get("primaryColor", "")) or "",
            secondary_color=data.get("secondary_color", data.get("secondaryColor", "")) or "",
            font_heading=data.get("font_heading", data.get("fontHeading", "")) or "",
            font_body=data.get("font_body", data.get("fontBody", "")) or "",
            style_keywords=tuple(
                data.get("style_keywords", data.get("styleKeywords", [])) or []
            ),
        )


@dataclass(frozen=True)
class BusinessConfiguration:
    """Immutable input to a generation run.

    Sequences are tuples so one instance can be shared by every
    concurrently running stage without copying.
    """

    project_name: str
    industry: str
    target_audiences: tuple[str, ...] = ()
    tone_of_voice: str = ""
    location: Location = field(default_factory=Location)
    services: tuple[Service, ...] = ()
    brand: BrandPreferences = field(default_factory=BrandPreferences)
    special_notes: str = ""

    @property
    def slug(self) -> str:
        """URL slug derived from the project name."""
        return slugify(self.project_name)

    @property
    def service_names(self) -> list[str]:
        return [service.name for service in self.services if service.name]

    def missing_fields(self, fields: tuple[str, ...] | list[str] = REQUIRED_FIELDS) -> list[str]:
        """Return the named fields that are absent or blank."""
        missing = []
        for name in fields:
            value = getattr(self, name, None)
            if isinstance(value, str):
                if not value.strip():
                    missing.append(name)
            elif not value:
                missing.append(name)
        return missing

    def validate(self) -> None:
        """Raise ConfigurationError if a pipeline-wide required field is blank."""
        missing = self.missing_fields(REQUIRED_FIELDS)
        if missing:
            raise ConfigurationError(
                f"Business configuration is missing required fields: {', '.join(missing)}",
                missing_fields=missing,
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "project_name": self.project_name,
            "industry": self.industry,
            "target_audiences": list(self.target_audiences),
            "tone_of_voice": self.tone_of_voice,
            "location": self.location.to_dict(),
            "services": [service.to_dict() for service in self.services],
            "brand": self.brand.to_dict(),
            "special_notes": self.special_notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BusinessConfiguration":
        """Create from a dictionary.

        Accepts both the wizard's camelCase keys and snake_case keys.
        """
        audiences = data.get("target_audiences", data.get("targetAudiences", []))
        if isinstance(audiences, str):
            audiences = [audiences]

        return cls(
            project_name=str(data.get("project_name", data.get("projectName", "")) or ""),
            industry=str(data.get("industry", "") or ""),
            target_audiences=tuple(audiences or []),
            tone_of_voice=str(data.get("tone_of_voice", data.get("toneOfVoice", "")) or ""),
            location=Location.from_dict(data.get("location")),
            services=tuple(Service.from_value(s) for s in data.get("services", []) or []),
            brand=BrandPreferences.from_dict(
                data.get("brand", data.get("brandPreferences"))
            ),
            special_notes=str(data.get("special_notes", data.get("specialNotes", "")) or ""),
        )


def load_business_config(path: Path | str) -> BusinessConfiguration:
    """Load a business configuration from a YAML or JSON file.

    Args:
        path: Path to the configuration file.

    Returns:
        Parsed BusinessConfiguration (not yet validated).

    Raises:
        ConfigurationError: If the file cannot be read or is not a mapping.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read business configuration {path}: {e}") from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse business configuration {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Business configuration {path} must be a mapping")

    return BusinessConfiguration.from_dict(data)
