"""Tests for business configuration and runtime settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from sitegen.config import (
    BusinessConfiguration,
    GeneratorSettings,
    Location,
    load_business_config,
    load_settings,
    slugify,
)
from sitegen.config.settings import IMAGE, TEXT
from sitegen.errors import ConfigurationError


class TestSlugify:
    """Tests for slug generation."""

    def test_basic(self):
        assert slugify("Acme Law") == "acme-law"

    def test_strips_punctuation(self):
        assert slugify("  Joe's Café & Bar!! ") == "joe-s-caf-bar"

    def test_length_capped(self):
        assert len(slugify("x" * 80)) == 50


class TestBusinessConfiguration:
    """Tests for BusinessConfiguration."""

    def test_from_camel_case(self, acme_config: BusinessConfiguration):
        """Test the wizard's camelCase payload is accepted."""
        assert acme_config.project_name == "Acme Law"
        assert acme_config.target_audiences == ("Injured workers", "Families planning estates")
        assert acme_config.tone_of_voice == "Professional and formal"
        assert acme_config.location.label == "Springfield, IL, USA"
        assert acme_config.service_names == ["Personal Injury", "Estate Planning"]
        assert acme_config.services[0].short_description == "Maximum compensation"

    def test_from_snake_case(self):
        config = BusinessConfiguration.from_dict({
            "project_name": "Blue Fin",
            "industry": "Restaurant",
            "location": "Portland",
            "services": ["Dinner", "Catering"],
        })

        assert config.slug == "blue-fin"
        assert config.location == Location(city="Portland")
        assert config.service_names == ["Dinner", "Catering"]

    def test_is_immutable(self, acme_config: BusinessConfiguration):
        with pytest.raises(AttributeError):
            acme_config.project_name = "Other"  # type: ignore[misc]

    def test_missing_fields(self):
        config = BusinessConfiguration(project_name="  ", industry="Legal")
        assert config.missing_fields() == ["project_name"]
        assert config.missing_fields(("services",)) == ["services"]

    def test_validate_raises(self):
        config = BusinessConfiguration(project_name="", industry="")

        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()

        assert exc_info.value.missing_fields == ["project_name", "industry"]

    def test_round_trip_dict(self, acme_config: BusinessConfiguration):
        assert BusinessConfiguration.from_dict(acme_config.to_dict()) == acme_config


class TestLoadBusinessConfig:
    """Tests for loading configuration files."""

    def test_load_json(self, acme_file: Path):
        config = load_business_config(acme_file)
        assert config.slug == "acme-law"

    def test_load_yaml(self, tmp_path: Path):
        path = tmp_path / "biz.yaml"
        path.write_text(
            "projectName: Peak Fitness\n"
            "industry: Fitness\n"
            "services:\n"
            "  - name: Personal Training\n"
        )

        config = load_business_config(path)

        assert config.project_name == "Peak Fitness"
        assert config.service_names == ["Personal Training"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError):
            load_business_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("projectName: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_business_config(path)


class TestGeneratorSettings:
    """Tests for runtime settings."""

    def test_defaults(self):
        settings = GeneratorSettings()

        assert settings.text_providers == ["gemini", "openai", "anthropic"]
        assert settings.providers["openai-images"].kind == IMAGE
        assert settings.pipeline_deadline_seconds is None

    def test_text_timeouts_bounded(self):
        """Text providers time out within 10-30 seconds, images later."""
        settings = GeneratorSettings()
        for provider in settings.providers.values():
            if provider.kind == TEXT:
                assert 10 <= provider.timeout_seconds <= 30
            else:
                assert provider.timeout_seconds > 30

    def test_providers_for_kind(self):
        settings = GeneratorSettings()
        assert settings.providers_for("copywriter") == ["gemini", "openai", "anthropic"]
        assert settings.providers_for("image_generator", IMAGE) == ["openai-images"]

    def test_stage_override(self):
        settings = GeneratorSettings.from_dict({"stage_providers": {"copywriter": ["anthropic"]}})
        assert settings.providers_for("copywriter") == ["anthropic"]
        assert settings.providers_for("seo_generator") == ["gemini", "openai", "anthropic"]

    def test_unknown_provider_reference(self):
        with pytest.raises(ConfigurationError):
            GeneratorSettings.from_dict({"text_providers": ["missing"]})

    def test_disable_all_returns_copy(self):
        settings = GeneratorSettings()
        offline = settings.disable_all()

        assert not any(p.enabled for p in offline.providers.values())
        assert all(p.enabled for p in settings.providers.values())

    def test_resolve_api_key(self):
        provider = GeneratorSettings().providers["gemini"]
        assert provider.resolve_api_key({"GOOGLE_GEMINI_API_KEY": "k2"}) == "k2"
        assert provider.resolve_api_key({"GEMINI_API_KEY": "k1", "GOOGLE_GEMINI_API_KEY": "k2"}) == "k1"
        assert provider.resolve_api_key({}) is None


class TestLoadSettings:
    """Tests for loading settings files."""

    def test_yaml_merged_over_defaults(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "providers:\n"
            "  openai:\n"
            "    timeout_seconds: 12\n"
            "pipeline_deadline_seconds: 300\n"
            "max_image_concurrency: 4\n"
        )

        settings = load_settings(path, env={})

        assert settings.providers["openai"].timeout_seconds == 12
        assert settings.providers["openai"].model == "gpt-4o-mini"
        assert settings.pipeline_deadline_seconds == 300
        assert settings.max_image_concurrency == 4

    def test_offline_env(self):
        settings = load_settings(env={"SITEGEN_OFFLINE": "1"})
        assert not any(p.enabled for p in settings.providers.values())

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("providers: [\n")

        with pytest.raises(ConfigurationError):
            load_settings(path, env={})
