"""Pytest fixtures for sitegen tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sitegen.config import BusinessConfiguration, GeneratorSettings
from sitegen.llm import IMAGE, MockProviderClient, ProviderAdapter

from tests.responses import STAGE_TRIGGERS


@pytest.fixture
def acme_data() -> dict:
    """Wizard payload for a small law firm, camelCase as the frontend sends it."""
    return {
        "projectName": "Acme Law",
        "industry": "Legal Services",
        "targetAudiences": ["Injured workers", "Families planning estates"],
        "toneOfVoice": "Professional and formal",
        "location": {"city": "Springfield", "region": "IL", "country": "USA"},
        "services": [
            {"name": "Personal Injury", "shortDescription": "Maximum compensation"},
            {"name": "Estate Planning"},
        ],
        "brandPreferences": {},
        "specialNotes": "Free initial consultation",
    }


@pytest.fixture
def acme_config(acme_data: dict) -> BusinessConfiguration:
    return BusinessConfiguration.from_dict(acme_data)


@pytest.fixture
def acme_file(tmp_path: Path, acme_data: dict) -> Path:
    path = tmp_path / "acme.json"
    path.write_text(json.dumps(acme_data))
    return path


@pytest.fixture
def scripted_client() -> MockProviderClient:
    """Text provider that answers every stage with a valid response."""
    return MockProviderClient(
        provider_id="primary",
        responses={trigger: json.dumps(body) for trigger, body in STAGE_TRIGGERS.items()},
    )


@pytest.fixture
def image_client() -> MockProviderClient:
    return MockProviderClient(provider_id="images", kind=IMAGE)


@pytest.fixture
def mock_settings() -> GeneratorSettings:
    """Settings routing text stages to "primary"/"secondary" and images to "images"."""
    return GeneratorSettings(
        providers={},
        text_providers=["primary", "secondary"],
        image_providers=["images"],
    )


@pytest.fixture
def make_adapter():
    """Build an adapter that registers each mock client under its provider_id."""

    def factory(*clients: MockProviderClient, timeout: float = 5.0) -> ProviderAdapter:
        adapter = ProviderAdapter()
        for client in clients:
            adapter.register(client.provider_id, client, timeout_seconds=timeout)
        return adapter

    return factory
