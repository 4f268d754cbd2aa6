"""Runtime settings: providers, timeouts, concurrency and deadlines."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from sitegen.errors import ConfigurationError


TEXT = "text"
IMAGE = "image"


@dataclass
class ProviderSettings:
    """One external generation provider.

    Attributes:
        provider_id: Identifier stages use to address the provider.
        kind: "text" or "image".
        vendor: Client implementation ("openai", "anthropic", "openai-images").
        model: Model name passed to the vendor API.
        api_key_env: Environment variables holding the key, first match wins.
        base_url: Override for OpenAI-compatible endpoints.
        timeout_seconds: Per-call timeout enforced by the adapter.
        enabled: Disabled providers are never registered.
    """

    provider_id: str
    kind: str
    vendor: str
    model: str
    api_key_env: list[str] = field(default_factory=list)
    base_url: str | None = None
    timeout_seconds: float = 30.0
    enabled: bool = True

    def resolve_api_key(self, env: Mapping[str, str]) -> str | None:
        """Return the first non-empty key found in the environment."""
        for name in self.api_key_env:
            value = env.get(name)
            if value:
                return value
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_id": self.provider_id,
            "kind": self.kind,
            "vendor": self.vendor,
            "model": self.model,
            "api_key_env": list(self.api_key_env),
            "base_url": self.base_url,
            "timeout_seconds": self.timeout_seconds,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, provider_id: str, data: dict[str, Any]) -> "ProviderSettings":
        api_key_env = data.get("api_key_env", [])
        if isinstance(api_key_env, str):
            api_key_env = [api_key_env]
        kind = data.get("kind", TEXT)
        if kind not in (TEXT, IMAGE):
            raise ConfigurationError(f"Provider {provider_id}: unknown kind '{kind}'")
        return cls(
            provider_id=provider_id,
            kind=kind,
            vendor=data.get("vendor", "openai"),
            model=data.get("model", ""),
            api_key_env=list(api_key_env),
            base_url=data.get("base_url"),
            timeout_seconds=float(data.get("timeout_seconds", 90.0 if kind == IMAGE else 30.0)),
            enabled=bool(data.get("enabled", True)),
        )


def default_providers() -> dict[str, ProviderSettings]:
    """Built-in provider set: free/fast Gemini first, premium vendors after."""
    return {
        "gemini": ProviderSettings(
            provider_id="gemini",
            kind=TEXT,
            vendor="openai",
            model="gemini-2.0-flash",
            api_key_env=["GEMINI_API_KEY", "GOOGLE_GEMINI_API_KEY"],
            base_url="https://generativelanguage.googleapis.com/v1beta/openai/",
            timeout_seconds=20.0,
        ),
        "openai": ProviderSettings(
            provider_id="openai",
            kind=TEXT,
            vendor="openai",
            model="gpt-4o-mini",
            api_key_env=["OPENAI_API_KEY"],
            timeout_seconds=30.0,
        ),
        "anthropic": ProviderSettings(
            provider_id="anthropic",
            kind=TEXT,
            vendor="anthropic",
            model="claude-3-5-haiku-latest",
            api_key_env=["ANTHROPIC_API_KEY"],
            timeout_seconds=30.0,
        ),
        "openai-images": ProviderSettings(
            provider_id="openai-images",
            kind=IMAGE,
            vendor="openai-images",
            model="dall-e-3",
            api_key_env=["OPENAI_API_KEY"],
            timeout_seconds=90.0,
        ),
    }


@dataclass
class GeneratorSettings:
    """Settings for one generator process.

    Attributes:
        providers: All known providers keyed by id.
        text_providers: Priority order for text stages.
        image_providers: Priority order for image generation.
        stage_providers: Per-stage override of the priority order.
        pipeline_deadline_seconds: Optional aggregate deadline for a run.
        max_image_concurrency: Upper bound on simultaneous image calls.
        session_ttl_seconds: How long finished sessions stay queryable.
        max_sessions: Registry capacity before oldest finished sessions go.
    """

    providers: dict[str, ProviderSettings] = field(default_factory=default_providers)
    text_providers: list[str] = field(default_factory=lambda: ["gemini", "openai", "anthropic"])
    image_providers: list[str] = field(default_factory=lambda: ["openai-images"])
    stage_providers: dict[str, list[str]] = field(default_factory=dict)
    pipeline_deadline_seconds: float | None = None
    max_image_concurrency: int = 10
    session_ttl_seconds: float = 3600.0
    max_sessions: int = 100

    def providers_for(self, stage_id: str, kind: str = TEXT) -> list[str]:
        """Priority-ordered provider ids for a stage."""
        if stage_id in self.stage_providers:
            return list(self.stage_providers[stage_id])
        return list(self.image_providers if kind == IMAGE else self.text_providers)

    def disable_all(self) -> "GeneratorSettings":
        """Copy of these settings with every provider disabled."""
        return replace(
            self,
            providers={
                pid: replace(provider, enabled=False)
                for pid, provider in self.providers.items()
            },
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "providers": {pid: p.to_dict() for pid, p in self.providers.items()},
            "text_providers": list(self.text_providers),
            "image_providers": list(self.image_providers),
            "stage_providers": {k: list(v) for k, v in self.stage_providers.items()},
            "pipeline_deadline_seconds": self.pipeline_deadline_seconds,
            "max_image_concurrency": self.max_image_concurrency,
            "session_ttl_seconds": self.session_ttl_seconds,
            "max_sessions": self.max_sessions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeneratorSettings":
        """Merge a settings mapping over the defaults."""
        settings = cls()

        for provider_id, provider_data in (data.get("providers") or {}).items():
            base = settings.providers.get(provider_id)
            merged = base.to_dict() if base else {}
            merged.update(provider_data or {})
            settings.providers[provider_id] = ProviderSettings.from_dict(provider_id, merged)

        if "text_providers" in data:
            settings.text_providers = list(data["text_providers"] or [])
        if "image_providers" in data:
            settings.image_providers = list(data["image_providers"] or [])
        if "stage_providers" in data:
            settings.stage_providers = {
                stage: list(ids or []) for stage, ids in (data["stage_providers"] or {}).items()
            }
        if data.get("pipeline_deadline_seconds") is not None:
            settings.pipeline_deadline_seconds = float(data["pipeline_deadline_seconds"])
        if "max_image_concurrency" in data:
            settings.max_image_concurrency = max(1, int(data["max_image_concurrency"]))
        if "session_ttl_seconds" in data:
            settings.session_ttl_seconds = float(data["session_ttl_seconds"])
        if "max_sessions" in data:
            settings.max_sessions = max(1, int(data["max_sessions"]))

        settings._check_references()
        return settings

    def _check_references(self) -> None:
        orders = [self.text_providers, self.image_providers, *self.stage_providers.values()]
        for order in orders:
            for provider_id in order:
                if provider_id not in self.providers:
                    raise ConfigurationError(f"Unknown provider in priority list: {provider_id}")


def load_settings(
    path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> GeneratorSettings:
    """Load generator settings.

    Args:
        path: Optional YAML file merged over the defaults.
        env: Environment mapping. Defaults to os.environ.

    Returns:
        GeneratorSettings. All providers are disabled when
        SITEGEN_OFFLINE is set to a truthy value.
    """
    env = os.environ if env is None else env
    data: dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Cannot read settings file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in settings file {path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError(f"Settings file {path} must be a mapping")
        data = loaded or {}

    settings = GeneratorSettings.from_dict(data)

    if env.get("SITEGEN_OFFLINE", "").lower() in ("1", "true", "yes"):
        settings = settings.disable_all()

    return settings
