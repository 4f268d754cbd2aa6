"""Business configuration and runtime settings."""

from sitegen.config.business import (
    BrandPreferences,
    BusinessConfiguration,
    Location,
    Service,
    load_business_config,
    slugify,
)
from sitegen.config.settings import (
    GeneratorSettings,
    ProviderSettings,
    load_settings,
)

__all__ = [
    "BrandPreferences",
    "BusinessConfiguration",
    "Location",
    "Service",
    "load_business_config",
    "slugify",
    "GeneratorSettings",
    "ProviderSettings",
    "load_settings",
]
