"""sitegen - AI website generation pipeline.

Turns a business configuration into a complete website bundle (content,
layout, style system, SEO metadata and images) by driving dependent AI
generation stages with deterministic fallbacks.
"""

__version__ = "0.1.0"
