"""Command line interface for sitegen."""
