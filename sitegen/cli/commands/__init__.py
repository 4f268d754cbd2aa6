"""CLI commands for sitegen."""

from sitegen.cli.commands.generate import generate
from sitegen.cli.commands.providers import providers
from sitegen.cli.commands.waves import waves

__all__ = [
    "generate",
    "providers",
    "waves",
]
