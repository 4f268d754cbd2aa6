"""Provider listing command."""

from __future__ import annotations

import os

import click
from rich.console import Console
from rich.table import Table

from sitegen.config import load_settings
from sitegen.errors import ConfigurationError

console = Console()


@click.command("providers")
@click.option("--settings", "settings_file", type=click.Path(exists=True, dir_okay=False),
              help="YAML settings file")
def providers(settings_file: str | None) -> None:
    """List configured providers and whether their API keys are set."""
    try:
        settings = load_settings(settings_file)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Provider")
    table.add_column("Kind")
    table.add_column("Model")
    table.add_column("Timeout", justify="right")
    table.add_column("Enabled")
    table.add_column("Key")

    for provider in settings.providers.values():
        has_key = provider.resolve_api_key(os.environ) is not None
        table.add_row(
            provider.provider_id,
            provider.kind,
            provider.model,
            f"{provider.timeout_seconds:g}s",
            "yes" if provider.enabled else "[dim]no[/dim]",
            "[green]set[/green]" if has_key else "[yellow]missing[/yellow]",
        )

    console.print(table)
    console.print(f"\nText priority: {' -> '.join(settings.text_providers) or '-'}")
    console.print(f"Image priority: {' -> '.join(settings.image_providers) or '-'}")
