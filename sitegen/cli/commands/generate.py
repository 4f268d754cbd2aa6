"""Site generation command."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from sitegen.assembly import SiteWriter
from sitegen.config import load_business_config, load_settings
from sitegen.errors import ConfigurationError
from sitegen.llm import build_adapter
from sitegen.log import configure_logging
from sitegen.orchestration import PipelineFailure, PipelineOrchestrator, StageStatus

console = Console()

STATUS_STYLES = {
    StageStatus.COMPLETED: "green",
    StageStatus.FAILED: "red",
    StageStatus.SKIPPED: "yellow",
    StageStatus.RUNNING: "cyan",
    StageStatus.PENDING: "dim",
}


@click.command("generate")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--settings", "settings_file", type=click.Path(exists=True, dir_okay=False),
              help="YAML settings file (providers, timeouts, deadline)")
@click.option("--output", "-o", "output_dir", default="generated-sites",
              help="Directory that receives the generated site")
@click.option("--offline", is_flag=True, help="Skip all providers and use rule-based generation")
@click.option("--deadline", type=float, default=None, help="Overall deadline in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def generate(
    config_file: str,
    settings_file: str | None,
    output_dir: str,
    offline: bool,
    deadline: float | None,
    verbose: bool,
) -> None:
    """Generate a website from a business configuration file.

    Examples:

        sitegen generate acme.yaml

        sitegen generate acme.yaml --offline -o out/

        sitegen generate acme.yaml --settings settings.yaml --deadline 120
    """
    configure_logging(verbose)

    try:
        config = load_business_config(config_file)
        settings = load_settings(settings_file)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    if offline:
        settings = settings.disable_all()
    if deadline:
        settings.pipeline_deadline_seconds = deadline

    adapter = build_adapter(settings)
    console.print(f"\n[bold]Generating site:[/bold] {config.project_name or config_file}")
    if adapter.provider_ids:
        console.print(f"  Providers: {', '.join(adapter.provider_ids)}")
    else:
        console.print("  [yellow]No providers available, using rule-based generation[/yellow]")

    orchestrator = PipelineOrchestrator(adapter, settings)
    outcome = asyncio.run(_run(orchestrator, config))

    _display_stages(orchestrator)

    if isinstance(outcome, PipelineFailure):
        console.print(f"\n[red]Generation failed ({outcome.kind.value}):[/red] {outcome.reason}")
        if outcome.partial_results:
            console.print(f"  Completed stages: {', '.join(sorted(outcome.partial_results))}")
        raise SystemExit(1)

    root = SiteWriter(output_dir).write(outcome)
    console.print(f"\n[bold green]Site written to[/bold green] {root}")
    if outcome.fallback_stages:
        console.print(f"  [dim]Rule-based stages: {', '.join(outcome.fallback_stages)}[/dim]")


async def _run(orchestrator: PipelineOrchestrator, config):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Starting...", total=100)

        def on_event(event) -> None:
            progress.update(
                task,
                completed=event.overall,
                description=f"{event.stage_id}: {event.message or event.status.value}",
            )

        unsubscribe = orchestrator.subscribe(on_event)
        try:
            return await orchestrator.generate(config)
        finally:
            unsubscribe()
            if orchestrator.adapter is not None:
                await orchestrator.adapter.aclose()


def _display_stages(orchestrator: PipelineOrchestrator) -> None:
    if orchestrator.state is None:
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Stage")
    table.add_column("Status")
    table.add_column("Provider")
    table.add_column("Fallback")
    table.add_column("Message")

    for stage_id, snapshot in orchestrator.state.snapshot().items():
        style = STATUS_STYLES[snapshot.status]
        result = snapshot.result
        table.add_row(
            stage_id,
            f"[{style}]{snapshot.status.value}[/{style}]",
            (result.provider_id if result else None) or "-",
            "yes" if result and result.used_fallback else "",
            result.message if result and result.message else snapshot.message,
        )

    console.print(table)
