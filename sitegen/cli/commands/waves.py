"""Stage execution plan command."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from sitegen.orchestration import build_default_graph

console = Console()


@click.command("waves")
def waves() -> None:
    """Show the stage waves. Stages in one wave run concurrently."""
    graph = build_default_graph()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Wave", justify="right")
    table.add_column("Stage")
    table.add_column("Depends on")
    table.add_column("Required")

    for index, wave in enumerate(graph.waves, start=1):
        for stage_id in wave:
            node = graph.nodes[stage_id]
            table.add_row(
                str(index),
                stage_id,
                ", ".join(node.depends_on) or "-",
                "yes" if node.required else "",
            )

    console.print(table)
