"""Main CLI entry point for sitegen."""

import click

from sitegen import __version__
from sitegen.cli.commands import generate, providers, waves


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """sitegen - AI-assisted website generation.

    \b
    GETTING STARTED:
      sitegen generate business.yaml           Generate a site
      sitegen generate business.yaml --offline Rule-based generation only
      sitegen providers                        Show configured providers
      sitegen waves                            Show the stage execution plan
    """
    pass


cli.add_command(generate)
cli.add_command(providers)
cli.add_command(waves)


if __name__ == "__main__":
    cli()
