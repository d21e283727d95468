"""CLI entry point for mparser."""

import rich_click as click

from .. import __version__
from . import config_cmd as _config_mod
from . import parse as _parse_mod
from . import serve as _serve_mod
from ._console import configure_logging


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log per-link failures")
def cli(verbose: bool):
    """Extract mentions, emoticons and link titles from chat messages."""
    configure_logging(verbose)


# Register commands
cli.add_command(_parse_mod.parse)
cli.add_command(_serve_mod.serve)
cli.add_command(_config_mod.config)


if __name__ == "__main__":
    cli()
