"""Parse command."""

import sys

import rich_click as click
from rich.syntax import Syntax

from ..config import get_parser_config
from ..parser import parse_message
from ._console import console


@click.command()
@click.argument("text", required=False)
@click.option("--timeout", "-t", type=float, default=None, help="Per-link fetch timeout in seconds")
@click.option("--workers", "-w", type=int, default=None, help="Maximum concurrent title fetches")
@click.option("--deadline", "-d", type=float, default=None, help="Overall budget for all title fetches")
@click.option("--raw", is_flag=True, default=False, help="Print plain JSON without highlighting")
def parse(text: str | None, timeout: float | None, workers: int | None, deadline: float | None, raw: bool):
    """Parse a message (or stdin when TEXT is omitted or '-')."""
    if text is None or text == "-":
        text = sys.stdin.read()

    cfg = get_parser_config()
    updates = {}
    if timeout is not None:
        updates["fetch_timeout_seconds"] = timeout
    if workers is not None:
        if workers < 1:
            raise click.BadParameter("must be at least 1", param_hint="--workers")
        updates["max_concurrency_fetch"] = workers
    if deadline is not None:
        updates["resolve_deadline_seconds"] = deadline
    if updates:
        cfg = cfg.model_copy(update=updates)

    info = parse_message(text, cfg)

    if raw:
        click.echo(info.to_json())
    else:
        console.print(Syntax(info.to_json(indent=2), "json", theme="monokai"))
