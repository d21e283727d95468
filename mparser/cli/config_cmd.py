"""Config commands."""

import json

import rich_click as click
from pydantic import ValidationError
from rich.syntax import Syntax

from ..config import get_config_path, get_parser_config, get_server_config, load_config, save_config
from ..models.config import MparserConfig
from ._console import console


@click.group()
def config():
    """Manage configuration."""
    pass


@config.command("show")
@click.option("--effective", is_flag=True, default=False, help="Apply LISTEN_*/SSL_* environment overrides")
def config_show(effective: bool):
    """Show current configuration."""
    cfg = load_config()
    if effective:
        cfg = {
            "parser": get_parser_config(cfg).model_dump(),
            "server": get_server_config(cfg).model_dump(),
        }
    syntax = Syntax(json.dumps(cfg, indent=2), "json", theme="monokai")
    console.print(syntax)


@config.command("path")
def config_path():
    """Show configuration file path."""
    console.print(str(get_config_path()))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value (e.g., parser.fetch_timeout_seconds 2.5)."""
    cfg = load_config()

    section, _, field = key.partition(".")
    if not field or not isinstance(cfg.get(section), dict):
        raise click.BadParameter(f"expected <section>.<field>, sections: {', '.join(cfg)}", param_hint="KEY")

    # JSON first so numbers, booleans and null keep their type
    try:
        parsed_value = json.loads(value)
    except json.JSONDecodeError:
        parsed_value = value

    cfg[section][field] = parsed_value
    try:
        MparserConfig.model_validate(cfg)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="VALUE") from e

    save_config(cfg)
    console.print(f"Set {key} = {parsed_value}")
