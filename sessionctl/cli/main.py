"""sessionctl/cli/main.py — CLI entry point. Thin boundary — no business logic."""

from __future__ import annotations

import sys

import click

from sessionctl.cli.flags_cmd import flags_group
from sessionctl.cli.run_cmd import run_command


@click.group()
@click.version_option(version="0.1.0", prog_name="sessionctl")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARN", "ERROR"], case_sensitive=False),
    default="WARN",
    envvar="SESSIONCTL_LOG_LEVEL",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str) -> None:
    """sessionctl — session lifecycle controller with a guided first run."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = "WARNING" if log_level.upper() == "WARN" else log_level


cli.add_command(run_command, name="run")
cli.add_command(flags_group, name="flags")


@cli.command("config")
@click.pass_context
def config_cmd(ctx: click.Context) -> None:
    """Show active configuration."""
    import dataclasses
    import json

    from sessionctl.cli.bootstrap import load_config
    from sessionctl.models.errors import SessionCtlError

    obj = ctx.obj or {}
    try:
        cfg = load_config(obj.get("log_level"))
    except SessionCtlError as e:
        click.echo(f"Config error: {e}", err=True)
        sys.exit(1)
    click.echo(json.dumps(dataclasses.asdict(cfg), default=str, indent=2))


if __name__ == "__main__":
    cli()
