"""sessionctl/cli/flags_cmd.py — `sessionctl flags` commands."""
from __future__ import annotations
import sys
import click
from sessionctl.models.errors import SessionCtlError


@click.group()
def flags_group() -> None:
    """First-run flag commands."""


@flags_group.command("show")
@click.pass_context
def flags_show(ctx: click.Context) -> None:
    """Show whether the guided first run has completed."""
    from sessionctl.cli.bootstrap import load_config, open_store
    from sessionctl.memory.flags import FirstRunFlags
    obj = ctx.obj or {}
    try:
        cfg = load_config(obj.get("log_level"))
        store = open_store(cfg)
        try:
            done = FirstRunFlags(store).has_completed_first_run()
        finally:
            store.close()
    except SessionCtlError as e:
        click.echo(f"Error: {e}", err=True); sys.exit(1)
    click.echo(f"first_run_complete: {'yes' if done else 'no'}")
    click.echo(f"next strategy:      {'standard' if done else 'guided'}")


@flags_group.command("reset")
@click.pass_context
def flags_reset(ctx: click.Context) -> None:
    """Clear the flag so the next run starts guided."""
    from sessionctl.cli.bootstrap import load_config, open_store
    from sessionctl.memory.flags import FirstRunFlags
    obj = ctx.obj or {}
    try:
        cfg = load_config(obj.get("log_level"))
        store = open_store(cfg)
        try:
            FirstRunFlags(store).clear_first_run_flag()
        finally:
            store.close()
    except SessionCtlError as e:
        click.echo(f"Error: {e}", err=True); sys.exit(1)
    click.echo("[OK] First-run flag cleared. Next run uses the guided strategy.")
