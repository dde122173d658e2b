"""sessionctl/cli/run_cmd.py — `sessionctl run` command."""

from __future__ import annotations

import asyncio
import dataclasses
import sys

import click

from sessionctl.models.errors import SessionCtlError
from sessionctl.models.types import StrategyKind, TransitionKind


async def _run_steps(controller, kinds: list[TransitionKind]) -> int:
    from sessionctl.kernel.fsm import allowed_from

    skipped = 0
    for kind in kinds:
        if await controller.run_transition(kind):
            continue
        skipped += 1
        state = controller.current_state
        allowed = ", ".join(k.value for k in allowed_from(state)) or "none"
        click.echo(f"[SKIP] {kind.value} not allowed from {state.value} (allowed: {allowed})")
    return skipped


@click.command()
@click.argument(
    "steps",
    nargs=-1,
    required=True,
    type=click.Choice([k.value for k in TransitionKind], case_sensitive=False),
)
@click.option("--time-unit", default=None, type=float, help="Seconds per time unit.")
@click.option("--ephemeral", is_flag=True, help="Keep the first-run flag in memory only.")
@click.option(
    "--first-run/--no-first-run",
    default=None,
    help="Override the persisted first-run flag for this run.",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    steps: tuple[str, ...],
    time_unit: float | None,
    ephemeral: bool,
    first_run: bool | None,
) -> None:
    """Run a sequence of transitions (enter, quit, join, leave) in order."""
    from sessionctl.cli.bootstrap import build_controller, load_config
    from sessionctl.presentation import StateView

    obj = ctx.obj or {}
    try:
        config = load_config(obj.get("log_level"))
        if time_unit is not None:
            config = dataclasses.replace(config, time_unit=time_unit)
        controller, _, store = build_controller(config, ephemeral=ephemeral)
    except (SessionCtlError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    try:
        if first_run is not None:
            controller.reset_to_initial(first_run=first_run)
        view = StateView(lambda: controller.strategy_kind == StrategyKind.GUIDED, echo=click.echo)
        view(controller.current_state)
        controller.add_listener(view)
        click.echo(f"Strategy: {controller.strategy_name}")
        click.echo("-" * 40)
        kinds = [TransitionKind(s.lower()) for s in steps]
        skipped = asyncio.run(_run_steps(controller, kinds))
    except SessionCtlError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()

    click.echo("-" * 40)
    click.echo(
        f"[OK] {len(kinds) - skipped} applied  {skipped} skipped  "
        f"final={controller.current_state.value}  strategy={controller.strategy_name}"
    )
