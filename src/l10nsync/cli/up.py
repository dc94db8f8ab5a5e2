"""l10nsync up command - run the service."""

import click

from l10nsync.cli.utils import get_config, get_console
from l10nsync.core.errors import L10nSyncError
from l10nsync.daemon.lifecycle import ServiceController, run_service


@click.command()
@click.pass_context
def up_command(ctx: click.Context) -> None:
    """Run the scheduler until interrupted.

    Removes jobs and triggers that are no longer declared, registers the
    branch statistics job of every configured repository, then lets triggers
    fire after the configured start delay.
    """
    config = get_config(ctx)
    console = get_console()

    try:
        controller = ServiceController.from_config(config)
    except L10nSyncError as e:
        raise click.ClickException(str(e)) from e

    repositories = ", ".join(str(r) for r in config.branch_statistics.repository_ids) or "none"
    console.print(f"[bold]l10nsync[/bold] scheduler [cyan]{config.scheduler.name}[/cyan]")
    console.print(f"  repositories: {repositories}")
    console.print(f"  interval: {config.branch_statistics.interval_sec:g}s")

    try:
        run_service(controller)
    except L10nSyncError as e:
        raise click.ClickException(str(e)) from e

    console.print("\nStopped")
