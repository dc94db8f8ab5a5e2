"""l10nsync CLI - l10nsync command."""

from pathlib import Path

import click

from l10nsync.cli.init import init_command
from l10nsync.cli.reconcile import reconcile_command
from l10nsync.cli.up import up_command
from l10nsync.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="l10nsync")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ./l10nsync.yaml if present)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """l10nsync - Branch translation statistics and job reconciliation."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(init_command, name="init")
cli.add_command(reconcile_command, name="reconcile")
cli.add_command(up_command, name="up")


if __name__ == "__main__":
    cli()
