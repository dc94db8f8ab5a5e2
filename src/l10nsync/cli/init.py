"""l10nsync init command - create the statistics database tables."""

import click

from l10nsync.cli.utils import get_config, get_console
from l10nsync.storage.database import Database


@click.command()
@click.pass_context
def init_command(ctx: click.Context) -> None:
    """Create the statistics and job detail tables.

    Existing tables and rows are left untouched.
    """
    config = get_config(ctx)
    console = get_console()

    db = Database.from_config(config.database)
    try:
        db.create_all()
    finally:
        db.dispose()

    console.print(f"[green]✓[/green] Database ready: {config.database.url}")
