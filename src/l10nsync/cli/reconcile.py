"""l10nsync reconcile command - run one branch statistics batch."""

import json
import sys
from dataclasses import asdict

import click
from click.core import ParameterSource
from rich.table import Table

from l10nsync.branch.batch import BatchResult, BranchBatchDriver
from l10nsync.branch.statistics import BranchStatisticReconciler
from l10nsync.cli.utils import get_config, get_console
from l10nsync.core.errors import L10nSyncError
from l10nsync.scheduling.dedup import DeduplicatingJobScheduler
from l10nsync.scheduling.engine import ApschedulerBackend
from l10nsync.search.client import HttpTextUnitSearcher
from l10nsync.storage.database import Database


def _summary_table(result: BatchResult) -> Table:
    table = Table(title=f"Repository {result.repository_id}", title_justify="left")
    table.add_column("Branch", justify="right")
    table.add_column("Text units", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("For translation", justify="right")
    table.add_column("Added", justify="right", style="green")
    table.add_column("Updated", justify="right", style="yellow")
    table.add_column("Removed", justify="right", style="red")

    for stat in sorted(result.reconciled, key=lambda s: s.branch_id):
        table.add_row(
            str(stat.branch_id),
            str(stat.text_units),
            str(stat.total_count),
            str(stat.for_translation_count),
            str(stat.added),
            str(stat.updated),
            str(stat.removed),
        )
    for branch_id, error in sorted(result.failed.items()):
        table.add_row(str(branch_id), f"[red]failed: {error}[/red]", "", "", "", "", "")
    return table


@click.command()
@click.argument("repository_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--notify/--no-notify",
    default=True,
    help="Schedule branch notifications for reconciled branches "
    "(default: only with a persistent scheduler.jobstore_url)",
)
@click.pass_context
def reconcile_command(ctx: click.Context, repository_id: int, as_json: bool, notify: bool) -> None:
    """Reconcile the statistics of every branch of a repository.

    REPOSITORY_ID is the id of the repository whose branches are processed.
    Exits with status 1 if any branch failed or its notification could not
    be scheduled.
    """
    config = get_config(ctx)
    console = get_console()

    persistent = config.scheduler.jobstore_url is not None
    if ctx.get_parameter_source("notify") is ParameterSource.DEFAULT:
        notify = persistent
    elif notify and not persistent:
        console.print(
            "[yellow]Warning:[/yellow] no scheduler.jobstore_url configured, "
            "notifications scheduled now are lost when this command exits"
        )

    db = Database.from_config(config.database)
    db.create_all()
    searcher = HttpTextUnitSearcher.from_config(config.search)
    backend: ApschedulerBackend | None = None
    try:
        if notify:
            backend = ApschedulerBackend(
                db,
                name=config.scheduler.name,
                jobstore_url=config.scheduler.jobstore_url,
                timezone=config.scheduler.timezone,
            )
        driver = BranchBatchDriver(
            db=db,
            reconciler=BranchStatisticReconciler(db, searcher),
            job_scheduler=DeduplicatingJobScheduler(backend) if backend is not None else None,
            config=config.branch_statistics,
        )
        result = driver.reconcile_all(repository_id)
    except L10nSyncError as e:
        raise click.ClickException(str(e)) from e
    finally:
        if backend is not None:
            backend.shutdown(wait=False)
        searcher.close()
        db.dispose()

    if as_json:
        click.echo(
            json.dumps(
                {
                    "repository_id": result.repository_id,
                    "run_id": result.run_id,
                    "reconciled": [asdict(stat) for stat in result.reconciled],
                    "failed": {str(k): v for k, v in result.failed.items()},
                    "notification_failed": {
                        str(k): v for k, v in result.notification_failed.items()
                    },
                    "duration_ms": round(result.duration_ms, 1),
                }
            )
        )
    else:
        if result.branches == 0:
            console.print(f"No branches to process in repository {repository_id}")
        else:
            console.print(_summary_table(result))
            console.print(
                f"{len(result.reconciled)} reconciled, {len(result.failed)} failed "
                f"({result.duration_ms / 1000:.1f}s)"
            )
            for branch_id, error in sorted(result.notification_failed.items()):
                console.print(
                    f"[yellow]Branch {branch_id} notification not scheduled: {error}[/yellow]"
                )

    if not result.ok:
        sys.exit(1)
