"""CLI utilities."""

import click
from rich.console import Console

from l10nsync.config.loader import load_config
from l10nsync.config.models import L10nSyncConfig
from l10nsync.core.errors import L10nSyncError
from l10nsync.core.logging import configure_logging


def get_console() -> Console:
    return Console(stderr=True)


def get_config(ctx: click.Context) -> L10nSyncConfig:
    """Load configuration once per invocation and apply its logging section.

    Raises:
        click.ClickException: If the configuration cannot be loaded
    """
    obj = ctx.ensure_object(dict)
    config = obj.get("config")
    if config is not None:
        return config  # type: ignore[no-any-return]

    try:
        config = load_config(obj.get("config_path"))
    except L10nSyncError as e:
        raise click.ClickException(str(e)) from e

    logging_config = config.logging
    if obj.get("verbose"):
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)

    obj["config"] = config
    return config
