"""Rebuild the search index of a model."""

from __future__ import annotations

import click

from scout_elastic.cli import Context, pass_context
from scout_elastic.commands._common import (
    EXIT_SUCCESS,
    open_engine,
    require_config,
    resolve_model,
)
from scout_elastic.index.lock import RebuildLock
from scout_elastic.index.rebuild import (
    ALREADY_RUNNING_MESSAGE,
    RebuildOrchestrator,
    RebuildStatus,
)
from scout_elastic.utils.output import info, warning


@click.command("rebuild")
@click.argument("model")
@click.option(
    "--mapping",
    "use_mapping",
    is_flag=True,
    default=False,
    help="Recreate the index with the model's mapping (via a temporary index)",
)
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="Clear an existing rebuild lock first",
)
@pass_context
def cli(ctx: Context, model: str, use_mapping: bool, force: bool) -> None:
    """Rebuild the search index of MODEL.

    Without --mapping all records are imported into the existing index
    (the index is created first if missing). With --mapping the records
    are imported into a temporary index, the index is recreated with the
    new mapping and refilled from the temporary index.

    Only one rebuild per index may run at a time. --force clears a lock
    left by a crashed run; it does not check whether that run has ended.

    \b
    Examples:
      scout-elastic rebuild articles
      scout-elastic rebuild articles --mapping
      scout-elastic rebuild articles --mapping --force
    """
    config = require_config(ctx)
    model_cls = resolve_model(ctx, model)

    def report(message: str) -> None:
        if not ctx.quiet:
            info(message)

    with open_engine(ctx) as (client, session, engine):
        ttl = config.lock_ttl if config.lock_ttl > 0 else None
        lock = RebuildLock(config.lock_dir, engine.target.name, ttl=ttl)
        orchestrator = RebuildOrchestrator(
            client,
            engine,
            session,
            lock,
            chunk_size=config.chunk_size,
            report=report,
        )
        status = orchestrator.rebuild(model_cls, use_mapping=use_mapping, force=force)

    if status is RebuildStatus.ALREADY_RUNNING and ctx.quiet:
        warning(ALREADY_RUNNING_MESSAGE)

    raise SystemExit(EXIT_SUCCESS)
