"""Import all records of a model into the index."""

from __future__ import annotations

import click
from sqlalchemy import func, select

from scout_elastic.cli import Context, pass_context
from scout_elastic.commands._common import (
    EXIT_SUCCESS,
    open_engine,
    require_config,
    resolve_model,
)
from scout_elastic.index.importer import import_all
from scout_elastic.utils.output import create_progress, success


@click.command("import")
@click.argument("model")
@click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    default=None,
    help="Records per bulk request (default: rebuild.chunk_size from config)",
)
@pass_context
def cli(ctx: Context, model: str, chunk_size: int | None) -> None:
    """Import every record of MODEL into the search index.

    Existing documents are updated in place (doc-as-upsert); documents of
    deleted records are not removed. Use `rebuild` for a clean index.

    \b
    Examples:
      scout-elastic import articles
      scout-elastic import articles --chunk-size 1000
    """
    config = require_config(ctx)
    model_cls = resolve_model(ctx, model)
    chunk_size = chunk_size or config.chunk_size

    with open_engine(ctx) as (_client, session, engine):
        total = session.scalar(select(func.count()).select_from(model_cls))
        if ctx.quiet:
            count = import_all(engine, session, model_cls, chunk_size)
        else:
            with create_progress() as progress:
                task = progress.add_task(f"Importing {model_cls.searchable_as()}...", total=total)
                count = import_all(
                    engine,
                    session,
                    model_cls,
                    chunk_size,
                    on_chunk=lambda done: progress.update(task, completed=done),
                )

    if not ctx.quiet:
        success(f"Imported {count} {model_cls.searchable_as()} record(s) into {engine.get_index()}")

    raise SystemExit(EXIT_SUCCESS)
