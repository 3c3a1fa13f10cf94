"""Remove all documents of a model from the index."""

from __future__ import annotations

import click

from scout_elastic.cli import Context, pass_context
from scout_elastic.commands._common import EXIT_SUCCESS, open_engine, resolve_model
from scout_elastic.utils.output import success


@click.command("flush")
@click.argument("model")
@click.confirmation_option(prompt="Delete all indexed documents of this model?")
@pass_context
def cli(ctx: Context, model: str) -> None:
    """Delete every indexed document of MODEL.

    Records in the database are not touched.

    \b
    Examples:
      scout-elastic flush articles --yes
    """
    model_cls = resolve_model(ctx, model)

    with open_engine(ctx) as (_client, _session, engine):
        response = engine.flush(model_cls)

    if not ctx.quiet:
        deleted = response.get("deleted", 0) if response else 0
        success(f"Flushed {deleted} {model_cls.searchable_as()} document(s)")

    raise SystemExit(EXIT_SUCCESS)
