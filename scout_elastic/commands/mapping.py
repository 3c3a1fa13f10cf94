"""Install or update the index mapping of a model."""

from __future__ import annotations

import click

from scout_elastic.cli import Context, pass_context
from scout_elastic.commands._common import EXIT_SUCCESS, open_engine, resolve_model
from scout_elastic.index.mapping import MappingAction, install_mapping
from scout_elastic.utils.output import info, success, verbose


@click.command("mapping")
@click.argument("model")
@click.option(
    "--index",
    "index_name",
    default=None,
    help="Install into this index instead of the configured one",
)
@pass_context
def cli(ctx: Context, model: str, index_name: str | None) -> None:
    """Install the Elasticsearch mapping of MODEL.

    Creates the index with the model's mapping when it does not exist yet,
    otherwise adds the model's fields to the existing mapping. Changing the
    type of an existing field requires a rebuild with --mapping.

    \b
    Examples:
      scout-elastic mapping articles
      scout-elastic mapping articles --index articles_v2
    """
    model_cls = resolve_model(ctx, model)

    with open_engine(ctx) as (client, _session, engine):
        target = index_name or engine.target.name
        verbose(f"Installing mapping for {model_cls.searchable_as()} into {target}")
        action = install_mapping(client, target, model_cls)

    if not ctx.quiet:
        if action is MappingAction.UNCHANGED:
            info(f"{model_cls.__name__} has no mapping; index {target} left as is")
        success("Elastic mapping success.")

    raise SystemExit(EXIT_SUCCESS)
