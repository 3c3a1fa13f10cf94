"""Search the index and show the matching records."""

from __future__ import annotations

import json

import click

from scout_elastic.cli import Context, pass_context
from scout_elastic.commands._common import EXIT_SUCCESS, open_engine, resolve_model
from scout_elastic.engine.results import parse_result
from scout_elastic.query.compiler import compile_query
from scout_elastic.query.models import SORT_DIRECTIONS, SearchQuery
from scout_elastic.utils.output import console, create_table, info

EXIT_USAGE_ERROR = 1

# Number of record columns shown in table output when --columns is not given
DEFAULT_COLUMN_COUNT = 4


def parse_where(raw: str) -> tuple[str, object]:
    """Parse ``KEY=VALUE`` into a where clause key and value.

    VALUE is read as JSON when possible (``[1, 2]``, ``0``, ``null``),
    otherwise taken as a string. For ``range.`` keys, ``LOW..HIGH`` is
    accepted as well, with either side left empty for an open bound.
    """
    if "=" not in raw:
        raise click.BadParameter(f"expected KEY=VALUE, got {raw!r}", param_hint="--where")
    key, value = raw.split("=", 1)
    key = key.strip()

    if key.split(":", 1)[0].startswith("range.") and ".." in value:
        low, high = value.split("..", 1)
        return key, [_parse_scalar(low) if low else None, _parse_scalar(high) if high else None]

    return key, _parse_scalar(value)


def _parse_scalar(value: str) -> object:
    try:
        return json.loads(value)
    except ValueError:
        return value


def parse_sort(raw: str) -> tuple[str, str]:
    """Parse ``COLUMN[:DIRECTION]``."""
    column, _, direction = raw.partition(":")
    direction = direction or "asc"
    if direction not in SORT_DIRECTIONS:
        raise click.BadParameter(
            f"direction must be one of {', '.join(sorted(SORT_DIRECTIONS))}", param_hint="--sort"
        )
    return column, direction


@click.command("search")
@click.argument("model")
@click.argument("term", required=False)
@click.option("--where", "-w", "wheres", multiple=True, help="Filter KEY=VALUE (repeatable)")
@click.option("--sort", "-s", "sorts", multiple=True, help="Sort COLUMN[:asc|desc] (repeatable)")
@click.option("--page", type=click.IntRange(min=1), default=None, help="Result page (1-based)")
@click.option("--per-page", type=click.IntRange(min=1), default=20, help="Page size")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Maximum hits")
@click.option("--columns", default=None, help="Comma-separated record fields to show")
@click.option("--show-query", is_flag=True, default=False, help="Print the request body")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output records as JSON")
@pass_context
def cli(
    ctx: Context,
    model: str,
    term: str | None,
    wheres: tuple[str, ...],
    sorts: tuple[str, ...],
    page: int | None,
    per_page: int,
    limit: int | None,
    columns: str | None,
    show_query: bool,
    as_json: bool,
) -> None:
    """Search MODEL documents, optionally matching TERM.

    Hits are loaded from the database; hits whose record was deleted
    are left out.

    \b
    Examples:
      scout-elastic search articles python
      scout-elastic search articles --where status=published --sort created_at:desc
      scout-elastic search articles --where 'tags=["python","sql"]'
      scout-elastic search articles --where range.views=100.. --page 2
    """
    model_cls = resolve_model(ctx, model)

    query = SearchQuery(term=term, limit=limit)
    try:
        for raw in wheres:
            query.where(*parse_where(raw))
        for raw in sorts:
            query.order_by(*parse_sort(raw))
    except click.BadParameter as e:
        click.echo(e.format_message(), err=True)
        raise SystemExit(EXIT_USAGE_ERROR)
    if page is not None:
        query.paginate(page, per_page)

    if show_query:
        console.print_json(json.dumps(compile_query(query)))

    with open_engine(ctx) as (_client, _session, engine):
        raw_result = engine.search(query)
        result = parse_result(raw_result)
        records = engine.map(query, raw_result, model_cls)
        rows = [record.to_searchable_dict() for record in records]
        keys = [str(record.search_key()) for record in records]

    if as_json:
        click.echo(json.dumps(rows, default=str, indent=2))
        raise SystemExit(EXIT_SUCCESS)

    if not rows:
        if not ctx.quiet:
            info(f"No results ({result.total} total hits)")
        raise SystemExit(EXIT_SUCCESS)

    if columns:
        shown = [c.strip() for c in columns.split(",") if c.strip()]
    else:
        shown = [c for c in rows[0] if c != model_cls.search_key_column().key]
        shown = shown[:DEFAULT_COLUMN_COUNT]

    scores = {hit.id: hit.score for hit in result.hits}
    table = create_table(title=f"{model_cls.searchable_as()}: {result.total} hit(s)")
    table.add_column("ID", style="hit.id")
    table.add_column("Score", style="hit.score", justify="right")
    for column in shown:
        table.add_column(column)
    for key, row in zip(keys, rows):
        score = scores.get(key)
        table.add_row(
            key,
            "" if score is None else f"{score:.2f}",
            *("" if row.get(c) is None else str(row.get(c)) for c in shown),
        )
    console.print(table)

    raise SystemExit(EXIT_SUCCESS)
