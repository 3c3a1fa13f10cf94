"""Write a starter config file."""

from __future__ import annotations

from pathlib import Path

import click

from scout_elastic.cli import Context, pass_context
from scout_elastic.config import (
    DEFAULT_DATABASE_URL,
    DEFAULT_HOSTS,
    DEFAULT_INDEX,
    Config,
    get_default_config_path,
    save_config,
)
from scout_elastic.exceptions import ConfigValidationError
from scout_elastic.utils.fileops import secure_mkdir
from scout_elastic.utils.output import error, info, success

EXIT_WRITE_FAILED = 1


@click.command("init-config")
@click.option("--force", "-f", is_flag=True, help="Replace an existing file")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write (default: ~/.config/scout-elastic/config.toml)",
)
@click.option(
    "--host",
    "hosts",
    multiple=True,
    metavar="URL",
    help=f"Elasticsearch node, repeat for several (default: {DEFAULT_HOSTS[0]})",
)
@click.option("--index", default=DEFAULT_INDEX, show_default=True, help="Logical index name")
@click.option(
    "--database-url",
    default=DEFAULT_DATABASE_URL,
    show_default=True,
    help="SQLAlchemy URL of the database holding the records",
)
@pass_context
def cli(
    ctx: Context,
    force: bool,
    output: Path | None,
    hosts: tuple[str, ...],
    index: str,
    database_url: str,
) -> None:
    """Write a config file with the given connection settings.

    The file is readable by its owner only, since database URLs often
    carry passwords.

    \b
    Examples:
      scout-elastic init-config
      scout-elastic init-config --host https://es.internal:9200 \\
          --database-url postgresql://app@db/app
      scout-elastic init-config -o ./scout.toml --force
    """
    path = (output or get_default_config_path()).expanduser().resolve()
    if path.exists() and not force:
        error(f"{path} already exists", hint="Pass --force to replace it")
        raise SystemExit(EXIT_WRITE_FAILED)

    config = Config(es_hosts=list(hosts) or list(DEFAULT_HOSTS), index=index, database_url=database_url)
    try:
        config.validate()
    except ConfigValidationError as e:
        error(str(e))
        raise SystemExit(EXIT_WRITE_FAILED)

    secure_mkdir(path.parent)
    try:
        save_config(config, path)
        path.chmod(0o600)
    except OSError as e:
        error(f"Cannot write {path}: {e}")
        raise SystemExit(EXIT_WRITE_FAILED)

    success(f"Wrote {path}")
    if not ctx.quiet:
        info('Register models next, e.g. \\[models] articles = "myapp.models:Article"')
