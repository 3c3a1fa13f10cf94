"""Command-line entry point: global options, shared context and command registration."""

from __future__ import annotations

import os
from pathlib import Path

import click

from scout_elastic import __version__
from scout_elastic.config import Config, load_config
from scout_elastic.exceptions import ConfigError
from scout_elastic.models import ModelRegistry
from scout_elastic.utils.output import error, set_color, set_verbosity, warning

CONFIG_ENV = "SCOUT_ELASTIC_CONFIG"
INDEX_ENV = "SCOUT_ELASTIC_INDEX"


class Context:
    """State handed from the group to every command.

    ``models`` is resolved lazily so commands that never look up a model
    (``init-config``) do not import application code.
    """

    def __init__(self) -> None:
        self.config: Config | None = None
        self.verbose = False
        self.debug = False
        self.quiet = False
        self._models: ModelRegistry | None = None

    @property
    def models(self) -> ModelRegistry:
        if self._models is None:
            registry = ModelRegistry().load_entry_points()
            if self.config is not None:
                registry.load_paths(self.config.models)
            self._models = registry
        return self._models

    @models.setter
    def models(self, registry: ModelRegistry) -> None:
        self._models = registry


pass_context = click.make_pass_decorator(Context, ensure=True)


def _apply_config(app_ctx: Context, path: Path | None, index: str | None) -> list[str]:
    """Load the config file into *app_ctx* and return its warnings."""
    config, warnings = load_config(path)
    if index is not None:
        config.index = index
        config.validate()
    app_ctx.config = config
    return warnings


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV,
    help=f"Config file (default: ~/.config/scout-elastic/config.toml, env: {CONFIG_ENV})",
)
@click.option(
    "--index",
    "-i",
    envvar=INDEX_ENV,
    default=None,
    help=f"Logical index name, overrides the config (env: {INDEX_ENV})",
)
@click.option("--no-color", is_flag=True, default=False, help="Disable colored output")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log progress to stderr")
@click.option("--debug", is_flag=True, default=False, help="Log debug details (implies -v)")
@click.option("--quiet", "-q", is_flag=True, default=False, help="Only print errors")
@click.version_option(version=__version__, prog_name="scout-elastic")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    index: str | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """Keep an Elasticsearch index in sync with SQLAlchemy models.

    Models are looked up by the identifiers listed under [models] in the
    config file, or registered by installed packages through the
    scout_elastic.models entry point group.

    \b
    Examples:
      scout-elastic init-config --host http://localhost:9200
      scout-elastic mapping articles
      scout-elastic rebuild articles --mapping
      scout-elastic search articles python --sort views:desc
    """
    app_ctx = ctx.ensure_object(Context)
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet
    set_verbosity(verbose=verbose, debug=debug)

    color_off = no_color or "NO_COLOR" in os.environ
    if color_off:
        set_color(False)

    try:
        warnings = _apply_config(app_ctx, config_path, index)
    except ConfigError as e:
        error(str(e), hint="Fix the file or create a new one with: scout-elastic init-config")
        ctx.exit(1)

    if not color_off and not app_ctx.config.colored_output:
        set_color(False)
    if not quiet:
        for message in warnings:
            warning(message)


def register_commands() -> None:
    """Attach every discovered command to the group."""
    from scout_elastic.commands import discover_commands

    for name, command in discover_commands().items():
        cli.add_command(command, name)


register_commands()
