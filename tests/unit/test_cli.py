"""Unit tests for the command group and command discovery."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from scout_elastic import __version__
from scout_elastic.cli import INDEX_ENV, Context, cli
from scout_elastic.commands import discover_commands


def test_discovers_all_commands() -> None:
    names = set(discover_commands())
    assert names == {"flush", "import", "init-config", "mapping", "rebuild", "search"}


def test_commands_registered_on_group() -> None:
    for name in ("flush", "import", "init-config", "mapping", "rebuild", "search"):
        assert name in cli.commands


def test_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_for_command() -> None:
    result = CliRunner().invoke(cli, ["rebuild", "-h"])
    assert result.exit_code == 0
    assert "--mapping" in result.output


def test_unknown_command() -> None:
    result = CliRunner().invoke(cli, ["nope"])
    assert result.exit_code == 2


def test_group_loads_config_and_index_override(sample_config: Path) -> None:
    ctx = Context()
    result = CliRunner().invoke(
        cli, ["--config", str(sample_config), "--index", "other", "init-config", "--help"], obj=ctx
    )

    assert result.exit_code == 0, result.output
    assert ctx.config is not None
    assert ctx.config.index == "other"
    assert ctx.config.chunk_size == 2


def test_group_reports_bad_config(temp_dir: Path) -> None:
    bad = temp_dir / "bad.toml"
    bad.write_text("not [ toml")

    result = CliRunner().invoke(cli, ["--config", str(bad), "init-config", "--help"])

    assert result.exit_code == 1
    assert "Invalid config" in result.output


def test_quiet_flag(sample_config: Path) -> None:
    ctx = Context()
    CliRunner().invoke(cli, ["--config", str(sample_config), "-q", "init-config", "--help"], obj=ctx)
    assert ctx.quiet is True


def test_models_built_from_config_paths(sample_config: Path, monkeypatch) -> None:
    loaded: dict[str, str] = {}

    def load_paths(self, paths):
        loaded.update(paths)
        return self

    monkeypatch.setattr("scout_elastic.models.ModelRegistry.load_paths", load_paths)
    monkeypatch.setattr("scout_elastic.models.ModelRegistry.load_entry_points", lambda self: self)

    ctx = Context()
    CliRunner().invoke(cli, ["--config", str(sample_config), "init-config", "--help"], obj=ctx)

    assert len(ctx.models) == 0
    assert loaded == {"articles": "myapp.models:Article"}


def test_index_from_environment(sample_config: Path) -> None:
    ctx = Context()
    result = CliRunner().invoke(
        cli,
        ["--config", str(sample_config), "init-config", "--help"],
        obj=ctx,
        env={INDEX_ENV: "from_env"},
    )

    assert result.exit_code == 0, result.output
    assert ctx.config.index == "from_env"


def test_uppercase_index_override_is_rejected(sample_config: Path) -> None:
    result = CliRunner().invoke(
        cli, ["--config", str(sample_config), "--index", "Bad", "init-config", "--help"]
    )
    assert result.exit_code == 1
