"""TOML configuration: cluster, record database, rebuild lock and models.

Example::

    [elasticsearch]
    hosts = ["http://localhost:9200"]
    index = "scout"
    request_timeout = 30

    [database]
    url = "postgresql://app@db/app"

    [rebuild]
    lock_dir = "~/.cache/scout-elastic"
    lock_ttl = 3600
    chunk_size = 500

    [display]
    colored_output = true

    [models]
    articles = "myapp.models:Article"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from scout_elastic.exceptions import ConfigParseError, ConfigValidationError

DEFAULT_HOSTS = ["http://localhost:9200"]
DEFAULT_INDEX = "scout"
DEFAULT_DATABASE_URL = "sqlite:///scout.db"
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_LOCK_TTL = 3600
DEFAULT_CHUNK_SIZE = 500


def get_default_config_path() -> Path:
    return Path.home() / ".config" / "scout-elastic" / "config.toml"


def get_default_lock_dir() -> Path:
    return Path.home() / ".cache" / "scout-elastic"


@dataclass
class Config:
    """Settings shared by all commands.

    Attributes:
        es_hosts: Elasticsearch node URLs.
        index: Logical index name all models are synced into.
        request_timeout: Per-request timeout in seconds.
        database_url: SQLAlchemy URL of the database holding the records.
        lock_dir: Directory for rebuild lock markers.
        lock_ttl: Seconds after which an abandoned rebuild lock is stale;
            zero or less disables expiry.
        chunk_size: Records per bulk request during import.
        colored_output: Whether to use colored terminal output.
        models: Model identifier -> ``module:Class`` import path.
        config_path: File the config was read from, None for defaults.
    """

    es_hosts: list[str] = field(default_factory=lambda: list(DEFAULT_HOSTS))
    index: str = DEFAULT_INDEX
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    database_url: str = DEFAULT_DATABASE_URL
    lock_dir: Path = field(default_factory=get_default_lock_dir)
    lock_ttl: int = DEFAULT_LOCK_TTL
    chunk_size: int = DEFAULT_CHUNK_SIZE
    colored_output: bool = True
    models: dict[str, str] = field(default_factory=dict)
    config_path: Path | None = None

    def validate(self) -> list[str]:
        """Check cross-field constraints.

        Returns:
            Warnings about settings that work but are probably unintended.

        Raises:
            ConfigValidationError: For settings that cannot work.
        """
        self.lock_dir = self.lock_dir.expanduser()

        if not self.es_hosts:
            raise ConfigValidationError("elasticsearch.hosts", self.es_hosts, "must not be empty")
        # Elasticsearch rejects index names with uppercase letters.
        if not self.index or self.index != self.index.lower():
            raise ConfigValidationError(
                "elasticsearch.index", self.index, "must be a non-empty lowercase name"
            )
        if self.chunk_size < 1:
            raise ConfigValidationError("rebuild.chunk_size", self.chunk_size, "must be positive")

        warnings: list[str] = []
        if self.lock_ttl <= 0:
            warnings.append("rebuild.lock_ttl <= 0: rebuild locks never expire")
        if not self.models:
            warnings.append("No models configured; only entry points will be used")
        return warnings


# -- typed readers -----------------------------------------------------------


def _str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigValidationError(key, value, "must be a string")
    return value


def _int(key: str, value: Any) -> int:
    # bool is an int subclass; `chunk_size = true` is a mistake, not 1.
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigValidationError(key, value, "must be an integer")
    return value


def _bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigValidationError(key, value, "must be a boolean")
    return value


def _hosts(key: str, value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(h, str) for h in value):
        raise ConfigValidationError(key, value, "must be a string or list of strings")
    return list(value)


# (section, key) -> (Config attribute, reader)
_FIELDS = {
    ("elasticsearch", "hosts"): ("es_hosts", _hosts),
    ("elasticsearch", "index"): ("index", _str),
    ("elasticsearch", "request_timeout"): ("request_timeout", _int),
    ("database", "url"): ("database_url", _str),
    ("rebuild", "lock_dir"): ("lock_dir", lambda key, value: Path(_str(key, value))),
    ("rebuild", "lock_ttl"): ("lock_ttl", _int),
    ("rebuild", "chunk_size"): ("chunk_size", _int),
    ("display", "colored_output"): ("colored_output", _bool),
}


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    config = Config(config_path=config_path)

    for (section, key), (attr, read) in _FIELDS.items():
        table = data.get(section, {})
        if key in table:
            setattr(config, attr, read(f"{section}.{key}", table[key]))

    for identifier, path in data.get("models", {}).items():
        if not isinstance(path, str) or ":" not in path:
            raise ConfigValidationError(
                f"models.{identifier}", path, "must be a 'module:Class' string"
            )
        config.models[identifier] = path

    return config


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Read *config_path* (or the default location) into a validated Config.

    A missing file is not an error: defaults are used and a warning
    says so.

    Raises:
        ConfigParseError: The file is not valid TOML.
        ConfigValidationError: A value is invalid.
    """
    path = (config_path or get_default_config_path()).expanduser().resolve()

    if not path.exists():
        config = Config()
        notice = (
            f"No config file found at {path}. Using defaults. "
            "Create one with: scout-elastic init-config"
        )
        return config, [notice, *config.validate()]

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(path, str(e)) from e

    config = _parse_config_dict(data, path)
    return config, config.validate()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Write *config* as TOML, to *config_path* or where it was loaded from."""
    path = (config_path or config.config_path or get_default_config_path()).expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {}
    for (section, key), (attr, _read) in _FIELDS.items():
        value = getattr(config, attr)
        data.setdefault(section, {})[key] = str(value) if isinstance(value, Path) else value
    if config.models:
        data["models"] = dict(config.models)

    path.write_bytes(tomli_w.dumps(data).encode("utf-8"))
