"""Errors raised by scout-elastic.

Failures reported by the Elasticsearch client (``ApiError``,
``TransportError``) are not wrapped; they reach the caller unchanged.
"""

from pathlib import Path


class ScoutElasticError(Exception):
    """Root of every error defined here."""


# Configuration
class ConfigError(ScoutElasticError):
    """The config file cannot be used."""


class ConfigParseError(ConfigError):
    """The config file is not valid TOML."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """A config key holds a value of the wrong type or range."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}' ({value!r}): {reason}")


# Models
class ModelError(ScoutElasticError):
    """A model cannot be found or does not support indexing."""


class ModelNotFoundError(ModelError):
    """No model is registered under the given identifier."""

    def __init__(self, identifier: str, known: list[str] | None = None) -> None:
        self.identifier = identifier
        self.known = known or []
        message = f"Unknown model: {identifier}"
        if self.known:
            message += f" (known: {', '.join(sorted(self.known))})"
        super().__init__(message)


class ModelNotSearchableError(ModelError):
    """Class does not implement the searchable model contract."""

    def __init__(self, target: object, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"{target!r} is not searchable: {reason}")


# Rebuild lock
class LockError(ScoutElasticError):
    pass


class LockCorruptError(LockError):
    """Lock marker exists but its metadata cannot be read."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Unreadable rebuild lock {path}: {detail}")
