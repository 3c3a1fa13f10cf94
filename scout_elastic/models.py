"""Searchable model contract and the identifier → model lookup table."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator, Mapping
from importlib.metadata import entry_points
from typing import Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable

from scout_elastic.exceptions import ModelNotFoundError, ModelNotSearchableError

ENTRY_POINT_GROUP = "scout_elastic.models"

log = logging.getLogger(__name__)


class Searchable:
    """Mixin for SQLAlchemy ORM models that are synced to the search index.

    Subclasses may set ``__searchable_as__`` to choose the document type
    (defaults to the table name), override :meth:`to_searchable_dict` to
    control the indexed document, and override :meth:`searchable_mapping`
    to provide an index mapping.
    """

    __searchable_as__: str | None = None

    @classmethod
    def searchable_as(cls) -> str:
        """Document type discriminator for this model."""
        return cls.__searchable_as__ or cls.__tablename__  # type: ignore[attr-defined]

    @classmethod
    def searchable_mapping(cls) -> dict[str, Any] | None:
        """Index mapping for this model, or None to let the engine infer one."""
        return None

    @classmethod
    def search_key_column(cls):
        """The primary key column used as the document ``_id``."""
        return sa_inspect(cls).primary_key[0]

    def search_key(self) -> Any:
        """Primary key value of this record."""
        return sa_inspect(type(self)).primary_key_from_instance(self)[0]

    def to_searchable_dict(self) -> dict[str, Any]:
        """Column values of this record, keyed by attribute name."""
        mapper = sa_inspect(type(self))
        return {attr.key: getattr(self, attr.key) for attr in mapper.column_attrs}


def ensure_searchable(model: object) -> type:
    """Validate that *model* is a mapped class implementing the searchable contract.

    Raises:
        ModelNotSearchableError: If the class is not an ORM model or lacks
            ``searchable_as``.
    """
    if not isinstance(model, type):
        raise ModelNotSearchableError(model, "expected a model class")
    if not callable(getattr(model, "searchable_as", None)):
        raise ModelNotSearchableError(model, "missing searchable_as()")
    try:
        sa_inspect(model)
    except NoInspectionAvailable as e:
        raise ModelNotSearchableError(model, "not a mapped SQLAlchemy class") from e
    return model


def import_object(path: str) -> Any:
    """Import ``package.module:Attribute``."""
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ValueError(f"Expected 'module:Attribute', got {path!r}")
    module = importlib.import_module(module_name)
    return getattr(module, attr)


class ModelRegistry:
    """Explicit lookup table from model identifier to model class.

    Built once at the command-line boundary; commands look models up
    by identifier instead of importing arbitrary class paths.
    """

    def __init__(self) -> None:
        self._models: dict[str, type] = {}

    def register(self, identifier: str, model: type) -> ModelRegistry:
        self._models[identifier] = ensure_searchable(model)
        return self

    def get(self, identifier: str) -> type:
        """Return the model for *identifier*, also matching document types.

        Raises:
            ModelNotFoundError: If nothing is registered under that name.
        """
        if identifier in self._models:
            return self._models[identifier]
        for model in self._models.values():
            if model.searchable_as() == identifier:
                return model
        raise ModelNotFoundError(identifier, list(self._models))

    def identifiers(self) -> list[str]:
        return sorted(self._models)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._models

    def __iter__(self) -> Iterator[tuple[str, type]]:
        return iter(sorted(self._models.items()))

    def __len__(self) -> int:
        return len(self._models)

    def load_paths(self, paths: Mapping[str, str]) -> ModelRegistry:
        """Register models from an ``identifier = "module:Class"`` table."""
        for identifier, path in paths.items():
            self.register(identifier, import_object(path))
        return self

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> ModelRegistry:
        """Register models advertised by installed distributions."""
        for entry_point in entry_points(group=group):
            log.debug("Loading model entry point %s = %s", entry_point.name, entry_point.value)
            self.register(entry_point.name, entry_point.load())
        return self
