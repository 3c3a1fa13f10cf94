"""Turn raw search hits back into ORM records.

Resolvers are looked up per document type from an explicit
:class:`ResolverRegistry`. Models without a registered resolver fall back
to :class:`DefaultResolver`, which loads all hit ids in one query.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Union

from sqlalchemy import select

from scout_elastic.engine.results import SearchResult, parse_result

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from scout_elastic.query.models import SearchQuery

Resolver = Callable[[SearchResult, type], list[Any]]

log = logging.getLogger(__name__)


class ResolverRegistry:
    """Document type (or model class) → resolver callable.

    Populated at startup and only read afterwards; registering while
    results are being mapped on other threads is not supported.
    """

    def __init__(self) -> None:
        self._by_class: dict[type, Resolver] = {}
        self._by_type: dict[str, Resolver] = {}

    def register(self, target: Union[str, type], resolver: Resolver) -> ResolverRegistry:
        """Register *resolver* for a model class or a document type name."""
        if isinstance(target, type):
            self._by_class[target] = resolver
        else:
            self._by_type[target] = resolver
        return self

    def lookup(self, model: type) -> Resolver | None:
        """Find the resolver for *model*.

        Class registrations win, nearest supertype first; then the
        model's document type name is tried.
        """
        for klass in model.__mro__:
            if klass in self._by_class:
                return self._by_class[klass]
        searchable_as = getattr(model, "searchable_as", None)
        if callable(searchable_as):
            return self._by_type.get(searchable_as())
        return None

    def __len__(self) -> int:
        return len(self._by_class) + len(self._by_type)


def _coerce_keys(column: Any, ids: list[str]) -> list[Any]:
    """Convert string hit ids to the primary key column's Python type."""
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return list(ids)
    if python_type is str:
        return list(ids)

    keys = []
    for hit_id in ids:
        try:
            keys.append(python_type(hit_id))
        except (TypeError, ValueError):
            log.debug("Skipping hit id %r not convertible to %s", hit_id, python_type.__name__)
    return keys


class DefaultResolver:
    """Load hit records by primary key and return them in hit order.

    Hits whose record no longer exists in the database are dropped.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def __call__(self, result: SearchResult, model: type) -> list[Any]:
        ids = result.ids
        if not ids:
            return []

        key_column = model.search_key_column()
        keys = _coerce_keys(key_column, ids)
        records = self.session.scalars(select(model).where(key_column.in_(keys))).all()
        by_key = {str(record.search_key()): record for record in records}

        missing = len(set(ids) - set(by_key))
        if missing:
            log.debug("Dropping %d stale hit(s) for %s", missing, model.__name__)

        return [by_key[hit_id] for hit_id in ids if hit_id in by_key]


class ResultMapper:
    """Map raw search results to records using a resolver registry."""

    def __init__(self, registry: ResolverRegistry, session: Session) -> None:
        self.registry = registry
        self.default_resolver = DefaultResolver(session)

    def resolver_for(self, model: type) -> Resolver:
        return self.registry.lookup(model) or self.default_resolver

    def resolve(
        self,
        query: SearchQuery | None,
        raw_result: Mapping[str, Any] | SearchResult,
        model: type,
    ) -> list[Any]:
        """Resolve *raw_result* into records of *model*.

        Returns an empty list without calling any resolver when the
        result has no hits at all.
        """
        result = raw_result if isinstance(raw_result, SearchResult) else parse_result(raw_result)
        if result.total == 0:
            return []
        return self.resolver_for(model)(result, model)
