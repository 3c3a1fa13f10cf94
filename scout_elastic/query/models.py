"""Data classes describing a structured search query."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

SORT_DIRECTIONS: frozenset[str] = frozenset({"asc", "desc"})


class ClauseKind(str, Enum):
    """Filter variant a where clause compiles to."""

    TERM = "term"
    RANGE = "range"
    TERMS = "terms"
    MATCH_PHRASE = "match_phrase"
    NONE = "none"


def is_sequence(value: Any) -> bool:
    """Return whether a where value is a multi-value sequence (strings are scalars)."""
    return isinstance(value, (list, tuple))


@dataclass(frozen=True)
class WhereClause:
    """A single filter term such as ``status = "active"`` or ``range.price = [0, 10]``.

    Key shapes:
        - ``term.<field>`` with a sequence: one ``term`` filter per value
        - ``range.<field>`` with ``[gte, lte]``: one ``range`` filter
        - ``<field>`` with a sequence: one ``terms`` filter
        - ``<field>`` with a scalar: one ``match_phrase`` filter

    A trailing ``:operator`` suffix on the key is accepted and ignored.
    """

    key: str
    value: Any

    @property
    def field_key(self) -> str:
        """Key with any ``:operator`` suffix removed."""
        return self.key.split(":", 1)[0]

    @property
    def prefix(self) -> str | None:
        """The ``term``/``range`` prefix of a dotted key, or None."""
        key = self.field_key
        if "." not in key:
            return None
        return key.split(".", 1)[0]

    @property
    def field(self) -> str:
        """Target document field.

        The ``term.``/``range.`` prefix is removed for those variants; scalar
        values keep the full key so nested paths like ``author.name`` work.
        """
        if self.kind in (ClauseKind.TERM, ClauseKind.RANGE):
            return self.field_key.split(".", 1)[1]
        return self.field_key

    @property
    def kind(self) -> ClauseKind:
        if not is_sequence(self.value):
            return ClauseKind.MATCH_PHRASE
        prefix = self.prefix
        if prefix is None:
            return ClauseKind.TERMS
        if prefix == "term":
            return ClauseKind.TERM
        if prefix == "range":
            return ClauseKind.RANGE
        return ClauseKind.NONE


@dataclass(frozen=True)
class SortOrder:
    """Sort directive for one column."""

    column: str
    direction: str = "asc"

    def __post_init__(self) -> None:
        if self.direction not in SORT_DIRECTIONS:
            raise ValueError(
                f"Invalid sort direction {self.direction!r} for column {self.column!r}"
            )


@dataclass
class SearchQuery:
    """Structured query handed to the compiler.

    Attributes:
        term: Free-text term, matched as ``*term*``.
        wheres: Filter terms, AND-ed together in order.
        orders: Sort directives in priority order.
        limit: Maximum number of hits when not paginating.
        page: 1-based page number (used together with per_page).
        per_page: Page size.
        raw_body: Deep-merged into the compiled request body.
        raw_filters: Deep-merged into the compiled ``query`` clause.
        fields: Source fields to return; by default no source is returned.
        index: Explicit index to search instead of the engine's target.
    """

    term: str | None = None
    wheres: list[WhereClause] = field(default_factory=list)
    orders: list[SortOrder] = field(default_factory=list)
    limit: int | None = None
    page: int | None = None
    per_page: int | None = None
    raw_body: dict[str, Any] | None = None
    raw_filters: dict[str, Any] | None = None
    fields: list[str] | None = None
    index: str | None = None

    def where(self, key: str, value: Any) -> SearchQuery:
        """Append a where clause and return the query for chaining."""
        self.wheres.append(WhereClause(key, value))
        return self

    def order_by(self, column: str, direction: str = "asc") -> SearchQuery:
        """Append a sort order and return the query for chaining."""
        self.orders.append(SortOrder(column, direction))
        return self

    def paginate(self, page: int, per_page: int) -> SearchQuery:
        """Select a result page and return the query for chaining."""
        self.page = page
        self.per_page = per_page
        return self
