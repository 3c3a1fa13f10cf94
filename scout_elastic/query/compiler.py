"""Compile a SearchQuery into an Elasticsearch request body."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from scout_elastic.query.models import ClauseKind, SearchQuery, SortOrder, WhereClause

log = logging.getLogger(__name__)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* into a copy of *base*.

    Precedence rules:
        - both values are mappings: merged key by key
        - both values are lists: concatenated, base items first
        - anything else: the override value replaces the base value

    Neither argument is modified.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = current + copy.deepcopy(value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _bound_present(value: Any) -> bool:
    """Return whether a range bound is set.

    Zero is a real bound. ``None``, ``""`` and ``False`` are absent.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return True
    return bool(value)


def _build_range(bounds: list[Any] | tuple[Any, ...]) -> dict[str, Any]:
    """Build the ``gte``/``lte`` body of a range filter from ``[low, high]``."""
    low = bounds[0] if len(bounds) > 0 else None
    high = bounds[1] if len(bounds) > 1 else None
    range_body: dict[str, Any] = {}
    if _bound_present(low):
        range_body["gte"] = low
    if _bound_present(high):
        range_body["lte"] = high
    return range_body


def compile_where(clause: WhereClause) -> list[dict[str, Any]]:
    """Compile one where clause into zero or more filters."""
    kind = clause.kind
    field = clause.field

    if kind is ClauseKind.TERM:
        return [{"term": {field: value}} for value in clause.value]
    if kind is ClauseKind.RANGE:
        return [{"range": {field: _build_range(clause.value)}}]
    if kind is ClauseKind.TERMS:
        return [{"terms": {field: list(clause.value)}}]
    if kind is ClauseKind.MATCH_PHRASE:
        return [{"match_phrase": {field: clause.value}}]

    log.debug("Ignoring where clause with unsupported prefix: %s", clause.key)
    return []


def compile_filters(wheres: Iterable[WhereClause]) -> list[dict[str, Any]]:
    """Compile where clauses into a flat, ordered filter list."""
    filters: list[dict[str, Any]] = []
    for clause in wheres:
        filters.extend(compile_where(clause))
    return filters


def compile_sort(orders: Iterable[SortOrder]) -> list[dict[str, str]] | None:
    """Compile sort orders, or return None when there are none."""
    sort = [{order.column: order.direction} for order in orders]
    return sort or None


def compile_pagination(query: SearchQuery) -> dict[str, int]:
    """Compute ``from``/``size`` for a query.

    Pagination takes precedence over a plain limit.
    """
    if query.page is not None and query.per_page is not None:
        return {
            "from": (query.page * query.per_page) - query.per_page,
            "size": query.per_page,
        }
    if query.limit is not None:
        return {"size": query.limit}
    return {}


def compile_query(query: SearchQuery) -> dict[str, Any]:
    """Build the request body for *query*.

    The body never carries an empty ``bool`` query: when neither a term,
    a where clause nor an override contributes a constraint, the ``query``
    key is left out entirely.
    """
    must: list[dict[str, Any]] = []
    if query.term:
        must.append({"query_string": {"query": f"*{query.term}*"}})
    must.extend(compile_filters(query.wheres))

    body: dict[str, Any] = {"query": {"bool": {}}}
    if must:
        body["query"]["bool"]["must"] = must

    sort = compile_sort(query.orders)
    if sort is not None:
        body["sort"] = sort

    body.update(compile_pagination(query))

    if query.raw_body:
        body = deep_merge(body, query.raw_body)
    if query.raw_filters:
        body["query"] = deep_merge(body.get("query") or {}, query.raw_filters)

    # Projection: explicit fields, then a raw body _source, then nothing.
    if query.fields is not None:
        body["_source"] = list(query.fields)
    elif not (query.raw_body and "_source" in query.raw_body):
        body["_source"] = False

    query_clause = body.get("query")
    if isinstance(query_clause, dict):
        if not query_clause.get("bool"):
            query_clause.pop("bool", None)
        if not query_clause:
            del body["query"]

    return body


def total_hits(raw: Mapping[str, Any]) -> int:
    """Read the total hit count from a raw search response.

    Elasticsearch reports ``{"value": n, "relation": "eq"}``; older
    engines report a bare integer. Only the number is returned.
    """
    total = raw.get("hits", {}).get("total", 0)
    if isinstance(total, Mapping):
        return int(total.get("value", 0))
    return int(total or 0)
