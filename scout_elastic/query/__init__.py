"""Structured search queries and their compilation to Elasticsearch request bodies."""

from scout_elastic.query.compiler import (
    compile_filters,
    compile_query,
    deep_merge,
    total_hits,
)
from scout_elastic.query.models import (
    ClauseKind,
    SearchQuery,
    SortOrder,
    WhereClause,
)

__all__ = [
    "ClauseKind",
    "SearchQuery",
    "SortOrder",
    "WhereClause",
    "compile_filters",
    "compile_query",
    "deep_merge",
    "total_hits",
]
