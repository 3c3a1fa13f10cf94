"""Elasticsearch engine: bulk sync, search and result resolution."""

from scout_elastic.engine.bulk import (
    DOC_TYPE_FIELD,
    build_delete_operations,
    build_upsert_operations,
)
from scout_elastic.engine.client import IndexTarget, create_client
from scout_elastic.engine.engine import ElasticsearchEngine
from scout_elastic.engine.resolvers import DefaultResolver, ResolverRegistry, ResultMapper
from scout_elastic.engine.results import Hit, SearchResult, parse_result

__all__ = [
    "DOC_TYPE_FIELD",
    "DefaultResolver",
    "ElasticsearchEngine",
    "Hit",
    "IndexTarget",
    "ResolverRegistry",
    "ResultMapper",
    "SearchResult",
    "build_delete_operations",
    "build_upsert_operations",
    "create_client",
    "parse_result",
]
