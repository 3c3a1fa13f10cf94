"""Search engine facade used by the host application."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from scout_elastic.engine.bulk import (
    DOC_TYPE_FIELD,
    build_delete_operations,
    build_upsert_operations,
    log_bulk_errors,
)
from scout_elastic.engine.client import IndexTarget, response_body
from scout_elastic.engine.resolvers import ResolverRegistry, ResultMapper
from scout_elastic.query.compiler import compile_query, total_hits

if TYPE_CHECKING:
    from elasticsearch import Elasticsearch
    from sqlalchemy.orm import Session

    from scout_elastic.query.models import SearchQuery

log = logging.getLogger(__name__)


class ElasticsearchEngine:
    """Sync ORM records into one logical index and search it.

    Args:
        client: Elasticsearch client (or anything with the same methods).
        index: Logical index name.
        session: Database session used to resolve hits into records.
        registry: Resolver registry; an empty one is created if omitted.
    """

    def __init__(
        self,
        client: Elasticsearch,
        index: str,
        session: Session,
        registry: ResolverRegistry | None = None,
    ) -> None:
        self.client = client
        self.target = IndexTarget(index)
        self.registry = registry if registry is not None else ResolverRegistry()
        self.mapper = ResultMapper(self.registry, session)

    # -- index targeting ---------------------------------------------------

    def get_index(self) -> str:
        """Physical index currently written to and searched."""
        return self.target.physical

    def set_index(self, index: str) -> ElasticsearchEngine:
        self.target.redirect(index)
        return self

    # -- writes ------------------------------------------------------------

    def update(self, records: Sequence[Any]) -> Mapping[str, Any] | None:
        """Upsert *records* in one bulk request.

        All records must be of the same model. Returns the bulk response,
        or None when there was nothing to send.
        """
        if not records:
            return None
        doc_type = type(records[0]).searchable_as()
        operations = build_upsert_operations(records, self.get_index(), doc_type)
        log.debug("Bulk upsert of %d %s record(s) into %s", len(records), doc_type, self.get_index())
        response = response_body(self.client.bulk(body=operations))
        log_bulk_errors(response)
        return response

    def delete(self, records: Sequence[Any]) -> Mapping[str, Any] | None:
        """Remove *records* from the index in one bulk request."""
        if not records:
            return None
        operations = build_delete_operations(records, self.get_index())
        log.debug("Bulk delete of %d record(s) from %s", len(records), self.get_index())
        response = response_body(self.client.bulk(body=operations))
        log_bulk_errors(response)
        return response

    def flush(self, model: type) -> Mapping[str, Any]:
        """Delete every document of *model*'s type from the index."""
        doc_type = model.searchable_as()
        log.info("Flushing %s documents from %s", doc_type, self.get_index())
        response = self.client.delete_by_query(
            index=self.get_index(),
            body={"query": {"term": {DOC_TYPE_FIELD: doc_type}}},
        )
        return response_body(response)

    # -- reads -------------------------------------------------------------

    def search(self, query: SearchQuery) -> Mapping[str, Any]:
        """Run *query* and return the raw response."""
        index = query.index or self.get_index()
        body = compile_query(query)
        log.debug("Search %s: %s", index, body)
        return response_body(self.client.search(index=index, body=body))

    def paginate(self, query: SearchQuery, per_page: int, page: int) -> Mapping[str, Any]:
        """Run *query* for one result page.

        The response gains an ``nbPages`` entry with the page count.
        *query* itself is left unchanged.
        """
        raw = self.search(replace(query).paginate(page, per_page))
        result = dict(raw)
        total = total_hits(result)
        result["nbPages"] = -(-total // per_page) if per_page else 0
        return result

    def map_ids(self, raw: Mapping[str, Any]) -> list[str]:
        """Hit ids of a raw response, in hit order."""
        return [str(hit["_id"]) for hit in raw.get("hits", {}).get("hits", [])]

    def map(self, query: SearchQuery | None, raw: Mapping[str, Any], model: type) -> list[Any]:
        """Resolve a raw response into records of *model*."""
        return self.mapper.resolve(query, raw, model)

    def get_total_count(self, raw: Mapping[str, Any]) -> int:
        return total_hits(raw)

    def register_resolver(self, target: str | type, resolver) -> ElasticsearchEngine:
        self.registry.register(target, resolver)
        return self
