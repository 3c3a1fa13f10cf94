"""Install a model's index mapping."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from scout_elastic.engine.bulk import DOC_TYPE_FIELD

if TYPE_CHECKING:
    from elasticsearch import Elasticsearch

log = logging.getLogger(__name__)

DEFAULT_INDEX_SETTINGS: dict[str, Any] = {
    "number_of_shards": 1,
    "number_of_replicas": 0,
}


def with_doc_type_field(mapping: dict[str, Any]) -> dict[str, Any]:
    """Return *mapping* with the document type field declared as a keyword."""
    properties = dict(mapping.get("properties", {}))
    properties.setdefault(DOC_TYPE_FIELD, {"type": "keyword"})
    return {**mapping, "properties": properties}


class MappingAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


def install_mapping(
    client: Elasticsearch,
    index: str,
    model: type,
    settings: dict[str, Any] | None = None,
) -> MappingAction:
    """Create *index* with the model's mapping, or update the mapping in place.

    An existing index only receives a ``put_mapping`` call, which can add
    fields but never change existing ones. Models without a mapping leave
    an existing index untouched; a missing index is still created with the
    default settings.
    """
    mapping = model.searchable_mapping()
    if mapping:
        mapping = with_doc_type_field(mapping)

    if client.indices.exists(index=index):
        if not mapping:
            log.info("No mapping for %s, leaving %s as is", model.searchable_as(), index)
            return MappingAction.UNCHANGED
        log.info("Updating mapping of %s for %s", index, model.searchable_as())
        client.indices.put_mapping(index=index, body=mapping)
        return MappingAction.UPDATED

    body: dict[str, Any] = {
        "settings": dict(settings or DEFAULT_INDEX_SETTINGS),
        "mappings": mapping or with_doc_type_field({}),
    }
    log.info("Creating index %s for %s", index, model.searchable_as())
    client.indices.create(index=index, body=body)
    return MappingAction.CREATED
