"""Build bulk request bodies for upserting and deleting records."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

DOC_TYPE_FIELD = "doc_type"

log = logging.getLogger(__name__)


def build_upsert_operations(
    records: Iterable[Any],
    index: str,
    doc_type: str,
) -> list[dict[str, Any]]:
    """Pair an ``update`` action with a doc-as-upsert body for each record.

    Entries keep the input order; nothing is reordered or de-duplicated.
    The document type is stored in the ``doc_type`` field of each document.
    """
    operations: list[dict[str, Any]] = []
    for record in records:
        operations.append({"update": {"_index": index, "_id": str(record.search_key())}})
        document = dict(record.to_searchable_dict())
        document[DOC_TYPE_FIELD] = doc_type
        operations.append({"doc": document, "doc_as_upsert": True})
    return operations


def build_delete_operations(records: Iterable[Any], index: str) -> list[dict[str, Any]]:
    """Build one ``delete`` action per record (no document bodies)."""
    return [{"delete": {"_index": index, "_id": str(record.search_key())}} for record in records]


def log_bulk_errors(response: Mapping[str, Any]) -> int:
    """Log failed items of a bulk response and return how many failed."""
    if not response.get("errors"):
        return 0

    failed = []
    for item in response.get("items", []):
        for action, result in item.items():
            if result.get("error"):
                failed.append((action, result))

    if failed:
        action, result = failed[0]
        log.warning(
            "Bulk request had %d failed item(s); first: %s %s: %s",
            len(failed),
            action,
            result.get("_id"),
            result.get("error"),
        )
    return len(failed)
