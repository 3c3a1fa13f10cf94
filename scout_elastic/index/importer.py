"""Stream all records of a model from the database into the index."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from scout_elastic.engine.engine import ElasticsearchEngine

DEFAULT_CHUNK_SIZE = 500

log = logging.getLogger(__name__)


def iter_record_chunks(
    session: Session,
    model: type,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[Sequence[Any]]:
    """Yield records of *model* in primary key order, *chunk_size* at a time."""
    statement = select(model).order_by(model.search_key_column())
    result = session.scalars(statement.execution_options(yield_per=chunk_size))
    for partition in result.partitions(chunk_size):
        yield list(partition)


def import_all(
    engine: ElasticsearchEngine,
    session: Session,
    model: type,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    on_chunk: Callable[[int], None] | None = None,
) -> int:
    """Upsert every record of *model* into the engine's current index.

    Each chunk is one bulk request. *on_chunk* receives the running total
    after each chunk. Returns the number of records sent.
    """
    total = 0
    for chunk in iter_record_chunks(session, model, chunk_size):
        engine.update(chunk)
        total += len(chunk)
        log.debug("Imported %d %s record(s) into %s", total, model.searchable_as(), engine.get_index())
        if on_chunk is not None:
            on_chunk(total)
    log.info("Imported %d %s record(s) into %s", total, model.searchable_as(), engine.get_index())
    return total
