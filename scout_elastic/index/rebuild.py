"""Rebuild a logical index without downtime.

When the mapping changes, records are first imported into a temporary
index while the original keeps serving searches. The original is then
recreated with the new mapping and refilled from the temporary index with
``version_type: external``, so documents written to the original in the
meantime are not overwritten by older copies.

There is no rollback: if a step fails after the original index has been
deleted, the temporary index still holds the data and a forced re-run
is needed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from scout_elastic.engine.client import response_body
from scout_elastic.index.importer import DEFAULT_CHUNK_SIZE, import_all
from scout_elastic.index.mapping import install_mapping

if TYPE_CHECKING:
    from elasticsearch import Elasticsearch
    from sqlalchemy.orm import Session

    from scout_elastic.engine.engine import ElasticsearchEngine
    from scout_elastic.index.lock import RebuildLock

TMP_SUFFIX = "_tmp"
ALREADY_RUNNING_MESSAGE = "Rebuild running. Retry with --force."
COMPLETED_MESSAGE = "Elastic rebuild completed."

log = logging.getLogger(__name__)


class RebuildState(str, Enum):
    IDLE = "idle"
    LOCK_HELD = "lock_held"
    SWAPPING = "swapping"
    IMPORTING = "importing"


class RebuildStatus(str, Enum):
    COMPLETED = "completed"
    ALREADY_RUNNING = "already_running"


class RebuildOrchestrator:
    """Drive a full rebuild of the engine's logical index.

    Args:
        client: Elasticsearch client used for index administration.
        engine: Engine whose index target is redirected during import.
        session: Database session the records are read from.
        lock: Lock keyed by the engine's logical index.
        chunk_size: Records per bulk request while importing.
        settings: Index settings for newly created indices.
        report: Receives human-readable progress messages.
    """

    def __init__(
        self,
        client: Elasticsearch,
        engine: ElasticsearchEngine,
        session: Session,
        lock: RebuildLock,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        settings: dict[str, Any] | None = None,
        report: Callable[[str], None] | None = None,
    ) -> None:
        self.client = client
        self.engine = engine
        self.session = session
        self.lock = lock
        self.chunk_size = chunk_size
        self.settings = settings
        self.report = report
        self.state = RebuildState.IDLE

    @property
    def index(self) -> str:
        return self.engine.target.name

    @property
    def tmp_index(self) -> str:
        return f"{self.index}{TMP_SUFFIX}"

    def _say(self, message: str) -> None:
        log.debug(message)
        if self.report is not None:
            self.report(message)

    def rebuild(self, model: type, use_mapping: bool = False, force: bool = False) -> RebuildStatus:
        """Rebuild the index for *model*.

        Args:
            model: Searchable model to import.
            use_mapping: Rebuild the physical index with the model's
                (changed) mapping through a temporary index.
            force: Clear an existing lock first, without checking whether
                its holder is still running.

        Returns:
            ``ALREADY_RUNNING`` if another rebuild holds the lock (nothing
            is touched), otherwise ``COMPLETED``.
        """
        if force:
            self.lock.clear()

        if not self.lock.acquire():
            self._say(ALREADY_RUNNING_MESSAGE)
            return RebuildStatus.ALREADY_RUNNING

        self.state = RebuildState.LOCK_HELD
        try:
            if not self.client.indices.exists(index=self.index):
                self._say(f"Mapping model {model.searchable_as()}")
                install_mapping(self.client, self.index, model, self.settings)
                self._import(model)
            elif use_mapping:
                self._swap(model)
            else:
                self._import(model)
        finally:
            self.lock.release()
            self.state = RebuildState.IDLE

        self._say(COMPLETED_MESSAGE)
        return RebuildStatus.COMPLETED

    def _import(self, model: type) -> int:
        self.state = RebuildState.IMPORTING
        self._say(f"Import model {model.searchable_as()}")
        return import_all(self.engine, self.session, model, self.chunk_size)

    def _delete_index(self, index: str) -> None:
        self._say(f"Delete index {index}")
        response = response_body(self.client.indices.delete(index=index))
        log.debug("Delete %s: %s", index, response)

    def _swap(self, model: type) -> None:
        index, tmp_index = self.index, self.tmp_index
        self.state = RebuildState.SWAPPING

        if self.client.indices.exists(index=tmp_index):
            self._delete_index(tmp_index)

        self._say(f"Mapping model {model.searchable_as()} into {tmp_index}")
        install_mapping(self.client, tmp_index, model, self.settings)

        with self.engine.target.redirected(tmp_index):
            self._import(model)
        self.state = RebuildState.SWAPPING

        self._delete_index(index)
        self._say(f"Mapping model {model.searchable_as()} into {index}")
        install_mapping(self.client, index, model, self.settings)

        self.client.indices.refresh(index=tmp_index)
        size = int(response_body(self.client.count(index=tmp_index)).get("count", 0))
        if size > 0:
            self._say(f"Rename index {tmp_index} -> {index}, Total Size: {size}")
            response = self.client.reindex(
                body={
                    "max_docs": size + 1,
                    "conflicts": "proceed",
                    "source": {"index": tmp_index},
                    "dest": {"index": index, "version_type": "external"},
                },
                refresh=True,
            )
            log.debug("Reindex %s -> %s: %s", tmp_index, index, response_body(response))

        self._delete_index(tmp_index)
