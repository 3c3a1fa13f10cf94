"""Elasticsearch client construction and index targeting."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from elasticsearch import Elasticsearch

if TYPE_CHECKING:
    from scout_elastic.config import Config

log = logging.getLogger(__name__)


def create_client(config: Config) -> Elasticsearch:
    """Create a synchronous Elasticsearch client from configuration.

    Retries are disabled: a failed request reaches the caller as-is.
    """
    log.debug("Connecting to Elasticsearch at %s", ", ".join(config.es_hosts))
    return Elasticsearch(
        hosts=config.es_hosts,
        request_timeout=config.request_timeout,
        retry_on_timeout=False,
        max_retries=0,
    )


@dataclass
class IndexTarget:
    """A logical index name and the physical index writes currently go to.

    The rebuild orchestrator redirects the target to a temporary index
    while importing, then points it back.
    """

    name: str
    physical: str = field(default="")

    def __post_init__(self) -> None:
        if not self.physical:
            self.physical = self.name

    def redirect(self, physical: str) -> None:
        log.debug("Redirecting index %s -> %s", self.name, physical)
        self.physical = physical

    def reset(self) -> None:
        log.debug("Restoring index %s", self.name)
        self.physical = self.name

    @contextmanager
    def redirected(self, physical: str) -> Generator[IndexTarget, None, None]:
        """Temporarily send reads and writes to *physical*."""
        previous = self.physical
        self.redirect(physical)
        try:
            yield self
        finally:
            self.physical = previous


def response_body(response: Any) -> Any:
    """Unwrap an API response object into its plain body."""
    return getattr(response, "body", response)
