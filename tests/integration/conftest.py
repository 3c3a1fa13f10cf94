"""Integration test fixtures for a live Elasticsearch node."""

from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING

import pytest

from scout_elastic.config import Config
from scout_elastic.engine.client import create_client

if TYPE_CHECKING:
    from collections.abc import Generator

    from elasticsearch import Elasticsearch

ES_URL_ENV = "SCOUT_ELASTIC_TEST_URL"


@pytest.fixture(scope="session")
def es_url() -> str:
    url = os.environ.get(ES_URL_ENV)
    if not url:
        pytest.skip(f"{ES_URL_ENV} not set")
    return url


@pytest.fixture
def live_config(es_url: str, temp_dir) -> Config:
    """Config pointing at a throwaway index on the live node."""
    return Config(
        es_hosts=[es_url],
        index=f"scout_test_{uuid.uuid4().hex[:8]}",
        database_url=f"sqlite:///{temp_dir / 'records.db'}",
        lock_dir=temp_dir / "locks",
        chunk_size=2,
    )


@pytest.fixture
def live_client(live_config: Config) -> Generator[Elasticsearch, None, None]:
    client = create_client(live_config)
    try:
        client.info()
    except Exception as e:
        client.close()
        pytest.skip(f"Elasticsearch not reachable: {e}")
    try:
        yield client
    finally:
        for index in (live_config.index, f"{live_config.index}_tmp"):
            client.options(ignore_status=404).indices.delete(index=index)
        client.close()
