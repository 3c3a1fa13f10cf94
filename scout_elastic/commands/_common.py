"""Helpers shared by the index commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from elasticsearch import ApiError, TransportError

from scout_elastic.config import Config
from scout_elastic.db import get_session
from scout_elastic.engine.client import create_client
from scout_elastic.engine.engine import ElasticsearchEngine
from scout_elastic.exceptions import ModelError
from scout_elastic.utils.output import error

if TYPE_CHECKING:
    from elasticsearch import Elasticsearch
    from sqlalchemy.orm import Session

    from scout_elastic.cli import Context

EXIT_SUCCESS = 0
EXIT_ENGINE_ERROR = 2
EXIT_NO_MODEL = 3
EXIT_NO_CONFIG = 4


def require_config(ctx: Context) -> Config:
    """Return the loaded config or exit."""
    if ctx.config is None:
        error("Configuration not loaded")
        raise SystemExit(EXIT_NO_CONFIG)
    return ctx.config


def resolve_model(ctx: Context, identifier: str) -> type:
    """Look up a model by identifier or exit with EXIT_NO_MODEL."""
    try:
        return ctx.models.get(identifier)
    except (ModelError, ImportError) as e:
        error(str(e), hint="Register models under \\[models] in the config file")
        raise SystemExit(EXIT_NO_MODEL)


@contextmanager
def open_engine(ctx: Context) -> Iterator[tuple[Elasticsearch, Session, ElasticsearchEngine]]:
    """Open client, database session and engine for one command run.

    Elasticsearch failures inside the block are reported and turned
    into ``SystemExit(EXIT_ENGINE_ERROR)``.
    """
    config = require_config(ctx)
    client = create_client(config)
    try:
        with get_session(config.database_url) as session:
            yield client, session, ElasticsearchEngine(client, config.index, session)
    except (ApiError, TransportError) as e:
        error(f"Elasticsearch error: {e}")
        raise SystemExit(EXIT_ENGINE_ERROR)
    finally:
        client.close()
