"""Shared pytest fixtures."""

from __future__ import annotations

import copy
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock, patch

import pytest
from elasticsearch import ConflictError
from sqlalchemy import Integer, String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from scout_elastic.models import Searchable

if TYPE_CHECKING:
    from collections.abc import Generator

    from sqlalchemy.orm import Session


# ---------------------------------------------------------------------------
# Sample searchable models
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    pass


class Article(Searchable, Base):
    """Model with an explicit mapping and an integer key."""

    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(32), default="draft")
    views: Mapped[int] = mapped_column(Integer, default=0)

    @classmethod
    def searchable_mapping(cls) -> dict[str, Any]:
        return {
            "properties": {
                "title": {"type": "text"},
                "status": {"type": "keyword"},
                "views": {"type": "integer"},
            }
        }


class Note(Searchable, Base):
    """Model without a mapping, a string key and a custom document type."""

    __tablename__ = "notes"
    __searchable_as__ = "note"

    slug: Mapped[str] = mapped_column(String(64), primary_key=True)
    body: Mapped[str] = mapped_column(String(500))


# ---------------------------------------------------------------------------
# In-memory Elasticsearch stand-in
# ---------------------------------------------------------------------------

MUTATING_CALLS = frozenset(
    {"bulk", "reindex", "delete_by_query", "indices.create", "indices.delete", "indices.put_mapping"}
)


class FakeIndices:
    """The ``client.indices`` namespace of :class:`FakeElasticsearch`."""

    def __init__(self, es: FakeElasticsearch) -> None:
        self._es = es

    def exists(self, index: str) -> bool:
        self._es.record("indices.exists", index)
        return index in self._es.data

    def create(self, index: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        self._es.record("indices.create", index, body)
        if index in self._es.data:
            raise RuntimeError(f"index {index} already exists")
        self._es.data[index] = {}
        self._es.mappings[index] = copy.deepcopy((body or {}).get("mappings"))
        return {"acknowledged": True, "index": index}

    def delete(self, index: str) -> dict[str, Any]:
        self._es.record("indices.delete", index)
        if index not in self._es.data:
            raise RuntimeError(f"no such index {index}")
        del self._es.data[index]
        self._es.mappings.pop(index, None)
        return {"acknowledged": True}

    def refresh(self, index: str) -> dict[str, Any]:
        self._es.record("indices.refresh", index)
        return {"_shards": {"failed": 0}}

    def put_mapping(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        self._es.record("indices.put_mapping", index, body)
        self._es.mappings[index] = copy.deepcopy(body)
        return {"acknowledged": True}


class FakeElasticsearch:
    """Keeps documents in dicts and records every call made to it.

    ``data`` maps index -> _id -> ``{"source": ..., "version": n}``.
    """

    def __init__(self) -> None:
        self.data: dict[str, dict[str, dict[str, Any]]] = {}
        self.mappings: dict[str, Any] = {}
        self.calls: list[tuple[str, str | None, Any]] = []
        self.search_response: dict[str, Any] | None = None
        self.indices = FakeIndices(self)
        self.closed = False

    def record(self, name: str, index: str | None, body: Any = None) -> None:
        self.calls.append((name, index, copy.deepcopy(body)))

    @property
    def call_names(self) -> list[str]:
        return [name for name, _, _ in self.calls]

    @property
    def mutations(self) -> list[tuple[str, str | None, Any]]:
        return [call for call in self.calls if call[0] in MUTATING_CALLS]

    def docs(self, index: str) -> dict[str, dict[str, Any]]:
        return {doc_id: doc["source"] for doc_id, doc in self.data.get(index, {}).items()}

    def bulk(self, body: list[dict[str, Any]]) -> dict[str, Any]:
        self.record("bulk", None, body)
        items = []
        ops = iter(body)
        for action in ops:
            (name, meta), = action.items()
            docs = self.data.setdefault(meta["_index"], {})
            if name == "update":
                payload = next(ops)
                current = docs.get(meta["_id"], {"source": {}, "version": 0})
                source = {**current["source"], **payload["doc"]}
                docs[meta["_id"]] = {"source": source, "version": current["version"] + 1}
            elif name == "delete":
                docs.pop(meta["_id"], None)
            items.append({name: {"_id": meta["_id"], "status": 200}})
        return {"errors": False, "items": items}

    def count(self, index: str) -> dict[str, Any]:
        self.record("count", index)
        return {"count": len(self.data.get(index, {}))}

    def reindex(self, body: dict[str, Any], refresh: bool | None = None) -> dict[str, Any]:
        self.record("reindex", body["dest"]["index"], body)
        source = self.data[body["source"]["index"]]
        dest = self.data.setdefault(body["dest"]["index"], {})
        external = body["dest"].get("version_type") == "external"
        proceed = body.get("conflicts") == "proceed"
        created = conflicts = 0
        for doc_id, doc in list(source.items())[: body.get("max_docs")]:
            existing = dest.get(doc_id)
            if existing is not None and external and existing["version"] >= doc["version"]:
                # Elasticsearch stops at the first conflict unless told to proceed.
                if not proceed:
                    raise ConflictError(
                        "version_conflict_engine_exception", meta=MagicMock(status=409), body={}
                    )
                conflicts += 1
                continue
            dest[doc_id] = copy.deepcopy(doc)
            created += 1
        return {"created": created, "version_conflicts": conflicts}

    def search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        self.record("search", index, body)
        if self.search_response is not None:
            return self.search_response
        hits = [
            {"_index": index, "_id": doc_id, "_score": 1.0, "_source": doc["source"]}
            for doc_id, doc in self.data.get(index, {}).items()
        ]
        return {"took": 1, "hits": {"total": {"value": len(hits), "relation": "eq"}, "hits": hits}}

    def delete_by_query(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        self.record("delete_by_query", index, body)
        ((field, value),) = body["query"]["term"].items()
        docs = self.data.get(index, {})
        doomed = [doc_id for doc_id, doc in docs.items() if doc["source"].get(field) == value]
        for doc_id in doomed:
            del docs[doc_id]
        return {"deleted": len(doomed)}

    def close(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text(f"""[elasticsearch]
hosts = ["http://es-test:9200"]
index = "test_index"

[database]
url = "sqlite:///{temp_dir / 'records.db'}"

[rebuild]
lock_dir = "{temp_dir / 'locks'}"
lock_ttl = 600
chunk_size = 2

[display]
colored_output = false

[models]
articles = "myapp.models:Article"
""")
    return config_path


@pytest.fixture
def article_model() -> type[Article]:
    return Article


@pytest.fixture
def note_model() -> type[Note]:
    return Note


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """In-memory database with three articles and one note."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    db = sessionmaker(bind=engine)()
    db.add_all(
        [
            Article(id=1, title="Dark Pulse", status="published", views=120),
            Article(id=2, title="Night Vibe", status="draft", views=0),
            Article(id=3, title="Forest Dawn", status="published", views=45),
            Note(slug="first", body="hello"),
        ]
    )
    db.commit()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def seed_database():
    """Create and fill a file-backed database for command tests."""

    def _seed(db_path: Path) -> None:
        engine = create_engine(f"sqlite:///{db_path}")
        Base.metadata.create_all(engine)
        db = sessionmaker(bind=engine)()
        db.add_all(
            [
                Article(id=1, title="Dark Pulse", status="published", views=120),
                Article(id=2, title="Night Vibe", status="draft", views=0),
                Article(id=3, title="Forest Dawn", status="published", views=45),
            ]
        )
        db.commit()
        db.close()
        engine.dispose()

    return _seed


@pytest.fixture
def fake_es() -> FakeElasticsearch:
    return FakeElasticsearch()


@pytest.fixture
def app_context(temp_dir: Path, seed_database):
    """CLI context with a seeded database and both sample models registered."""
    from scout_elastic.cli import Context
    from scout_elastic.config import Config
    from scout_elastic.models import ModelRegistry

    db_path = temp_dir / "records.db"
    seed_database(db_path)

    ctx = Context()
    ctx.config = Config(
        index="scout",
        database_url=f"sqlite:///{db_path}",
        lock_dir=temp_dir / "locks",
        lock_ttl=600,
        chunk_size=2,
    )
    ctx.models = ModelRegistry().register("articles", Article).register("notes", Note)
    return ctx


@pytest.fixture
def patched_client(fake_es: FakeElasticsearch) -> Generator[FakeElasticsearch, None, None]:
    """Make commands talk to the in-memory client."""
    with patch("scout_elastic.commands._common.create_client", return_value=fake_es):
        yield fake_es
