"""Unit tests for bulk request bodies."""

from __future__ import annotations

import logging

from scout_elastic.engine.bulk import (
    build_delete_operations,
    build_upsert_operations,
    log_bulk_errors,
)


def test_upsert_pairs_action_and_document(article_model) -> None:
    records = [
        article_model(id=2, title="B", status="draft", views=0),
        article_model(id=1, title="A", status="published", views=3),
    ]
    ops = build_upsert_operations(records, "scout", "articles")

    assert len(ops) == 4
    assert ops[0] == {"update": {"_index": "scout", "_id": "2"}}
    assert ops[1] == {
        "doc": {"id": 2, "title": "B", "status": "draft", "views": 0, "doc_type": "articles"},
        "doc_as_upsert": True,
    }
    assert ops[2] == {"update": {"_index": "scout", "_id": "1"}}
    assert ops[3]["doc"]["title"] == "A"


def test_upsert_keeps_duplicates(article_model) -> None:
    record = article_model(id=5, title="dup", status="x", views=1)
    ops = build_upsert_operations([record, record], "scout", "articles")
    assert [op["update"]["_id"] for op in ops[::2]] == ["5", "5"]


def test_upsert_of_nothing_is_empty() -> None:
    assert build_upsert_operations([], "scout", "articles") == []


def test_delete_has_no_bodies(note_model) -> None:
    records = [note_model(slug="a", body=""), note_model(slug="b", body="")]
    assert build_delete_operations(records, "scout") == [
        {"delete": {"_index": "scout", "_id": "a"}},
        {"delete": {"_index": "scout", "_id": "b"}},
    ]


def test_log_bulk_errors_without_errors() -> None:
    assert log_bulk_errors({"errors": False, "items": []}) == 0


def test_log_bulk_errors_counts_failures(caplog) -> None:
    response = {
        "errors": True,
        "items": [
            {"update": {"_id": "1", "status": 200}},
            {"update": {"_id": "2", "status": 400, "error": {"type": "mapper_parsing_exception"}}},
            {"delete": {"_id": "3", "status": 500, "error": {"type": "boom"}}},
        ],
    }
    with caplog.at_level(logging.WARNING, logger="scout_elastic.engine.bulk"):
        assert log_bulk_errors(response) == 2
    assert "mapper_parsing_exception" in caplog.text
