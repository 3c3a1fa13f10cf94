"""Typed view over raw search responses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from scout_elastic.query.compiler import total_hits


@dataclass
class Hit:
    """A single search hit."""

    id: str
    score: float | None
    source: dict[str, Any] = field(default_factory=dict)
    highlight: dict[str, list[str]] | None = None


@dataclass
class SearchResult:
    """Hits of one result page plus the total count."""

    hits: list[Hit]
    total: int
    took: Any = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @property
    def ids(self) -> list[str]:
        return [hit.id for hit in self.hits]

    def __len__(self) -> int:
        return len(self.hits)


def parse_result(raw: Mapping[str, Any]) -> SearchResult:
    """Convert a raw search response into a SearchResult."""
    hits = [
        Hit(
            id=str(item["_id"]),
            score=item.get("_score"),
            source=item.get("_source") or {},
            highlight=item.get("highlight"),
        )
        for item in raw.get("hits", {}).get("hits", [])
    ]
    return SearchResult(hits=hits, total=total_hits(raw), took=raw.get("took"), raw=raw)
