from __future__ import annotations

import copy
import datetime as dt
from typing import Any

import pytest


class FakeUpdateResult:
    def __init__(self, matched_count: int, modified_count: int) -> None:
        self.matched_count = matched_count
        self.modified_count = modified_count


def _evaluate(expr: Any, doc: dict[str, Any]) -> Any:
    if isinstance(expr, dict) and "$literal" in expr:
        return copy.deepcopy(expr["$literal"])
    if isinstance(expr, dict) and "$ifNull" in expr:
        for candidate in expr["$ifNull"]:
            value = _evaluate(candidate, doc)
            if value is not None:
                return value
        return None
    if isinstance(expr, str) and expr.startswith("$"):
        return doc.get(expr[1:])
    return expr


class FakeCollection:
    """In-memory stand-in for the pymongo calls the corrector makes."""

    def __init__(self, documents=()) -> None:
        self.documents = [copy.deepcopy(doc) for doc in documents]
        self.find_calls: list[dict[str, Any]] = []
        self.update_calls: list[tuple[dict[str, Any], Any]] = []

    def _match(self, query: dict[str, Any]):
        for doc in self.documents:
            if all(doc.get(key) == value for key, value in query.items()):
                return doc
        return None

    def find_one(self, query: dict[str, Any]):
        self.find_calls.append(query)
        doc = self._match(query)
        return copy.deepcopy(doc) if doc is not None else None

    def update_one(self, query: dict[str, Any], update: Any) -> FakeUpdateResult:
        self.update_calls.append((query, update))
        doc = self._match(query)
        if doc is None:
            return FakeUpdateResult(0, 0)

        before = copy.deepcopy(doc)
        for stage in update:
            snapshot = copy.deepcopy(doc)
            for field, expr in stage["$set"].items():
                doc[field] = _evaluate(expr, snapshot)
        return FakeUpdateResult(1, int(doc != before))


class FakeClient:
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


def match_document(**overrides: Any) -> dict[str, Any]:
    base = {
        "matchId": "69102",
        "series": "England tour of Sri Lanka",
        "status": "live",
        "matchEnded": False,
        "format": "odi",
        "teams": {
            "home": {"id": "sl", "name": "Sri Lanka", "shortName": "SL"},
            "away": {"id": "england", "name": "England", "shortName": "ENG"},
        },
    }
    base.update(overrides)
    return base


@pytest.fixture
def make_match():
    return match_document


@pytest.fixture
def make_collection():
    def _make(*documents: dict[str, Any]) -> FakeCollection:
        return FakeCollection(documents)

    return _make


@pytest.fixture
def fixed_now() -> dt.datetime:
    return dt.datetime(2026, 3, 14, 18, 30, tzinfo=dt.timezone.utc)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()
