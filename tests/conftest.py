"""Shared test fixtures for SnipThread."""

from __future__ import annotations

from pathlib import Path

import pytest

from snipthread.graph.memory_store import MemoryGraphStore
from snipthread.graph.models import GOAL_TYPE, Snippet
from snipthread.graph.sqlite_store import SQLiteGraphStore


def _seed(store) -> None:
    """A small journal: two project threads, a goal, and one orphan thought.

    id  ts   type  cluster       links
    1   10   note  productivity  2
    2   20   note  None          1, 4
    3   30   goal  None
    4   40   note  productivity  2, 6
    5   50   note  health
    6   60   goal  productivity  4
    7   70   note  None
    """
    rows = [
        (1, 10, "note", "productivity", "Pomodoro felt too rigid"),
        (2, 20, "note", None, "Try 50 minute blocks instead"),
        (3, 30, GOAL_TYPE, None, "Write every morning"),
        (4, 40, "note", "productivity", "Blocks work better after coffee"),
        (5, 50, "note", "health", "Slept badly again"),
        (6, 60, GOAL_TYPE, "productivity", "Protect the first two hours"),
        (7, 70, "note", None, "Random idea about birds"),
    ]
    for snippet_id, ts, kind, cluster, content in rows:
        store.add_snippet(
            content, snippet_type=kind, timestamp=ts, cluster_label=cluster, snippet_id=snippet_id
        )
    for source_id, target_id in [(1, 2), (4, 2), (6, 4)]:
        store.add_edge(source_id, target_id)


@pytest.fixture
def memory_store() -> MemoryGraphStore:
    store = MemoryGraphStore()
    _seed(store)
    return store


@pytest.fixture
def sqlite_store(tmp_path: Path):
    store = SQLiteGraphStore(tmp_path / ".snipthread" / "thread.db")
    _seed(store)
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path: Path):
    """The seeded journal on each backend."""
    if request.param == "memory":
        yield request.getfixturevalue("memory_store")
    else:
        yield request.getfixturevalue("sqlite_store")


@pytest.fixture
def snippet_factory():
    """Build snippets with sensible defaults."""
    def make(snippet_id: int, timestamp: int, **kwargs) -> Snippet:
        return Snippet(id=snippet_id, timestamp=timestamp, **kwargs)

    return make
