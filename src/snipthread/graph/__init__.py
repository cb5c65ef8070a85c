"""Snippet graph: data model and read-only store adapters."""

from snipthread.graph.memory_store import MemoryGraphStore
from snipthread.graph.models import Direction, Edge, Snippet
from snipthread.graph.sqlite_store import SQLiteGraphStore
from snipthread.graph.store import GraphStore

__all__ = [
    "Direction",
    "Edge",
    "GraphStore",
    "MemoryGraphStore",
    "SQLiteGraphStore",
    "Snippet",
]
