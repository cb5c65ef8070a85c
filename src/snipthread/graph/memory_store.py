"""In-process snippet graph backed by a NetworkX undirected graph."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable

import networkx as nx

from snipthread.exceptions import GraphError, StoreUnavailable
from snipthread.graph.models import NOTE_TYPE, Direction, Edge, Snippet
from snipthread.graph.store import GraphStore


class MemoryGraphStore(GraphStore):
    """Holds snippets as graph nodes and edges as undirected graph edges.

    Reads never mutate the graph, so concurrent queries are safe.
    """

    def __init__(
        self,
        snippets: Iterable[Snippet] = (),
        edges: Iterable[tuple[int, int]] = (),
    ) -> None:
        self.graph = nx.Graph()
        self._closed = False
        for snippet in snippets:
            self.put(snippet)
        for source_id, target_id in edges:
            self.add_edge(source_id, target_id)

    def _snippets(self) -> Iterable[Snippet]:
        if self._closed:
            raise StoreUnavailable("Snippet store is closed")
        return (data["snippet"] for _, data in self.graph.nodes(data=True))

    def _candidates(
        self, focus: Snippet, predicate: Callable[[Snippet], bool], pool: Iterable[Snippet] | None = None
    ) -> list[Snippet]:
        source = self._snippets() if pool is None else pool
        return [s for s in source if s.id != focus.id and predicate(s)]

    @staticmethod
    def _ordered(snippets: list[Snippet], descending: bool, limit: int) -> list[Snippet]:
        snippets.sort(key=lambda s: (s.timestamp, s.id), reverse=descending)
        return snippets[:limit]

    @staticmethod
    def _in_direction(focus: Snippet, direction: Direction) -> Callable[[Snippet], bool]:
        if direction is Direction.BEFORE:
            return lambda s: s.timestamp < focus.timestamp
        return lambda s: s.timestamp > focus.timestamp

    def _neighbours(self, focus: Snippet) -> list[Snippet]:
        if self._closed:
            raise StoreUnavailable("Snippet store is closed")
        if not self.graph.has_node(focus.id):
            return []
        return [self.graph.nodes[n]["snippet"] for n in self.graph.neighbors(focus.id)]

    # ------------------------------------------------------------------
    # GraphStore
    # ------------------------------------------------------------------

    async def get_snippet(self, snippet_id: int) -> Snippet | None:
        if self._closed:
            raise StoreUnavailable("Snippet store is closed")
        if not self.graph.has_node(snippet_id):
            return None
        return self.graph.nodes[snippet_id]["snippet"]

    async def query_connected(self, focus, direction, limit):
        matches = self._candidates(focus, self._in_direction(focus, direction), self._neighbours(focus))
        return self._ordered(matches, direction.descending, limit)

    async def count_connected(self, focus, direction):
        return len(self._candidates(focus, self._in_direction(focus, direction), self._neighbours(focus)))

    async def query_by_timestamp(self, focus, direction, limit):
        matches = self._candidates(focus, self._in_direction(focus, direction))
        return self._ordered(matches, direction.descending, limit)

    async def count_by_timestamp(self, focus, direction):
        return len(self._candidates(focus, self._in_direction(focus, direction)))

    async def query_by_type_and_timestamp(self, focus, snippet_type, direction, limit):
        in_direction = self._in_direction(focus, direction)
        matches = self._candidates(focus, lambda s: s.type == snippet_type and in_direction(s))
        return self._ordered(matches, direction.descending, limit)

    async def count_by_type_and_timestamp(self, focus, snippet_type, direction):
        in_direction = self._in_direction(focus, direction)
        return len(self._candidates(focus, lambda s: s.type == snippet_type and in_direction(s)))

    async def query_by_cluster_label(self, focus, label, limit):
        matches = self._candidates(focus, lambda s: bool(label) and s.cluster_label == label)
        return self._ordered(matches, True, limit)

    async def count_by_cluster_label(self, focus, label):
        return len(self._candidates(focus, lambda s: bool(label) and s.cluster_label == label))

    async def query_by_type(self, focus, snippet_type, limit):
        matches = self._candidates(focus, lambda s: s.type == snippet_type)
        return self._ordered(matches, True, limit)

    async def count_by_type(self, focus, snippet_type):
        return len(self._candidates(focus, lambda s: s.type == snippet_type))

    async def count_by_cluster_or_type(self, focus, label, snippet_type):
        return len(self._candidates(
            focus,
            lambda s: (bool(label) and s.cluster_label == label) or s.type == snippet_type,
        ))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(self, snippet: Snippet) -> Snippet:
        """Insert a fully formed snippet."""
        if self.graph.has_node(snippet.id):
            raise GraphError(f"Snippet {snippet.id} already exists")
        self.graph.add_node(snippet.id, snippet=snippet)
        return snippet

    def add_snippet(
        self,
        content: str,
        snippet_type: str = NOTE_TYPE,
        timestamp: int | None = None,
        cluster_label: str | None = None,
        snippet_id: int | None = None,
    ) -> Snippet:
        """Capture a snippet, assigning the next id and timestamp when omitted."""
        existing = list(self.graph.nodes(data="snippet"))
        if snippet_id is None:
            snippet_id = max((n for n, _ in existing), default=0) + 1
        if timestamp is None:
            latest = max((s.timestamp for _, s in existing), default=0)
            timestamp = max(int(time.time() * 1000), latest + 1)
        return self.put(Snippet(
            id=snippet_id,
            timestamp=timestamp,
            content=content,
            type=snippet_type,
            cluster_label=cluster_label,
        ))

    def add_edge(self, source_id: int, target_id: int) -> Edge:
        """Link two existing snippets."""
        if source_id == target_id:
            raise GraphError(f"Cannot link snippet {source_id} to itself")
        for snippet_id in (source_id, target_id):
            if not self.graph.has_node(snippet_id):
                raise GraphError(f"Cannot link {source_id} and {target_id}: unknown snippet {snippet_id}")
        self.graph.add_edge(source_id, target_id)
        return Edge(source_id=source_id, target_id=target_id)

    def stats(self) -> dict:
        types: dict[str, int] = {}
        for _, snippet in self.graph.nodes(data="snippet"):
            types[snippet.type] = types.get(snippet.type, 0) + 1
        return {
            "snippets": self.graph.number_of_nodes(),
            "edges": self.graph.number_of_edges(),
            "types": types,
        }

    def close(self) -> None:
        self._closed = True
