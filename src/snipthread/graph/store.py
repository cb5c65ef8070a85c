"""Read-only query contract over the snippet graph.

Every query excludes the focus snippet itself. Temporal queries look
strictly before or after the focus timestamp; classification queries
(cluster label, type) ignore time and return newest first. Ties on
timestamp are broken by id in the same direction as the timestamp order.

``count_*`` variants apply the same predicate with no limit and exist only
to compute truncation flags. Implementations must tolerate concurrent
calls against the same instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from snipthread.graph.models import Direction, Snippet


class GraphStore(ABC):
    """Abstract async read surface over snippets and edges."""

    @abstractmethod
    async def get_snippet(self, snippet_id: int) -> Snippet | None:
        """Fetch one snippet by id."""
        ...

    # -- edge-joined --------------------------------------------------------

    @abstractmethod
    async def query_connected(
        self, focus: Snippet, direction: Direction, limit: int
    ) -> list[Snippet]:
        """Distinct snippets sharing an edge with the focus, on one side of it in time."""
        ...

    @abstractmethod
    async def count_connected(self, focus: Snippet, direction: Direction) -> int:
        ...

    # -- purely temporal ----------------------------------------------------

    @abstractmethod
    async def query_by_timestamp(
        self, focus: Snippet, direction: Direction, limit: int
    ) -> list[Snippet]:
        """Snippets on one side of the focus in time, no edge required."""
        ...

    @abstractmethod
    async def count_by_timestamp(self, focus: Snippet, direction: Direction) -> int:
        ...

    @abstractmethod
    async def query_by_type_and_timestamp(
        self, focus: Snippet, snippet_type: str, direction: Direction, limit: int
    ) -> list[Snippet]:
        """Temporal query narrowed to one snippet type."""
        ...

    @abstractmethod
    async def count_by_type_and_timestamp(
        self, focus: Snippet, snippet_type: str, direction: Direction
    ) -> int:
        ...

    # -- classification -----------------------------------------------------

    @abstractmethod
    async def query_by_cluster_label(
        self, focus: Snippet, label: str, limit: int
    ) -> list[Snippet]:
        ...

    @abstractmethod
    async def count_by_cluster_label(self, focus: Snippet, label: str) -> int:
        ...

    @abstractmethod
    async def query_by_type(
        self, focus: Snippet, snippet_type: str, limit: int
    ) -> list[Snippet]:
        ...

    @abstractmethod
    async def count_by_type(self, focus: Snippet, snippet_type: str) -> int:
        ...

    @abstractmethod
    async def count_by_cluster_or_type(
        self, focus: Snippet, label: str | None, snippet_type: str
    ) -> int:
        """Count snippets matching the cluster label OR the type.

        An empty or missing label matches nothing on the label side.
        """
        ...

    def close(self) -> None:
        """Release backend resources. No-op by default."""
