"""Data models for the snippet graph."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

NOTE_TYPE = "note"
GOAL_TYPE = "goal"  # Distinguished type picked up by the downstream fallback


class Direction(str, Enum):
    """Which side of the focus timestamp a temporal query looks at."""

    BEFORE = "before"  # timestamp < focus, newest first
    AFTER = "after"  # timestamp > focus, oldest first

    @property
    def descending(self) -> bool:
        return self is Direction.BEFORE


class Snippet(BaseModel):
    """An immutable captured thought."""

    model_config = ConfigDict(frozen=True)

    id: int
    timestamp: int  # epoch ms, the only ordering key
    content: str = ""
    type: str = NOTE_TYPE
    cluster_label: str | None = None  # Opaque tag from an external classifier


class Edge(BaseModel):
    """An unordered structural link between two snippets.

    Direction is never read from source/target; it follows from the
    endpoint timestamps.
    """

    model_config = ConfigDict(frozen=True)

    source_id: int
    target_id: int

    def other(self, snippet_id: int) -> int | None:
        """Return the endpoint opposite `snippet_id`, or None if not attached."""
        if self.source_id == snippet_id:
            return self.target_id
        if self.target_id == snippet_id:
            return self.source_id
        return None
