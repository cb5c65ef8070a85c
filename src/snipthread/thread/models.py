"""Data models for the hub-and-spoke thread view."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from snipthread.graph.models import Snippet


class UpstreamRelation(str, Enum):
    """How the upstream nodes relate to the focus."""

    CAUSAL = "CAUSAL"  # Edge-connected and older
    TEMPORAL = "TEMPORAL"  # Merely older


class DownstreamRelation(str, Enum):
    """How the downstream nodes relate to the focus."""

    IMPLICATION = "IMPLICATION"  # Edge-connected and newer
    NEXT_STEP = "NEXT_STEP"  # Newer goals


class ThreadPosition(str, Enum):
    UPSTREAM = "upstream"
    FOCUS = "focus"
    DOWNSTREAM = "downstream"
    LATERAL = "lateral"


_FROZEN = ConfigDict(frozen=True)


class UpstreamGroup(BaseModel):
    model_config = _FROZEN

    nodes: tuple[Snippet, ...] = ()
    relation: UpstreamRelation = UpstreamRelation.TEMPORAL
    error: str = ""  # Set only by partial builds when this axis failed


class DownstreamGroup(BaseModel):
    model_config = _FROZEN

    nodes: tuple[Snippet, ...] = ()
    relation: DownstreamRelation = DownstreamRelation.NEXT_STEP
    error: str = ""


class LateralGroup(BaseModel):
    model_config = _FROZEN

    nodes: tuple[Snippet, ...] = ()
    similarity: float = 0.0  # 0.7 same cluster, 0.4 same type, 0 nothing found
    error: str = ""


class ThreadMeta(BaseModel):
    model_config = _FROZEN

    loaded_at: int  # epoch ms
    has_more_upstream: bool = False
    has_more_downstream: bool = False
    has_more_lateral: bool = False


class ThreadNode(BaseModel):
    """A snippet placed in the thread view."""

    model_config = _FROZEN

    snippet: Snippet
    thread_position: ThreadPosition
    connection_strength: float = Field(ge=0.0, le=1.0)


# Edge-backed relations are certain; heuristic fallbacks are a guess
_RELATION_STRENGTH: dict[str, float] = {
    UpstreamRelation.CAUSAL.value: 1.0,
    UpstreamRelation.TEMPORAL.value: 0.5,
    DownstreamRelation.IMPLICATION.value: 1.0,
    DownstreamRelation.NEXT_STEP.value: 0.5,
}


class ThreadContext(BaseModel):
    """A focus snippet with its upstream, downstream and lateral spokes.

    Built fresh on every call and never mutated afterwards.
    """

    model_config = _FROZEN

    focus: Snippet
    upstream: UpstreamGroup = Field(default_factory=UpstreamGroup)
    downstream: DownstreamGroup = Field(default_factory=DownstreamGroup)
    lateral: LateralGroup = Field(default_factory=LateralGroup)
    meta: ThreadMeta

    @property
    def errors(self) -> dict[str, str]:
        """Per-axis error markers left by a partial build."""
        groups = {"upstream": self.upstream, "downstream": self.downstream, "lateral": self.lateral}
        return {axis: group.error for axis, group in groups.items() if group.error}

    @property
    def is_partial(self) -> bool:
        return bool(self.errors)

    def thread_nodes(self) -> list[ThreadNode]:
        """Flatten into positioned nodes: focus, upstream, downstream, lateral."""
        nodes = [ThreadNode(
            snippet=self.focus, thread_position=ThreadPosition.FOCUS, connection_strength=1.0,
        )]
        nodes.extend(
            ThreadNode(
                snippet=s,
                thread_position=ThreadPosition.UPSTREAM,
                connection_strength=_RELATION_STRENGTH[self.upstream.relation.value],
            )
            for s in self.upstream.nodes
        )
        nodes.extend(
            ThreadNode(
                snippet=s,
                thread_position=ThreadPosition.DOWNSTREAM,
                connection_strength=_RELATION_STRENGTH[self.downstream.relation.value],
            )
            for s in self.downstream.nodes
        )
        nodes.extend(
            ThreadNode(
                snippet=s,
                thread_position=ThreadPosition.LATERAL,
                connection_strength=self.lateral.similarity,
            )
            for s in self.lateral.nodes
        )
        return nodes

    def summary(self) -> str:
        """Human-readable summary of the thread."""
        def more(flag: bool) -> str:
            return " (+more)" if flag else ""

        lines = [
            f"Thread for snippet {self.focus.id}: {self.focus.content[:60]}",
            f"Upstream [{self.upstream.relation.value}]: "
            f"{len(self.upstream.nodes)}{more(self.meta.has_more_upstream)}",
            f"Downstream [{self.downstream.relation.value}]: "
            f"{len(self.downstream.nodes)}{more(self.meta.has_more_downstream)}",
            f"Lateral [similarity={self.lateral.similarity:.1f}]: "
            f"{len(self.lateral.nodes)}{more(self.meta.has_more_lateral)}",
        ]
        for axis, error in self.errors.items():
            lines.append(f"  {axis} failed: {error}")
        return "\n".join(lines)
