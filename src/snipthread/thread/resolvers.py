"""Relation resolvers: one per spoke of the thread view."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel

from snipthread.graph.models import GOAL_TYPE, Direction, Snippet
from snipthread.graph.store import GraphStore
from snipthread.thread.models import (
    DownstreamGroup,
    DownstreamRelation,
    LateralGroup,
    UpstreamGroup,
    UpstreamRelation,
)
from snipthread.thread.strategy import TierResult, TwoTierStrategy, run_two_tier

logger = logging.getLogger("snipthread.thread")

# Fixed heuristic scores: sharing a cluster says more than sharing a type
CLUSTER_SIMILARITY = 0.7
TYPE_SIMILARITY = 0.4


class RelationResolver(ABC):
    """Resolves one axis of a thread context under a node budget."""

    axis: str = ""

    def __init__(self, store: GraphStore, limit: int) -> None:
        # With no room for nodes the primary lookup always comes back empty
        if limit < 1:
            raise ValueError(f"{self.axis or 'relation'} budget must be at least 1, got {limit}")
        self.store = store
        self.limit = limit

    @abstractmethod
    def strategy(self, focus: Snippet) -> TwoTierStrategy:
        """Bind this axis's queries to a focus snippet."""
        ...

    @abstractmethod
    def to_group(self, result: TierResult) -> BaseModel:
        ...

    async def resolve(self, focus: Snippet) -> tuple[BaseModel, bool]:
        """Return the axis group and its has-more flag."""
        result = await run_two_tier(focus, self.strategy(focus), self.limit)
        logger.debug(
            "%s for snippet %s: %d node(s) via %s, %d candidate(s)",
            self.axis, focus.id, len(result.nodes),
            "fallback" if result.used_fallback else "primary", result.total,
        )
        return self.to_group(result), result.has_more


class UpstreamResolver(RelationResolver):
    """Older snippets: edge-connected first, otherwise the most recent ones."""

    axis = "upstream"

    def strategy(self, focus: Snippet) -> TwoTierStrategy:
        return TwoTierStrategy(
            primary=lambda n: self.store.query_connected(focus, Direction.BEFORE, n),
            fallback=lambda n: self.store.query_by_timestamp(focus, Direction.BEFORE, n),
            count=lambda: self.store.count_by_timestamp(focus, Direction.BEFORE),
        )

    def to_group(self, result: TierResult) -> UpstreamGroup:
        relation = UpstreamRelation.TEMPORAL if result.used_fallback else UpstreamRelation.CAUSAL
        return UpstreamGroup(nodes=result.nodes, relation=relation)


class DownstreamResolver(RelationResolver):
    """Newer snippets: edge-connected first, otherwise later goals.

    The has-more count covers every newer snippet, whatever its type.
    """

    axis = "downstream"

    def strategy(self, focus: Snippet) -> TwoTierStrategy:
        return TwoTierStrategy(
            primary=lambda n: self.store.query_connected(focus, Direction.AFTER, n),
            fallback=lambda n: self.store.query_by_type_and_timestamp(
                focus, GOAL_TYPE, Direction.AFTER, n
            ),
            count=lambda: self.store.count_by_timestamp(focus, Direction.AFTER),
        )

    def to_group(self, result: TierResult) -> DownstreamGroup:
        relation = (
            DownstreamRelation.NEXT_STEP if result.used_fallback else DownstreamRelation.IMPLICATION
        )
        return DownstreamGroup(nodes=result.nodes, relation=relation)


class LateralResolver(RelationResolver):
    """Snippets in the same cluster, otherwise snippets of the same type.

    The has-more count uses the union of both predicates, so it can flag
    truncation even when the strategy that fired has nothing left to show.
    """

    axis = "lateral"

    def strategy(self, focus: Snippet) -> TwoTierStrategy:
        label = focus.cluster_label
        primary = None
        if label:
            primary = lambda n: self.store.query_by_cluster_label(focus, label, n)  # noqa: E731
        return TwoTierStrategy(
            primary=primary,
            fallback=lambda n: self.store.query_by_type(focus, focus.type, n),
            count=lambda: self.store.count_by_cluster_or_type(focus, label, focus.type),
        )

    def to_group(self, result: TierResult) -> LateralGroup:
        if not result.nodes:
            similarity = 0.0
        elif result.used_fallback:
            similarity = TYPE_SIMILARITY
        else:
            similarity = CLUSTER_SIMILARITY
        return LateralGroup(nodes=result.nodes, similarity=similarity)
