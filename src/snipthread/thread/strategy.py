"""Two-tier lookup shared by every relation axis.

Each axis runs an explicit-structure query first (edges, cluster label)
and falls back to an implicit-structure query (time order, type) only when
the first one comes back empty. A separate count decides whether more
candidates exist beyond the budget.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from snipthread.graph.models import Snippet

Lookup = Callable[[int], Awaitable[list[Snippet]]]
Count = Callable[[], Awaitable[int]]


@dataclass(frozen=True)
class TwoTierStrategy:
    """Primary/fallback/count queries for one axis.

    ``primary`` may be None when the focus lacks the structure it needs
    (e.g. no cluster label); the fallback then runs directly.
    """

    primary: Lookup | None
    fallback: Lookup
    count: Count


@dataclass(frozen=True)
class TierResult:
    nodes: list[Snippet]
    used_fallback: bool
    total: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.total > self.limit


def _clean(focus: Snippet, nodes: list[Snippet], limit: int) -> list[Snippet]:
    """Drop the focus and repeated ids, then cap at the budget."""
    seen: set[int] = {focus.id}
    kept: list[Snippet] = []
    for node in nodes:
        if node.id in seen:
            continue
        seen.add(node.id)
        kept.append(node)
    return kept[:limit]


async def run_two_tier(focus: Snippet, strategy: TwoTierStrategy, limit: int) -> TierResult:
    """Run primary, then fallback if needed, then the truncation count."""
    nodes: list[Snippet] = []
    used_fallback = True
    if strategy.primary is not None:
        nodes = _clean(focus, await strategy.primary(limit), limit)
        used_fallback = not nodes
    if not nodes:
        nodes = _clean(focus, await strategy.fallback(limit), limit)
    total = await strategy.count()
    return TierResult(nodes=nodes, used_fallback=used_fallback, total=total, limit=limit)
