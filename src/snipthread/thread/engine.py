"""Thread context assembly.

Given a focus snippet, the three relation axes (upstream, downstream,
lateral) are resolved as independent asyncio tasks against the same
read-only store and joined into one immutable ``ThreadContext``.

Failure policy:
  fail_fast=True   the first failing axis cancels the others and the whole
                   build raises ``ResolverFailure``.
  fail_fast=False  each axis succeeds or fails on its own; failed groups
                   come back empty with an ``error`` marker. An unavailable
                   store is still fatal, as are non-SnipThread errors.

A timeout bounds the whole fan-out. Axes still running at the deadline are
cancelled; cancelling the caller's task cancels them as well.
"""

from __future__ import annotations

import asyncio
import logging
import time

from snipthread.config import MotionBudget, ProjectConfig
from snipthread.exceptions import (
    BuildTimeout,
    FocusNotFound,
    ResolverFailure,
    SnipThreadError,
    StoreUnavailable,
)
from snipthread.graph.models import Snippet
from snipthread.graph.store import GraphStore
from snipthread.thread.models import (
    DownstreamGroup,
    LateralGroup,
    ThreadContext,
    ThreadMeta,
    UpstreamGroup,
)
from snipthread.thread.resolvers import (
    DownstreamResolver,
    LateralResolver,
    RelationResolver,
    UpstreamResolver,
)

logger = logging.getLogger("snipthread.thread")

_EMPTY_GROUPS = {
    "upstream": UpstreamGroup,
    "downstream": DownstreamGroup,
    "lateral": LateralGroup,
}


class ThreadAssembler:
    """Builds hub-and-spoke thread contexts from a graph store.

    Usage:
        assembler = ThreadAssembler(store, MotionBudget(max_lateral_nodes=4))
        context = await assembler.build(focus)
    """

    def __init__(
        self,
        store: GraphStore,
        budget: MotionBudget | None = None,
        fail_fast: bool = True,
        timeout: float | None = None,
    ) -> None:
        self.store = store
        self.budget = budget or MotionBudget()
        self.fail_fast = fail_fast
        self.timeout = timeout
        self.resolvers: dict[str, RelationResolver] = {
            "upstream": UpstreamResolver(store, self.budget.max_upstream_nodes),
            "downstream": DownstreamResolver(store, self.budget.max_downstream_nodes),
            "lateral": LateralResolver(store, self.budget.max_lateral_nodes),
        }

    @classmethod
    def from_config(cls, store: GraphStore, config: ProjectConfig) -> ThreadAssembler:
        return cls(
            store,
            budget=config.budget,
            fail_fast=config.builder.fail_fast,
            timeout=config.builder.timeout_seconds,
        )

    async def build(self, focus: Snippet, timeout: float | None = None) -> ThreadContext:
        """Resolve all three axes concurrently and merge them around the focus."""
        timeout = timeout if timeout is not None else self.timeout
        start = time.time()
        tasks = {
            axis: asyncio.create_task(resolver.resolve(focus), name=f"thread-{axis}")
            for axis, resolver in self.resolvers.items()
        }
        return_when = asyncio.FIRST_EXCEPTION if self.fail_fast else asyncio.ALL_COMPLETED
        try:
            _, pending = await asyncio.wait(tasks.values(), timeout=timeout, return_when=return_when)
        finally:
            unfinished = [t for t in tasks.values() if not t.done()]
            for task in unfinished:
                task.cancel()
            if unfinished:
                await asyncio.gather(*unfinished, return_exceptions=True)

        pending_axes = [axis for axis, task in tasks.items() if task in pending]
        errors: dict[str, BaseException] = {}
        results: dict[str, tuple] = {}
        for axis, task in tasks.items():
            if task in pending:
                continue
            if task.cancelled():
                errors[axis] = asyncio.CancelledError(f"{axis} was cancelled")
            elif task.exception() is not None:
                errors[axis] = task.exception()
            else:
                results[axis] = task.result()

        if self.fail_fast:
            if errors:
                raise ResolverFailure(errors) from next(iter(errors.values()))
            if pending_axes:
                raise BuildTimeout(pending_axes, timeout)
        else:
            fatal = [
                e for e in errors.values()
                if isinstance(e, StoreUnavailable) or not isinstance(e, SnipThreadError)
            ]
            if fatal:
                raise ResolverFailure(errors) from fatal[0]
            for axis in pending_axes:
                errors[axis] = TimeoutError(f"{axis} did not finish in {timeout}s")
            for axis, error in errors.items():
                logger.warning("Thread %s for snippet %s failed: %s", axis, focus.id, error)

        groups: dict = {}
        more: dict[str, bool] = {}
        for axis in self.resolvers:
            if axis in results:
                groups[axis], more[axis] = results[axis]
            else:
                groups[axis] = _EMPTY_GROUPS[axis](error=str(errors[axis]) or type(errors[axis]).__name__)
                more[axis] = False

        context = ThreadContext(
            focus=focus,
            upstream=groups["upstream"],
            downstream=groups["downstream"],
            lateral=groups["lateral"],
            meta=ThreadMeta(
                loaded_at=int(time.time() * 1000),
                has_more_upstream=more["upstream"],
                has_more_downstream=more["downstream"],
                has_more_lateral=more["lateral"],
            ),
        )
        logger.debug(
            "Built thread for snippet %s in %.1fms", focus.id, (time.time() - start) * 1000
        )
        return context

    async def build_by_id(self, snippet_id: int, timeout: float | None = None) -> ThreadContext:
        """Load the focus snippet, then build. Raises FocusNotFound for unknown ids."""
        focus = await self.store.get_snippet(snippet_id)
        if focus is None:
            raise FocusNotFound(snippet_id)
        return await self.build(focus, timeout=timeout)

    def build_sync(self, focus: Snippet | int, timeout: float | None = None) -> ThreadContext:
        """Blocking wrapper for callers without an event loop."""
        if isinstance(focus, Snippet):
            return asyncio.run(self.build(focus, timeout=timeout))
        return asyncio.run(self.build_by_id(focus, timeout=timeout))
