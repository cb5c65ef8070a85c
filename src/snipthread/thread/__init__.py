"""Hub-and-spoke thread context builder.

Usage:
    from snipthread.thread import ThreadAssembler

    assembler = ThreadAssembler(store, budget)
    context = await assembler.build(focus)
    print(context.summary())
"""

from snipthread.thread.engine import ThreadAssembler
from snipthread.thread.models import (
    DownstreamRelation,
    ThreadContext,
    ThreadNode,
    ThreadPosition,
    UpstreamRelation,
)

__all__ = [
    "DownstreamRelation",
    "ThreadAssembler",
    "ThreadContext",
    "ThreadNode",
    "ThreadPosition",
    "UpstreamRelation",
]
