#!/usr/bin/env python3
"""Demo: Using SnipThread as a Python library.

This shows how to build thread contexts programmatically, not just from the CLI.
"""

import asyncio

from snipthread.config import MotionBudget
from snipthread.graph.memory_store import MemoryGraphStore
from snipthread.thread.engine import ThreadAssembler


async def main():
    # 1. Capture a few thoughts
    store = MemoryGraphStore()
    store.add_snippet("Mornings are when I think best", timestamp=1000, cluster_label="focus")
    store.add_snippet("Meetings keep landing at 9am", timestamp=2000)
    store.add_snippet("Block 8-10 on the calendar", timestamp=3000, cluster_label="focus")
    store.add_snippet("Ship the writing habit", timestamp=4000, snippet_type="goal")
    store.add_snippet("Phone stays in the other room", timestamp=5000, cluster_label="focus")

    # Only one explicit link; everything else is inferred
    store.add_edge(2, 3)

    stats = store.stats()
    print(f"Snippets: {stats['snippets']}  Edges: {stats['edges']}")

    # 2. Build the hub-and-spoke view around snippet 3
    assembler = ThreadAssembler(store, MotionBudget(max_upstream_nodes=2))
    context = await assembler.build_by_id(3)

    print("\n--- Summary ---")
    print(context.summary())

    # 3. Walk the positioned nodes, as a renderer would
    print("\n--- Nodes ---")
    for node in context.thread_nodes():
        print(
            f"  {node.thread_position.value:<10} #{node.snippet.id} "
            f"strength={node.connection_strength:.1f}  {node.snippet.content}"
        )


if __name__ == "__main__":
    asyncio.run(main())
