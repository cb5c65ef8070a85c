"""Persistent snippet graph backed by SQLite.

Reads run on worker threads through ``asyncio.to_thread``. Every read
opens its own short-lived connection and closes it before returning (WAL
mode allows concurrent readers), so the three relation axes can query the
same store in parallel and no connection outlives the thread that used it.
Writes go through one long-lived connection.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
import time
from contextlib import closing
from pathlib import Path

from snipthread.exceptions import GraphError, QueryFailed, StoreUnavailable
from snipthread.graph.models import NOTE_TYPE, Direction, Edge, Snippet
from snipthread.graph.store import GraphStore

logger = logging.getLogger("snipthread.store")

_COLUMNS = "id, timestamp, content, type, cluster_label"

# Neighbours of the focus regardless of which edge column holds it
_CONNECTED = (
    "id IN (SELECT target_id FROM edges WHERE source_id = ?"
    " UNION SELECT source_id FROM edges WHERE target_id = ?)"
)

# An empty label matches nothing, even snippets stored with cluster_label = ''
_LABEL = "(? != '' AND cluster_label = ?)"


class SQLiteGraphStore(GraphStore):
    """Snippet graph stored in a single SQLite file."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None
        self._schema_ready = False
        self._closed = False

    def _connect(self) -> sqlite3.Connection:
        """Open a new connection, creating the schema on first use."""
        if self._closed:
            raise StoreUnavailable(f"Snippet store at {self.db_path} is closed")
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            with self._lock:
                if not self._schema_ready:
                    conn.execute("PRAGMA journal_mode=WAL")
                    self._create_tables(conn)
                    self._schema_ready = True
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailable(f"Cannot open snippet store at {self.db_path}: {e}") from e
        return conn

    def _get_conn(self) -> sqlite3.Connection:
        """The shared write connection."""
        if self._closed:
            raise StoreUnavailable(f"Snippet store at {self.db_path} is closed")
        if self._conn is None:
            self._conn = self._connect()
            logger.debug("Opened write connection to %s", self.db_path)
        return self._conn

    @staticmethod
    def _create_tables(conn: sqlite3.Connection) -> None:
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS snippets (
                id INTEGER PRIMARY KEY,
                timestamp INTEGER NOT NULL,
                content TEXT NOT NULL DEFAULT '',
                type TEXT NOT NULL,
                cluster_label TEXT              -- NULL = not classified yet
            );

            -- Unordered link; either column may hold the older snippet
            CREATE TABLE IF NOT EXISTS edges (
                source_id INTEGER NOT NULL REFERENCES snippets(id),
                target_id INTEGER NOT NULL REFERENCES snippets(id),
                PRIMARY KEY (source_id, target_id)
            );

            CREATE INDEX IF NOT EXISTS idx_snippets_timestamp ON snippets(timestamp);
            CREATE INDEX IF NOT EXISTS idx_snippets_type ON snippets(type);
            CREATE INDEX IF NOT EXISTS idx_snippets_cluster ON snippets(cluster_label);
            CREATE INDEX IF NOT EXISTS idx_edges_source ON edges(source_id);
            CREATE INDEX IF NOT EXISTS idx_edges_target ON edges(target_id);
        """)
        conn.commit()

    @staticmethod
    def _row_to_snippet(row: sqlite3.Row) -> Snippet:
        return Snippet(
            id=row["id"],
            timestamp=row["timestamp"],
            content=row["content"] or "",
            type=row["type"],
            cluster_label=row["cluster_label"],
        )

    # ------------------------------------------------------------------
    # Query plumbing
    # ------------------------------------------------------------------

    def _fetch(self, sql: str, params: list) -> list[sqlite3.Row]:
        with closing(self._connect()) as conn:
            try:
                return conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise QueryFailed(f"Snippet query failed: {e}") from e

    async def _select(
        self, focus: Snippet, where: str, params: list, descending: bool, limit: int
    ) -> list[Snippet]:
        order = "DESC" if descending else "ASC"
        sql = (
            f"SELECT {_COLUMNS} FROM snippets WHERE id != ? AND {where} "  # noqa: S608
            f"ORDER BY timestamp {order}, id {order} LIMIT ?"
        )
        rows = await asyncio.to_thread(self._fetch, sql, [focus.id, *params, limit])
        return [self._row_to_snippet(r) for r in rows]

    async def _count(self, focus: Snippet, where: str, params: list) -> int:
        sql = f"SELECT COUNT(*) AS cnt FROM snippets WHERE id != ? AND {where}"  # noqa: S608
        rows = await asyncio.to_thread(self._fetch, sql, [focus.id, *params])
        return rows[0]["cnt"] if rows else 0

    @staticmethod
    def _time_clause(focus: Snippet, direction: Direction) -> tuple[str, list]:
        op = "<" if direction is Direction.BEFORE else ">"
        return f"timestamp {op} ?", [focus.timestamp]

    # ------------------------------------------------------------------
    # GraphStore
    # ------------------------------------------------------------------

    async def get_snippet(self, snippet_id: int) -> Snippet | None:
        rows = await asyncio.to_thread(
            self._fetch, f"SELECT {_COLUMNS} FROM snippets WHERE id = ?", [snippet_id]
        )
        return self._row_to_snippet(rows[0]) if rows else None

    async def query_connected(self, focus, direction, limit):
        clause, params = self._time_clause(focus, direction)
        return await self._select(
            focus, f"{_CONNECTED} AND {clause}", [focus.id, focus.id, *params],
            direction.descending, limit,
        )

    async def count_connected(self, focus, direction):
        clause, params = self._time_clause(focus, direction)
        return await self._count(focus, f"{_CONNECTED} AND {clause}", [focus.id, focus.id, *params])

    async def query_by_timestamp(self, focus, direction, limit):
        clause, params = self._time_clause(focus, direction)
        return await self._select(focus, clause, params, direction.descending, limit)

    async def count_by_timestamp(self, focus, direction):
        clause, params = self._time_clause(focus, direction)
        return await self._count(focus, clause, params)

    async def query_by_type_and_timestamp(self, focus, snippet_type, direction, limit):
        clause, params = self._time_clause(focus, direction)
        return await self._select(
            focus, f"type = ? AND {clause}", [snippet_type, *params], direction.descending, limit
        )

    async def count_by_type_and_timestamp(self, focus, snippet_type, direction):
        clause, params = self._time_clause(focus, direction)
        return await self._count(focus, f"type = ? AND {clause}", [snippet_type, *params])

    async def query_by_cluster_label(self, focus, label, limit):
        return await self._select(focus, _LABEL, [label or "", label or ""], True, limit)

    async def count_by_cluster_label(self, focus, label):
        return await self._count(focus, _LABEL, [label or "", label or ""])

    async def query_by_type(self, focus, snippet_type, limit):
        return await self._select(focus, "type = ?", [snippet_type], True, limit)

    async def count_by_type(self, focus, snippet_type):
        return await self._count(focus, "type = ?", [snippet_type])

    async def count_by_cluster_or_type(self, focus, label, snippet_type):
        label = label or ""
        return await self._count(focus, f"({_LABEL} OR type = ?)", [label, label, snippet_type])

    # ------------------------------------------------------------------
    # Writes (collaborator API, not used by the thread builder)
    # ------------------------------------------------------------------

    def add_snippet(
        self,
        content: str,
        snippet_type: str = NOTE_TYPE,
        timestamp: int | None = None,
        cluster_label: str | None = None,
        snippet_id: int | None = None,
    ) -> Snippet:
        """Capture a snippet. Without a timestamp, the next monotonic one is used."""
        conn = self._get_conn()
        try:
            if timestamp is None:
                row = conn.execute("SELECT MAX(timestamp) AS ts FROM snippets").fetchone()
                latest = row["ts"] if row and row["ts"] is not None else 0
                timestamp = max(int(time.time() * 1000), latest + 1)
            cur = conn.execute(
                "INSERT INTO snippets (id, timestamp, content, type, cluster_label)"
                " VALUES (?, ?, ?, ?, ?)",
                (snippet_id, timestamp, content, snippet_type, cluster_label),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            raise GraphError(f"Cannot add snippet {snippet_id}: {e}") from e
        except sqlite3.Error as e:
            raise QueryFailed(f"Snippet insert failed: {e}") from e
        return Snippet(
            id=cur.lastrowid,
            timestamp=timestamp,
            content=content,
            type=snippet_type,
            cluster_label=cluster_label,
        )

    def add_edge(self, source_id: int, target_id: int) -> Edge:
        """Link two existing snippets."""
        if source_id == target_id:
            raise GraphError(f"Cannot link snippet {source_id} to itself")
        conn = self._get_conn()
        try:
            found = conn.execute(
                "SELECT COUNT(*) AS cnt FROM snippets WHERE id IN (?, ?)",
                (source_id, target_id),
            ).fetchone()["cnt"]
            if found < 2:
                raise GraphError(f"Cannot link {source_id} and {target_id}: unknown snippet")
            conn.execute(
                "INSERT OR IGNORE INTO edges (source_id, target_id) VALUES (?, ?)",
                (source_id, target_id),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise QueryFailed(f"Edge insert failed: {e}") from e
        return Edge(source_id=source_id, target_id=target_id)

    def stats(self) -> dict:
        """Snippet and edge counts, plus a per-type breakdown."""
        conn = self._get_conn()
        snippets = conn.execute("SELECT COUNT(*) AS cnt FROM snippets").fetchone()["cnt"]
        edges = conn.execute("SELECT COUNT(*) AS cnt FROM edges").fetchone()["cnt"]
        types = {
            row["type"]: row["cnt"]
            for row in conn.execute(
                "SELECT type, COUNT(*) AS cnt FROM snippets GROUP BY type"
            ).fetchall()
        }
        return {"snippets": snippets, "edges": edges, "types": types}

    def close(self) -> None:
        """Close the write connection. Later calls raise StoreUnavailable."""
        with self._lock:
            self._closed = True
            if self._conn is not None:
                self._conn.close()
                self._conn = None
