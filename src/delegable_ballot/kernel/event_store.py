"""
SQLite event store for the ballot log

One append-only table. A command's events go in with a single transaction
opened by BEGIN IMMEDIATE, which takes the write lock before the stream
version is read: if another writer moved the stream past the version the
caller saw, StreamVersionConflict is raised and nothing is written. WAL mode
lets other instances replay while one of them appends.
"""

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from delegable_ballot.kernel.errors import EventStoreError, StreamVersionConflict
from delegable_ballot.kernel.logging import get_logger
from delegable_ballot.kernel.messages import Event
from delegable_ballot.kernel.metrics import (
    events_appended_total,
    stream_version_conflicts_total,
)
from delegable_ballot.kernel.retry import retry_on_lock

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    stream_id   TEXT    NOT NULL,
    version     INTEGER NOT NULL,
    event_id    TEXT    NOT NULL UNIQUE,
    event_type  TEXT    NOT NULL,
    command_id  TEXT    NOT NULL,
    actor_id    TEXT,
    occurred_at TEXT    NOT NULL,
    payload     TEXT    NOT NULL,
    PRIMARY KEY (stream_id, version)
)
"""

COLUMNS = (
    "stream_id",
    "version",
    "event_id",
    "event_type",
    "command_id",
    "actor_id",
    "occurred_at",
    "payload",
)

INSERT = f"INSERT INTO events ({', '.join(COLUMNS)}) VALUES ({', '.join('?' * len(COLUMNS))})"


class SQLiteEventStore:
    """Append-only, version-checked event streams in one SQLite file"""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(SCHEMA)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        # Autocommit mode: transactions are opened explicitly
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        try:
            yield conn
        finally:
            conn.close()

    @staticmethod
    def _version(conn: sqlite3.Connection, stream_id: str) -> int:
        (version,) = conn.execute(
            "SELECT COALESCE(MAX(version), 0) FROM events WHERE stream_id = ?",
            (stream_id,),
        ).fetchone()
        return version

    @staticmethod
    def _to_row(event: Event) -> tuple:
        return (
            event.stream_id,
            event.version,
            event.event_id,
            event.event_type,
            event.command_id,
            event.actor_id,
            event.occurred_at.isoformat(),
            json.dumps(event.payload),
        )

    @staticmethod
    def _to_event(row: tuple) -> Event:
        record = dict(zip(COLUMNS, row))
        record["occurred_at"] = datetime.fromisoformat(record["occurred_at"])
        record["payload"] = json.loads(record["payload"])
        return Event(**record)

    @retry_on_lock()
    def append(self, stream_id: str, expected_version: int, events: list[Event]) -> None:
        """
        Append one command's events, all or none

        Args:
            stream_id: Stream to append to
            expected_version: Stream version the events were decided against
            events: Events numbered expected_version + 1, + 2, ...

        Raises:
            StreamVersionConflict: The stream is no longer at expected_version
            EventStoreError: The rows were rejected (e.g. a duplicate version)
        """
        if not events:
            return

        rows = [self._to_row(event) for event in events]
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                actual = self._version(conn, stream_id)
                if actual != expected_version:
                    stream_version_conflicts_total.inc()
                    raise StreamVersionConflict(stream_id, expected_version, actual)
                conn.executemany(INSERT, rows)
            except sqlite3.IntegrityError as e:
                conn.execute("ROLLBACK")
                raise EventStoreError(f"Append to {stream_id} rejected: {e}") from e
            except Exception:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

        for event in events:
            events_appended_total.labels(event_type=event.event_type).inc()
        logger.debug(
            "Events appended",
            stream_id=stream_id,
            count=len(events),
            version=events[-1].version,
        )

    @retry_on_lock()
    def load_stream(self, stream_id: str, after_version: int = 0) -> list[Event]:
        """Events of stream_id with version > after_version, in order"""
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {', '.join(COLUMNS)} FROM events "
                "WHERE stream_id = ? AND version > ? ORDER BY version",
                (stream_id, after_version),
            ).fetchall()
        return [self._to_event(row) for row in rows]

    def stream_version(self, stream_id: str) -> int:
        """Current version of stream_id (0 if it has no events)"""
        with self._connect() as conn:
            return self._version(conn, stream_id)
