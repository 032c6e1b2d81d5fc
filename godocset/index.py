"""
Dash search index (``docSet.dsidx``).

The new index is built in a staging file beside the real one and inside a
single transaction.  Only :meth:`IndexWriter.commit` moves it into place, so
an interrupted run leaves the previous index untouched.
"""

import contextlib
import logging
import os
import sqlite3
import threading
from pathlib import Path

from .errors import PersistenceError
from .models import PackageRecord, PackageStatus, index_entries

log = logging.getLogger(__name__)

INSERT_SQL = "INSERT OR IGNORE INTO searchIndex(name, type, path) VALUES (?, ?, ?)"


def init_database(db_path: Path) -> sqlite3.Connection:
    """Create an empty search index at *db_path* and open a transaction on it."""
    conn = sqlite3.connect(str(db_path), isolation_level=None, check_same_thread=False)
    try:
        conn.execute(
            """
            CREATE TABLE searchIndex (
                id   INTEGER PRIMARY KEY,
                name TEXT,
                type TEXT,
                path TEXT
            )
            """
        )
        conn.execute("CREATE UNIQUE INDEX anchor ON searchIndex (name, type, path)")
        conn.execute("BEGIN")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def read_index(db_path: Path | str) -> set[tuple[str, str, str]]:
    """Return every ``(name, type, path)`` row of a committed index."""
    conn = sqlite3.connect(str(db_path))
    try:
        return set(conn.execute("SELECT name, type, path FROM searchIndex"))
    finally:
        conn.close()


class IndexWriter:
    """
    Single writer for the search index.

    Package tasks running on worker threads call :meth:`add`; a lock
    serializes them onto the one connection.  Use as a context manager:
    leaving the block normally commits, leaving it with an exception aborts.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self.staging_path = self.db_path.with_name(self.db_path.name + ".partial")
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> "IndexWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.abort()

    def open(self) -> "IndexWriter":
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.staging_path.unlink(missing_ok=True)
            self._conn = init_database(self.staging_path)
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"cannot create index {self.staging_path}: {exc}") from exc
        log.debug("Opened staging index %s", self.staging_path)
        return self

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise PersistenceError("index is not open")
        return self._conn

    def add(self, record: PackageRecord) -> int:
        """
        Insert the rows for *record* as one batch and return how many were new.

        Rows already present are skipped.  Only records with status
        ``indexed`` may be added.
        """
        if record.status is not PackageStatus.INDEXED:
            raise ValueError(f"{record.import_path} is {record.status.value}, not indexable")

        rows = [entry.as_row() for entry in index_entries(record)]
        with self._lock:
            conn = self._connection()
            try:
                conn.execute("SAVEPOINT package")
                inserted = 0
                for row in rows:
                    inserted += conn.execute(INSERT_SQL, row).rowcount
                conn.execute("RELEASE package")
            except sqlite3.Error as exc:
                with contextlib.suppress(sqlite3.Error):
                    conn.execute("ROLLBACK TO package")
                    conn.execute("RELEASE package")
                raise PersistenceError(
                    f"writing index rows for {record.import_path} failed: {exc}"
                ) from exc
        return inserted

    def count(self) -> int:
        with self._lock:
            conn = self._connection()
            try:
                return conn.execute("SELECT COUNT(*) FROM searchIndex").fetchone()[0]
            except sqlite3.Error as exc:
                raise PersistenceError(f"counting index rows failed: {exc}") from exc

    def commit(self) -> None:
        """Commit the run's transaction and move the staging file over the index."""
        total = self.count()
        with self._lock:
            conn = self._connection()
            try:
                conn.execute("COMMIT")
                conn.close()
                self._conn = None
                os.replace(self.staging_path, self.db_path)
            except (sqlite3.Error, OSError) as exc:
                with contextlib.suppress(sqlite3.Error):
                    conn.close()
                self._conn = None
                self.staging_path.unlink(missing_ok=True)
                raise PersistenceError(f"committing index {self.db_path} failed: {exc}") from exc
        log.info("Committed %d index entries to %s", total, self.db_path)

    def abort(self) -> None:
        """Drop the staging index; the previous index file is left as it was."""
        with self._lock:
            if self._conn is not None:
                with contextlib.suppress(sqlite3.Error):
                    self._conn.close()
                self._conn = None
            self.staging_path.unlink(missing_ok=True)
        log.warning("Discarded partial index %s", self.staging_path)
