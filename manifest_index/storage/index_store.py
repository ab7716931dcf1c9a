"""
SQLite-backed store for manifest index records.
"""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from pydantic import ValidationError

from manifest_index.core.errors import IndexWriteError, QueryError, StoreUnavailableError
from manifest_index.domain.models import (
    DEFAULT_SEARCH_COLUMNS,
    INDEX_COLUMNS,
    IndexRecord,
    SearchColumn,
)
from manifest_index.storage.driver import require_driver

logger = logging.getLogger(__name__)

TABLE_NAME = "app"

SCHEMA_SQL = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        name TEXT NOT NULL COLLATE NOCASE,
        description TEXT NOT NULL,
        version TEXT NOT NULL,
        bucket VARCHAR NOT NULL,
        manifest TEXT NOT NULL,
        binary TEXT,
        shortcut TEXT,
        dependency TEXT,
        suggest TEXT,
        PRIMARY KEY (name, version, bucket)
    )
"""

_COLUMN_LIST = ", ".join(INDEX_COLUMNS)

UPSERT_SQL = (
    f"INSERT OR REPLACE INTO {TABLE_NAME} ({_COLUMN_LIST}) "
    f"VALUES ({', '.join(':' + c for c in INDEX_COLUMNS)})"
)

LIKE_ESCAPE = "\\"


def like_pattern(pattern: Optional[str]) -> str:
    """
    Wrap a literal substring for LIKE matching.

    LIKE wildcards in the input are escaped, so the caller only ever does
    substring matching. An empty pattern matches everything.
    """
    if not pattern:
        return "%"
    escaped = (
        pattern.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def normalize_columns(columns: Iterable[Union[SearchColumn, str]]) -> List[SearchColumn]:
    normalized: List[SearchColumn] = []
    for column in columns:
        try:
            value = SearchColumn(column)
        except ValueError as e:
            raise QueryError(f"unknown search column: {column!r}", "search") from e
        if value not in normalized:
            normalized.append(value)
    if not normalized:
        raise QueryError("at least one search column is required", "search")
    return normalized


def validate_lookup(name: str, bucket: str, version: Optional[str] = None) -> None:
    if not name or not name.strip():
        raise QueryError("name is required", "lookup", (name, bucket))
    if not bucket or not bucket.strip():
        raise QueryError("bucket is required", "lookup", (name, bucket))
    if version is not None and not version.strip():
        raise QueryError("version must not be empty", "lookup", (name, bucket))


class IndexStore:
    """
    Owned handle on the index database.

    Use `IndexStore.open(path)` (or `with IndexStore.open(path) as store:`)
    for multi-step work; `close()` must be called when done.
    """

    def __init__(self, db_path: Path, conn: sqlite3.Connection):
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = conn

    @classmethod
    def open(cls, db_path: Union[str, Path], timeout: float = 5.0) -> "IndexStore":
        """
        Open (creating if needed) the index file and ensure the schema exists.

        Never destructive: re-running against an initialized store keeps its rows.
        `timeout` is how long SQLite waits on a locked database before failing.
        """
        require_driver()
        db_path = Path(db_path)
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            # Transactions are managed explicitly in transaction()
            conn = sqlite3.connect(str(db_path), timeout=timeout, isolation_level=None)
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Cannot open index database {db_path}: {e}")
            raise StoreUnavailableError(f"cannot open {db_path}: {e}") from e

        try:
            conn.row_factory = sqlite3.Row
            conn.execute(SCHEMA_SQL)
        except sqlite3.Error as e:
            conn.close()
            logger.error(f"Cannot initialize schema in {db_path}: {e}")
            raise StoreUnavailableError(f"cannot initialize schema in {db_path}: {e}") from e

        logger.debug(f"Opened index database: {db_path}")
        return cls(db_path, conn)

    @property
    def closed(self) -> bool:
        return self.conn is None

    def close(self) -> None:
        """Close database connection."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logger.debug(f"Closed index database: {self.db_path}")

    def _connection(self, operation: str) -> sqlite3.Connection:
        if self.conn is None:
            raise StoreUnavailableError(f"index database {self.db_path} is closed", operation)
        return self.conn

    @contextmanager
    def transaction(self) -> Iterator["IndexStore"]:
        """
        BEGIN, then COMMIT on success or ROLLBACK on any exception.

        A failing BEGIN or COMMIT (e.g. the database is locked) is raised as
        IndexWriteError.
        """
        conn = self._connection("write")
        try:
            conn.execute("BEGIN")
        except sqlite3.Error as e:
            logger.error(f"Cannot begin transaction on {self.db_path}: {e}")
            raise IndexWriteError(f"cannot begin transaction: {e}") from e

        try:
            yield self
            conn.execute("COMMIT")
        except BaseException as e:
            self._rollback()
            if isinstance(e, sqlite3.Error):
                logger.error(f"Cannot commit transaction on {self.db_path}: {e}")
                raise IndexWriteError(f"cannot commit transaction: {e}") from e
            raise

    def _rollback(self) -> None:
        conn = self.conn
        if conn is None or not conn.in_transaction:
            return
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            # The connection is closed by the caller either way
            logger.error(f"Rollback failed on {self.db_path}: {e}")
            return
        logger.debug(f"Rolled back transaction on {self.db_path}")

    def upsert(self, records: Iterable[IndexRecord]) -> int:
        """
        INSERT OR REPLACE each record by (name, version, bucket).

        Call inside transaction() so a failure leaves nothing behind.
        """
        conn = self._connection("write")
        written = 0
        for record in records:
            try:
                conn.execute(UPSERT_SQL, record.to_row())
            except sqlite3.Error as e:
                raise IndexWriteError(str(e), record.identity) from e
            written += 1
        return written

    def search(
        self,
        pattern: Optional[str] = "",
        columns: Iterable[Union[SearchColumn, str]] = DEFAULT_SEARCH_COLUMNS,
    ) -> List[IndexRecord]:
        """
        Substring search across `columns`, one row per (name, bucket).

        Within a (name, bucket) the row with the greatest version string wins.
        Versions compare lexicographically, so '10.0' sorts before '9.0'.
        """
        search_columns = normalize_columns(columns)
        like = like_pattern(pattern)
        where = " OR ".join(f"{c.value} LIKE ? ESCAPE '{LIKE_ESCAPE}'" for c in search_columns)
        sql = f"""
            SELECT {_COLUMN_LIST} FROM (
                SELECT {_COLUMN_LIST},
                    ROW_NUMBER() OVER (
                        PARTITION BY name, bucket ORDER BY version DESC
                    ) AS row_rank
                FROM {TABLE_NAME}
                WHERE {where}
            )
            WHERE row_rank = 1
            ORDER BY name, bucket
        """
        params = [like] * len(search_columns)
        return self._fetch(sql, params, "search")

    def lookup(self, name: str, bucket: str, version: Optional[str] = None) -> List[IndexRecord]:
        """
        Exact (name, bucket) match; the given version, or the greatest one.
        """
        validate_lookup(name, bucket, version)
        if version is None:
            sql = (
                f"SELECT {_COLUMN_LIST} FROM {TABLE_NAME} "
                "WHERE name = ? AND bucket = ? "
                "ORDER BY version DESC LIMIT 1"
            )
            params: Sequence[str] = (name, bucket)
        else:
            sql = (
                f"SELECT {_COLUMN_LIST} FROM {TABLE_NAME} "
                "WHERE name = ? AND bucket = ? AND version = ?"
            )
            params = (name, bucket, version)
        return self._fetch(sql, params, "lookup")

    def count(self) -> int:
        conn = self._connection("count")
        row = conn.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}").fetchone()
        return int(row[0])

    def _fetch(self, sql: str, params: Sequence[str], operation: str) -> List[IndexRecord]:
        conn = self._connection(operation)
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Database error during {operation} on {self.db_path}: {e}", exc_info=True)
            raise StoreUnavailableError(f"{operation} failed: {e}", operation) from e
        # binary/shortcut/dependency/suggest are nullable in older stores
        try:
            return [
                IndexRecord(**{k: ("" if v is None else v) for k, v in dict(row).items()})
                for row in rows
            ]
        except ValidationError as e:
            logger.error(f"Unreadable row during {operation} on {self.db_path}: {e}")
            raise StoreUnavailableError(f"{operation} returned an unreadable row: {e}", operation) from e

    def __enter__(self) -> "IndexStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
