"""SQLite token registry for sharing registrations across processes."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..errors import TokenNotFoundError
from .base import TokenRegistry


_SCHEMA = """
CREATE TABLE IF NOT EXISTS registration_tokens (
    namespace TEXT NOT NULL,
    token TEXT NOT NULL,
    PRIMARY KEY (namespace, token)
);
"""


class SQLiteTokenStore(TokenRegistry):
    def __init__(self, path: str | Path = ":memory:", *, namespace: str = "fcm_sender") -> None:
        self._lock = threading.RLock()
        self._namespace = namespace
        self._path, self._conn_kwargs = self._normalize_path(path, namespace)
        # A shared-cache memory database disappears with its last connection.
        self._keepalive = sqlite3.connect(self._path, **self._conn_kwargs)
        with self._connection() as conn:
            conn.executescript(_SCHEMA)

    def _normalize_path(self, path: str | Path, namespace: str) -> tuple[str, dict[str, object]]:
        path_str = str(path)
        kwargs: dict[str, object] = {"check_same_thread": False}
        if path_str == ":memory:":
            path_str = f"file:{namespace}_{id(self)}?mode=memory&cache=shared"
            kwargs["uri"] = True
        return path_str, kwargs

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            conn = sqlite3.connect(self._path, **self._conn_kwargs)
            try:
                with conn:
                    yield conn
            finally:
                conn.close()

    def close(self) -> None:
        self._keepalive.close()

    def add(self, token: str) -> None:
        with self._connection() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO registration_tokens (namespace, token) VALUES (?, ?)",
                (self._namespace, token),
            )

    def contains(self, token: str) -> bool:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM registration_tokens WHERE namespace = ? AND token = ?",
                (self._namespace, token),
            ).fetchone()
        return row is not None

    def list(self) -> list[str]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT token FROM registration_tokens WHERE namespace = ? ORDER BY token",
                (self._namespace,),
            ).fetchall()
        return [row[0] for row in rows]

    def rename(self, old_token: str, new_token: str) -> None:
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM registration_tokens WHERE namespace = ? AND token = ?",
                (self._namespace, old_token),
            )
            if cursor.rowcount == 0:
                raise TokenNotFoundError(old_token)
            conn.execute(
                "INSERT OR IGNORE INTO registration_tokens (namespace, token) VALUES (?, ?)",
                (self._namespace, new_token),
            )

    def delete(self, token: str) -> None:
        with self._connection() as conn:
            cursor = conn.execute(
                "DELETE FROM registration_tokens WHERE namespace = ? AND token = ?",
                (self._namespace, token),
            )
            if cursor.rowcount == 0:
                raise TokenNotFoundError(token)


__all__ = ["SQLiteTokenStore"]
