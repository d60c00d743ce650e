"""Storage backend keeping reference values in an on-disk key-value store."""

from __future__ import annotations

import json
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path

from rvps.errors import StorageError
from rvps.reference_value import ReferenceValue
from rvps.storage import ReferenceValueStorage

DEFAULT_FILE_PATH = "/opt/confidential-containers/attestation-service/reference_values"
_DB_FILE = "db"


@dataclass(frozen=True)
class LocalFsConfig:
    """Settings of the local key-value store; ``file_path`` is a directory."""

    file_path: str = DEFAULT_FILE_PATH


def _encode(rv: ReferenceValue) -> bytes:
    return json.dumps(rv.to_dict(), separators=(",", ":")).encode()


def _decode(blob: bytes) -> ReferenceValue:
    try:
        return ReferenceValue.from_dict(json.loads(blob))
    except ValueError as err:
        raise StorageError(f"corrupt reference value: {err}") from err


class LocalFs(ReferenceValueStorage):
    """Persistent key-value store of reference values, ordered by key."""

    def __init__(self, config: LocalFsConfig | None = None) -> None:
        config = config or LocalFsConfig()
        directory = Path(config.file_path)
        self._lock = threading.Lock()
        try:
            directory.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(directory / _DB_FILE, check_same_thread=False)
            with self._conn:
                self._conn.execute(
                    "CREATE TABLE IF NOT EXISTS reference_values "
                    "(key TEXT PRIMARY KEY, value BLOB NOT NULL)"
                )
        except (OSError, sqlite3.Error) as err:
            raise StorageError(f"open store at {directory}: {err}") from err

    def set(self, name: str, rv: ReferenceValue) -> ReferenceValue | None:
        encoded = _encode(rv)
        with self._lock:
            try:
                with self._conn:
                    row = self._conn.execute(
                        "SELECT value FROM reference_values WHERE key = ?", (name,)
                    ).fetchone()
                    self._conn.execute(
                        "INSERT OR REPLACE INTO reference_values (key, value) VALUES (?, ?)",
                        (name, encoded),
                    )
            except sqlite3.Error as err:
                raise StorageError(f"insert into store: {err}") from err
        return _decode(row[0]) if row else None

    def get(self, name: str) -> ReferenceValue | None:
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT value FROM reference_values WHERE key = ?", (name,)
                ).fetchone()
            except sqlite3.Error as err:
                raise StorageError(f"read from store: {err}") from err
        return _decode(row[0]) if row else None

    def get_values(self) -> list[ReferenceValue]:
        with self._lock:
            try:
                rows = self._conn.execute(
                    "SELECT value FROM reference_values ORDER BY key"
                ).fetchall()
            except sqlite3.Error as err:
                raise StorageError(f"read from store: {err}") from err
        return [_decode(blob) for (blob,) in rows]

    def close(self) -> None:
        """Release the underlying database handle."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> LocalFs:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()