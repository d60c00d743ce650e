"""Storage backend keeping reference values in a single JSON file."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from rvps.errors import StorageError
from rvps.reference_value import ReferenceValue
from rvps.storage import ReferenceValueStorage

DEFAULT_FILE_PATH = "/opt/confidential-containers/attestation-service/reference_values.json"

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalJsonConfig:
    """Settings of the JSON file backend."""

    file_path: str = DEFAULT_FILE_PATH


class LocalJson(ReferenceValueStorage):
    """Reference values kept as a JSON array in one file."""

    def __init__(self, config: LocalJsonConfig | None = None) -> None:
        config = config or LocalJsonConfig()
        path = Path(config.file_path)
        if path == Path(path.anchor):
            raise StorageError(
                "Illegal `file_path` for LocalJson's config without a parent dir."
            )
        try:
            log.debug("create path for LocalJson: %s", path.parent)
            path.parent.mkdir(parents=True, exist_ok=True)
            if not path.exists():
                log.debug("Creating empty file for LocalJson reference values.")
                path.write_text("[]")
        except OSError as err:
            raise StorageError(f"prepare {path}: {err}") from err
        self._path = path
        self._lock = threading.RLock()

    def _load(self) -> list[ReferenceValue]:
        try:
            data = json.loads(self._path.read_bytes())
            if not isinstance(data, list):
                raise ValueError("expected a JSON array")
            return [ReferenceValue.from_dict(item) for item in data]
        except (OSError, ValueError) as err:
            raise StorageError(f"read {self._path}: {err}") from err

    def _save(self, rvs: list[ReferenceValue]) -> None:
        contents = json.dumps([rv.to_dict() for rv in rvs], separators=(",", ":"))
        try:
            self._path.write_text(contents)
        except OSError as err:
            raise StorageError(f"write {self._path}: {err}") from err

    def set(self, name: str, rv: ReferenceValue) -> ReferenceValue | None:
        with self._lock:
            rvs = self._load()
            for position, item in enumerate(rvs):
                if item.name == name:
                    rvs[position] = rv
                    previous = item
                    break
            else:
                rvs.append(rv)
                previous = None
            self._save(rvs)
        return previous

    def get(self, name: str) -> ReferenceValue | None:
        with self._lock:
            return next((rv for rv in self._load() if rv.name == name), None)

    def get_values(self) -> list[ReferenceValue]:
        with self._lock:
            return self._load()