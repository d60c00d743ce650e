"""Service configuration and the storage backend it selects."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from rvps.errors import RvpsError
from rvps.local_fs import DEFAULT_FILE_PATH as LOCAL_FS_PATH
from rvps.local_fs import LocalFs, LocalFsConfig
from rvps.local_json import DEFAULT_FILE_PATH as LOCAL_JSON_PATH
from rvps.local_json import LocalJson, LocalJsonConfig
from rvps.storage import ReferenceValueStorage

StorageConfig = LocalFsConfig | LocalJsonConfig

_STORAGE_TYPES = {
    "LocalFs": (LocalFsConfig, LOCAL_FS_PATH),
    "LocalJson": (LocalJsonConfig, LOCAL_JSON_PATH),
}

_PARSERS = {
    ".json": lambda text: json.loads(text),
    ".toml": lambda text: tomllib.loads(text),
}


def _storage_from_dict(data: Any) -> StorageConfig:
    if not isinstance(data, Mapping):
        raise RvpsError("invalid config: `storage` must be a table")
    kind = data.get("type")
    if kind is None:
        raise RvpsError("invalid config: missing field `type` in `storage`")
    if kind not in _STORAGE_TYPES:
        expected = ", ".join(_STORAGE_TYPES)
        raise RvpsError(f"invalid config: unknown storage type {kind!r}, expected {expected}")
    config_class, default_path = _STORAGE_TYPES[kind]
    file_path = data.get("file_path", default_path)
    if not isinstance(file_path, str):
        raise RvpsError("invalid config: `file_path` must be a string")
    return config_class(file_path=file_path)


def _locate(path: Path) -> Path:
    if path.suffix in _PARSERS and path.is_file():
        return path
    for suffix in _PARSERS:
        candidate = path.with_name(path.name + suffix)
        if candidate.is_file():
            return candidate
    raise RvpsError(f"configuration file {path} not found")


@dataclass
class Config:
    """Top-level service configuration."""

    storage: StorageConfig = field(default_factory=LocalFsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build a configuration from a parsed mapping; absent storage means the default."""
        if not isinstance(data, Mapping):
            raise RvpsError("invalid config: expected a table")
        storage = data.get("storage")
        if storage is None:
            return cls()
        return cls(storage=_storage_from_dict(storage))

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Read a JSON or TOML configuration file.

        A path without a known extension is looked up with each supported one.
        """
        located = _locate(Path(path))
        try:
            data = _PARSERS[located.suffix](located.read_text())
        except (OSError, ValueError) as err:
            raise RvpsError(f"invalid config: {err}") from err
        return cls.from_dict(data)

    def to_storage(self) -> ReferenceValueStorage:
        """Open the storage backend this configuration names."""
        if isinstance(self.storage, LocalJsonConfig):
            return LocalJson(self.storage)
        return LocalFs(self.storage)