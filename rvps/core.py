"""The reference value provider service without its transport."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from rvps.config import Config
from rvps.errors import RvpsError
from rvps.extractors.registry import Extractors

MESSAGE_VERSION = "0.1.0"

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    """A provenance packet: its payload, payload type and message version."""

    payload: str
    type: str
    version: str = MESSAGE_VERSION

    @classmethod
    def from_json(cls, text: str | bytes) -> Message:
        """Parse a message; ``version`` defaults to the current one."""
        try:
            data = json.loads(text)
        except ValueError as err:
            raise RvpsError(f"parse message: {err}") from err
        if not isinstance(data, dict):
            raise RvpsError("parse message: expected a JSON object")
        for required in ("payload", "type"):
            if required not in data:
                raise RvpsError(f"parse message: missing field `{required}`")
        fields = {
            "payload": data["payload"],
            "type": data["type"],
            "version": data.get("version", MESSAGE_VERSION),
        }
        for key, value in fields.items():
            if not isinstance(value, str):
                raise RvpsError(f"parse message: field `{key}` must be a string")
        return cls(**fields)


class Rvps:
    """Verifies provenances, stores their reference values and serves them."""

    def __init__(self, config: Config | None = None) -> None:
        self.extractors = Extractors()
        self.storage = (config or Config()).to_storage()

    def verify_and_extract(self, message: str | bytes) -> None:
        """Verify a JSON message and store the reference values it carries."""
        parsed = Message.from_json(message)
        if parsed.version != MESSAGE_VERSION:
            raise RvpsError(
                f"Version unmatched! Need {MESSAGE_VERSION}, given {parsed.version}."
            )
        for rv in self.extractors.process(parsed):
            old = self.storage.set(rv.name, rv)
            if old is not None:
                log.info("Old Reference value of %s is replaced.", old.name)

    def get_digests(self) -> dict[str, Any]:
        """Map every unexpired reference value's name to its value."""
        digests: dict[str, Any] = {}
        for rv in self.storage.get_values():
            if rv.expired():
                log.warning("Reference value of %s is expired.", rv.name)
                continue
            digests[rv.name] = rv.value
        return digests