"""Selection and caching of extractors by provenance type."""

from __future__ import annotations

from typing import Callable, Protocol

from rvps.errors import ExtractorError
from rvps.extractors.base import Extractor
from rvps.extractors.sample import SampleExtractor
from rvps.extractors.swid import SwidExtractor
from rvps.reference_value import ReferenceValue

ExtractorFactory = Callable[[], Extractor]

_FACTORIES: dict[str, ExtractorFactory] = {
    "sample": SampleExtractor,
    "swid": SwidExtractor,
}


class _Provenance(Protocol):
    type: str
    payload: str


def get_extractor_factory(name: str) -> ExtractorFactory:
    """Return the constructor of the extractor handling provenance type ``name``."""
    try:
        return _FACTORIES[name]
    except KeyError:
        raise ExtractorError(
            f"RVPS Extractors does not support the given extractor: {name}!"
        ) from None


class Extractors:
    """Dispatches provenances to extractors, creating each one on first use."""

    def __init__(self) -> None:
        self._instances: dict[str, Extractor] = {}

    def _instance(self, name: str) -> Extractor:
        if name not in self._instances:
            self._instances[name] = get_extractor_factory(name)()
        return self._instances[name]

    def process(self, message: _Provenance) -> list[ReferenceValue]:
        """Verify the message's payload and return its reference values."""
        return self._instance(message.type).verify_and_extract(message.payload)