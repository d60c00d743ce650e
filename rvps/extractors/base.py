"""Common interface of provenance extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rvps.reference_value import ReferenceValue


class Extractor(ABC):
    """Verifies one kind of provenance and extracts the reference values in it."""

    @abstractmethod
    def verify_and_extract(self, provenance: str) -> list[ReferenceValue]:
        """Verify ``provenance`` and return the reference values it carries.

        Raises ``ExtractorError`` when the provenance is invalid.
        """