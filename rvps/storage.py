"""Interface of reference value storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rvps.reference_value import ReferenceValue


class ReferenceValueStorage(ABC):
    """A place where verified reference values are kept."""

    @abstractmethod
    def set(self, name: str, rv: ReferenceValue) -> ReferenceValue | None:
        """Store ``rv`` under ``name`` and return the value it replaced, if any."""

    @abstractmethod
    def get(self, name: str) -> ReferenceValue | None:
        """Return the value stored under ``name``, or ``None``."""

    @abstractmethod
    def get_values(self) -> list[ReferenceValue]:
        """Return every stored value."""