"""Extractor for the simple, unsigned sample provenance format."""

from __future__ import annotations

import base64
import binascii
import json

from rvps.errors import ExtractorError
from rvps.extractors.base import Extractor
from rvps.reference_value import ReferenceValue


class SampleExtractor(Extractor):
    """Reads a base64-encoded JSON object mapping names to reference values."""

    def verify_and_extract(self, provenance: str) -> list[ReferenceValue]:
        try:
            decoded = base64.b64decode(provenance, validate=True)
        except (binascii.Error, ValueError) as err:
            raise ExtractorError(f"base64 decode: {err}") from err
        try:
            payload = json.loads(decoded)
        except ValueError as err:
            raise ExtractorError(f"deseralize sample provenance: {err}") from err
        if not isinstance(payload, dict):
            raise ExtractorError("deseralize sample provenance: expected a JSON object")
        return [ReferenceValue.create(name=name, value=value) for name, value in payload.items()]