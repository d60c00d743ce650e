"""Extractor for SWID / TCG reference integrity manifests."""

from __future__ import annotations

import base64
import binascii
import logging
import xml.etree.ElementTree as ET
from itertools import count

from rvps.errors import ExtractorError
from rvps.extractors.base import Extractor
from rvps.reference_value import ReferenceValue

SWID_NS = "http://standards.iso.org/iso/19770/-2/2015/schema.xsd"
RIMIM_NS = (
    "https://trustedcomputinggroup.org/resource/"
    "tcg-reference-integrity-manifest-rim-information-model/"
)
HASH_NS = "http://www.w3.org/2001/04/xmlenc#sha384"

log = logging.getLogger(__name__)


def _qname(namespace: str, local: str) -> str:
    return f"{{{namespace}}}{local}"


def _find(root: ET.Element, tag: str) -> ET.Element | None:
    return next(root.iter(_qname(SWID_NS, tag)), None)


def _require(value: str | None, what: str) -> str:
    if value is None:
        raise ExtractorError(f"Could not find {what}.")
    return value


class SwidExtractor(Extractor):
    """Reads measurement hashes out of a base64-encoded SWID manifest."""

    def verify_and_extract(self, provenance: str) -> list[ReferenceValue]:
        log.info("Extracting reference values from SWID/RIM manifest.")
        try:
            raw = base64.b64decode(provenance, validate=True)
        except (binascii.Error, ValueError) as err:
            raise ExtractorError(
                f"Failed to decode reference value manifest as base 64: {err}"
            ) from err
        try:
            manifest = raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise ExtractorError(
                f"Failed to decode reference value manifest as utf8 string: {err}"
            ) from err
        try:
            root = ET.fromstring(manifest)
        except ET.ParseError as err:
            raise ExtractorError(f"invalid manifest XML: {err}") from err

        meta = _find(root, "Meta")
        if meta is None:
            raise ExtractorError("Could not find meta information.")
        manufacturer = _require(
            meta.get(_qname(RIMIM_NS, "PlatformManufacturerStr")), "manufacturer information"
        ).replace(" ", "_")
        product = _require(meta.get(_qname(RIMIM_NS, "PlatformModel")), "product information")
        version = _require(meta.get("colloquialVersion"), "version information").replace(".", "_")

        prefix = f"{manufacturer}.{product}.{version}"
        log.info("Extracting reference values for %s", prefix)

        payload = _find(root, "Payload")
        if payload is None:
            raise ExtractorError("Could not find SWID payload.")

        rvs: list[ReferenceValue] = []
        for resource in payload.iter(_qname(SWID_NS, "Resource")):
            if resource.get("type", "") != "Measurement":
                continue
            measurement = _require(resource.get("name"), "measurement name")
            for index in count():
                digest = resource.get(_qname(HASH_NS, f"Hash{index}"))
                if digest is None:
                    break
                # Rego does not like dashes
                name = f"{prefix}.{measurement}.hash{index}".replace("-", "_")
                rvs.append(ReferenceValue.create(name=name, value=digest))
        log.debug("Reference Values Extracted: %s", rvs)
        return rvs