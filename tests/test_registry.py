import base64
import json

import pytest

from rvps.core import Message
from rvps.errors import ExtractorError
from rvps.extractors.registry import Extractors, get_extractor_factory


def _sample_message(obj):
    payload = base64.b64encode(json.dumps(obj).encode()).decode()
    return Message(payload=payload, type="sample")


def test_sample_factory_produces_working_extractor():
    extractor = get_extractor_factory("sample")()
    payload = base64.b64encode(json.dumps({"k": "v"}).encode()).decode()
    assert [(rv.name, rv.value) for rv in extractor.verify_and_extract(payload)] == [("k", "v")]


def test_swid_factory_rejects_bad_manifest():
    extractor = get_extractor_factory("swid")()
    with pytest.raises(ExtractorError):
        extractor.verify_and_extract(base64.b64encode(b"<x/>").decode())


def test_unknown_type_is_rejected():
    with pytest.raises(ExtractorError, match="does not support the given extractor: in-toto"):
        get_extractor_factory("in-toto")


def test_process_dispatches_by_type():
    extractors = Extractors()
    values = extractors.process(_sample_message({"a": 1, "b": [2]}))
    assert {rv.name: rv.value for rv in values} == {"a": 1, "b": [2]}


def test_process_can_be_repeated():
    extractors = Extractors()
    first = extractors.process(_sample_message({"a": 1}))
    second = extractors.process(_sample_message({"b": 2}))
    assert [rv.name for rv in first + second] == ["a", "b"]


def test_process_unknown_type_raises():
    with pytest.raises(ExtractorError):
        Extractors().process(Message(payload="", type="nope"))