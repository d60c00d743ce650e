import base64
import json
import logging

import pytest

from rvps.config import Config
from rvps.local_json import LocalJsonConfig
from rvps.server import build_server
from rvps.tool import DEFAULT_ADDR, main, parse_args


@pytest.fixture
def address(tmp_path):
    config = Config(storage=LocalJsonConfig(file_path=str(tmp_path / "rv.json")))
    server, port = build_server("127.0.0.1:0", config)
    server.start()
    yield f"http://127.0.0.1:{port}"
    server.stop(None)


def test_parse_register_defaults():
    args = parse_args(["register", "-p", "prov.json"])
    assert args.command == "register"
    assert args.path == "prov.json"
    assert args.addr == "http://127.0.0.1:50003"


def test_parse_query():
    args = parse_args(["query", "--addr", "http://10.0.0.1:1"])
    assert (args.command, args.addr) == ("query", "http://10.0.0.1:1")
    assert parse_args(["query"]).addr == DEFAULT_ADDR


def test_parse_requires_command():
    with pytest.raises(SystemExit):
        parse_args([])


def test_register_requires_path():
    with pytest.raises(SystemExit):
        parse_args(["register"])


def test_register_missing_file(tmp_path, caplog):
    caplog.set_level(logging.INFO)
    assert main(["register", "-p", str(tmp_path / "absent.json")]) == 1
    assert "read provenance" in caplog.text


def test_register_and_query(tmp_path, address, caplog):
    payload = base64.b64encode(json.dumps({"artifact-one": "digest"}).encode()).decode()
    provenance = tmp_path / "prov.json"
    provenance.write_text(
        json.dumps({"version": "0.1.0", "type": "sample", "payload": payload})
    )
    caplog.set_level(logging.INFO)
    assert main(["register", "-a", address, "-p", str(provenance)]) == 0
    assert "Register provenance succeeded." in caplog.text
    assert main(["query", "-a", address]) == 0
    assert "Get reference values succeeded" in caplog.text
    assert "artifact-one" in caplog.text


def test_query_bad_scheme_fails(caplog):
    caplog.set_level(logging.INFO)
    assert main(["query", "-a", "ftp://127.0.0.1:1"]) == 1
    assert "unsupported address scheme" in caplog.text