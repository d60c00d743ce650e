import base64
import json

import pytest

from rvps.client import query, register
from rvps.config import Config
from rvps.errors import RvpsError
from rvps.local_json import LocalJsonConfig
from rvps.server import build_server


def _message(values, version="0.1.0"):
    payload = base64.b64encode(json.dumps(values).encode()).decode()
    return json.dumps({"version": version, "type": "sample", "payload": payload})


@pytest.fixture
def port(tmp_path):
    config = Config(storage=LocalJsonConfig(file_path=str(tmp_path / "rv.json")))
    server, bound = build_server("127.0.0.1:0", config)
    server.start()
    yield bound
    server.stop(None)


def test_query_empty(port):
    assert json.loads(query(f"http://127.0.0.1:{port}")) == {}


def test_register_then_query(port):
    address = f"http://127.0.0.1:{port}"
    register(address, _message({"k": "v"}))
    register(address, _message({"k": "w", "other": 1}))
    assert json.loads(query(address)) == {"k": "w", "other": 1}


def test_bare_address_is_accepted(port):
    address = f"127.0.0.1:{port}"
    register(address, _message({"x": True}))
    assert json.loads(query(address)) == {"x": True}


def test_register_error_is_raised(port):
    with pytest.raises(RvpsError) as info:
        register(f"http://127.0.0.1:{port}", _message({"k": "v"}, version="2.0.0"))
    assert "Register reference value" in str(info.value)
    assert "ABORTED" in str(info.value)


def test_unsupported_scheme_is_rejected():
    with pytest.raises(RvpsError):
        query("ftp://127.0.0.1:50003")