import base64
import json

import jwt
import pytest
import responses
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from rvps.errors import RvpsError
from rvps.extractors.sample import SampleExtractor
from rvps.kbs_client import (
    KbsClientError,
    get_rvs,
    make_admin_token,
    set_attestation_policy,
    set_resource,
    set_resource_policy,
    set_sample_rv,
)

URL = "http://kbs.example.com:8080"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def signing_key():
    return Ed25519PrivateKey.generate()


@pytest.fixture
def auth_key(signing_key):
    return signing_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()


def _bearer_claims(request, signing_key):
    header_value = request.headers["Authorization"]
    scheme, _, encoded_jwt = header_value.partition(" ")
    assert scheme == "Bearer"
    return jwt.decode(encoded_jwt, signing_key.public_key(), algorithms=["EdDSA"])


def _unpad_decode(text):
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def test_admin_token_valid_two_hours(signing_key, auth_key):
    signed = make_admin_token(auth_key)
    claims = jwt.decode(signed, signing_key.public_key(), algorithms=["EdDSA"])
    assert claims["exp"] - claims["iat"] == 2 * 60 * 60
    assert claims["nbf"] == claims["iat"]


def test_admin_token_rejects_garbage():
    with pytest.raises(KbsClientError):
        make_admin_token("not a pem")


def test_admin_token_rejects_non_ed25519_key():
    ec_pem = ec.generate_private_key(ec.SECP256R1()).private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    with pytest.raises(KbsClientError):
        make_admin_token(ec_pem)


def test_client_error_is_caught_as_rvps_error():
    with pytest.raises(RvpsError):
        make_admin_token("not a pem")


def test_set_attestation_policy_defaults(mocked, signing_key, auth_key):
    mocked.add(responses.POST, f"{URL}/kbs/v0/attestation-policy", status=200)
    policy = b"package policy\nallow = true\n"
    set_attestation_policy(URL, auth_key, policy)
    request = mocked.calls[0].request
    body = json.loads(request.body)
    assert body["type"] == "rego"
    assert body["policy_id"] == "default"
    assert "=" not in body["policy"]
    assert _unpad_decode(body["policy"]) == policy
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["User-Agent"].startswith("kbs-client/")
    assert _bearer_claims(request, signing_key)["exp"] > 0


def test_set_attestation_policy_explicit_values(mocked, auth_key):
    mocked.add(responses.POST, f"{URL}/kbs/v0/attestation-policy", status=200)
    set_attestation_policy(URL, auth_key, b"x", policy_type="opa", policy_id="mine")
    body = json.loads(mocked.calls[0].request.body)
    assert (body["type"], body["policy_id"]) == ("opa", "mine")


def test_set_attestation_policy_failure(mocked, auth_key):
    mocked.add(
        responses.POST, f"{URL}/kbs/v0/attestation-policy", status=401, body="denied"
    )
    with pytest.raises(KbsClientError, match="Request Failed") as info:
        set_attestation_policy(URL, auth_key, b"x")
    assert "denied" in str(info.value)


def test_set_resource_policy(mocked, signing_key, auth_key):
    mocked.add(responses.POST, f"{URL}/kbs/v0/resource-policy", status=200)
    policy = b"package policy\ndefault allow = false\n"
    set_resource_policy(URL, auth_key, policy)
    request = mocked.calls[0].request
    body = json.loads(request.body)
    assert list(body) == ["policy"]
    assert _unpad_decode(body["policy"]) == policy
    assert "iat" in _bearer_claims(request, signing_key)


def test_set_resource_policy_non_ok_status(mocked, auth_key):
    mocked.add(responses.POST, f"{URL}/kbs/v0/resource-policy", status=201)
    with pytest.raises(KbsClientError):
        set_resource_policy(URL, auth_key, b"x")


def test_set_resource(mocked, signing_key, auth_key):
    mocked.add(responses.POST, f"{URL}/kbs/v0/resource/alice/key/example", status=200)
    resource_bytes = b"\x00\x01placeholder\xff"
    set_resource(URL, auth_key, resource_bytes, "alice/key/example")
    request = mocked.calls[0].request
    assert request.body == resource_bytes
    assert request.headers["Content-Type"] == "application/octet-stream"
    assert "exp" in _bearer_claims(request, signing_key)


def test_set_resource_failure(mocked, auth_key):
    mocked.add(
        responses.POST,
        f"{URL}/kbs/v0/resource/alice/key/example",
        status=500,
        body="boom",
    )
    with pytest.raises(KbsClientError, match="boom"):
        set_resource(URL, auth_key, b"data", "alice/key/example")


def test_set_sample_rv_round_trips_through_extractor(mocked, auth_key):
    mocked.add(responses.POST, f"{URL}/kbs/v0/reference-value", status=200)
    set_sample_rv(URL, "svn", [1, 2], auth_key)
    message = json.loads(mocked.calls[0].request.body)
    assert message["version"] == "0.1.0"
    assert message["type"] == "sample"
    rvs = SampleExtractor().verify_and_extract(message["payload"])
    assert [(rv.name, rv.value) for rv in rvs] == [("svn", [1, 2])]


def test_get_rvs_returns_body(mocked, signing_key, auth_key):
    body = json.dumps({"svn": [1]})
    mocked.add(responses.GET, f"{URL}/kbs/v0/reference-value", status=200, body=body)
    assert get_rvs(URL, auth_key) == body
    assert _bearer_claims(mocked.calls[0].request, signing_key)["exp"] > 0


def test_get_rvs_failure(mocked, auth_key):
    mocked.add(
        responses.GET, f"{URL}/kbs/v0/reference-value", status=403, body="forbidden"
    )
    with pytest.raises(KbsClientError, match="forbidden"):
        get_rvs(URL, auth_key)


def test_connection_failure_is_wrapped(mocked, auth_key):
    with pytest.raises(KbsClientError, match="request to"):
        get_rvs(URL, auth_key)


def test_invalid_root_certificate_rejected(auth_key):
    with pytest.raises(KbsClientError, match="root certificate"):
        get_rvs(URL, auth_key, ["not a certificate"])