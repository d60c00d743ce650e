"""Administrative client calls to a key broker service."""

from __future__ import annotations

import base64
import json
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

import jwt
import requests
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from requests import certs

from rvps.errors import RvpsError

KBS_URL_PREFIX = "kbs/v0"
USER_AGENT = "kbs-client/0.1.0"
TOKEN_LIFETIME_SECONDS = 2 * 60 * 60
DEFAULT_POLICY_TYPE = "rego"
DEFAULT_POLICY_ID = "default"
SAMPLE_MESSAGE_VERSION = "0.1.0"


class KbsClientError(RvpsError):
    """A request to the key broker service could not be made or was refused."""


def make_admin_token(auth_key: str) -> str:
    """Sign a two-hour admin token with an Ed25519 private key in PEM form."""
    try:
        key = serialization.load_pem_private_key(auth_key.encode(), password=None)
    except (ValueError, TypeError) as err:
        raise KbsClientError(f"invalid admin private key: {err}") from err
    if not isinstance(key, Ed25519PrivateKey):
        raise KbsClientError("admin private key must be an Ed25519 key")
    now = int(time.time())
    claims = {"iat": now, "nbf": now, "exp": now + TOKEN_LIFETIME_SECONDS}
    return jwt.encode(claims, key, algorithm="EdDSA")


def _check_certificates(pems: list[str]) -> None:
    for pem in pems:
        try:
            x509.load_pem_x509_certificate(pem.encode())
        except ValueError as err:
            raise KbsClientError(f"invalid root certificate: {err}") from err


@contextmanager
def _http_session(kbs_root_certs_pem: Iterable[str]) -> Iterator[requests.Session]:
    """Open a session trusting the default roots plus the given certificates."""
    custom = list(kbs_root_certs_pem)
    _check_certificates(custom)
    with requests.Session() as session:
        session.headers["User-Agent"] = USER_AGENT
        if not custom:
            yield session
            return
        with tempfile.TemporaryDirectory() as directory:
            bundle = Path(directory) / "ca-bundle.pem"
            default_roots = Path(certs.where()).read_text()
            bundle.write_text("\n".join([default_roots, *custom]))
            session.verify = str(bundle)
            yield session


def _request(
    method: str,
    url: str,
    auth_key: str,
    kbs_root_certs_pem: Iterable[str],
    content_type: str,
    **kwargs: Any,
) -> requests.Response:
    token = make_admin_token(auth_key)
    headers = {"Content-Type": content_type, "Authorization": f"Bearer {token}"}
    with _http_session(kbs_root_certs_pem) as session:
        try:
            response = session.request(method, url, headers=headers, **kwargs)
        except requests.RequestException as err:
            raise KbsClientError(f"request to {url} failed: {err}") from err
    if response.status_code != 200:
        raise KbsClientError(f"Request Failed, Response: {json.dumps(response.text)}")
    return response


def _endpoint(url: str, tail: str) -> str:
    return f"{url}/{KBS_URL_PREFIX}/{tail}"


def _urlsafe_nopad(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def set_attestation_policy(
    url: str,
    auth_key: str,
    policy_bytes: bytes,
    policy_type: str | None = None,
    policy_id: str | None = None,
    kbs_root_certs_pem: Iterable[str] = (),
) -> None:
    """Upload an attestation policy; type defaults to rego and id to default."""
    body = {
        "type": policy_type if policy_type is not None else DEFAULT_POLICY_TYPE,
        "policy_id": policy_id if policy_id is not None else DEFAULT_POLICY_ID,
        "policy": _urlsafe_nopad(bytes(policy_bytes)),
    }
    _request(
        "POST",
        _endpoint(url, "attestation-policy"),
        auth_key,
        kbs_root_certs_pem,
        "application/json",
        data=json.dumps(body),
    )


def set_resource_policy(
    url: str,
    auth_key: str,
    policy_bytes: bytes,
    kbs_root_certs_pem: Iterable[str] = (),
) -> None:
    """Upload the resource policy."""
    body = {"policy": _urlsafe_nopad(bytes(policy_bytes))}
    _request(
        "POST",
        _endpoint(url, "resource-policy"),
        auth_key,
        kbs_root_certs_pem,
        "application/json",
        data=json.dumps(body),
    )


def set_resource(
    url: str,
    auth_key: str,
    resource_bytes: bytes,
    path: str,
    kbs_root_certs_pem: Iterable[str] = (),
) -> None:
    """Store a secret resource under ``path`` (``<top>/<middle>/<tail>``)."""
    _request(
        "POST",
        _endpoint(url, f"resource/{path}"),
        auth_key,
        kbs_root_certs_pem,
        "application/octet-stream",
        data=bytes(resource_bytes),
    )


def set_sample_rv(
    url: str,
    key: str,
    value: Any,
    auth_key: str,
    kbs_root_certs_pem: Iterable[str] = (),
) -> None:
    """Register one reference value through the unsigned sample provenance."""
    provenance = json.dumps({key: value}, separators=(",", ":"))
    message = {
        "payload": base64.b64encode(provenance.encode()).decode("ascii"),
        "type": "sample",
        "version": SAMPLE_MESSAGE_VERSION,
    }
    _request(
        "POST",
        _endpoint(url, "reference-value"),
        auth_key,
        kbs_root_certs_pem,
        "application/json",
        data=json.dumps(message, separators=(",", ":")),
    )


def get_rvs(
    url: str,
    auth_key: str,
    kbs_root_certs_pem: Iterable[str] = (),
) -> str:
    """Return the reference values known to the service, as sent by it."""
    response = _request(
        "GET",
        _endpoint(url, "reference-value"),
        auth_key,
        kbs_root_certs_pem,
        "application/json",
    )
    return response.text