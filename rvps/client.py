"""Client calls to a running reference value provider service."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator
from urllib.parse import urlsplit

import grpc

from rvps.api import (
    QUERY_METHOD,
    REGISTER_METHOD,
    QueryRequest,
    QueryResponse,
    RegisterRequest,
    RegisterResponse,
)
from rvps.errors import RvpsError

_CONNECT_TIMEOUT = 10.0
_CALL_TIMEOUT = 60.0
_DEFAULT_PORTS = {"http": 80, "https": 443}


def _target(address: str) -> tuple[str, bool]:
    """Return the channel target and whether TLS is used."""
    if "://" not in address:
        return address, False
    parts = urlsplit(address)
    if parts.scheme not in _DEFAULT_PORTS:
        raise RvpsError(f"unsupported address scheme in {address!r}")
    if not parts.hostname:
        raise RvpsError(f"missing host in {address!r}")
    try:
        port = parts.port or _DEFAULT_PORTS[parts.scheme]
    except ValueError as err:
        raise RvpsError(f"invalid port in {address!r}: {err}") from err
    host = f"[{parts.hostname}]" if ":" in parts.hostname else parts.hostname
    return f"{host}:{port}", parts.scheme == "https"


@contextmanager
def _connect(address: str) -> Iterator[grpc.Channel]:
    target, secure = _target(address)
    channel = (
        grpc.secure_channel(target, grpc.ssl_channel_credentials())
        if secure
        else grpc.insecure_channel(target)
    )
    with channel:
        try:
            grpc.channel_ready_future(channel).result(timeout=_CONNECT_TIMEOUT)
        except grpc.FutureTimeoutError as err:
            raise RvpsError(f"connect to {address}: timed out") from err
        yield channel


def _call(address, method, request, response_type):
    with _connect(address) as channel:
        stub = channel.unary_unary(
            method,
            request_serializer=type(request).encode,
            response_deserializer=response_type.decode,
        )
        try:
            return stub(request, timeout=_CALL_TIMEOUT)
        except grpc.RpcError as err:
            raise RvpsError(f"{err.code().name}: {err.details()}") from err


def register(address: str, message: str) -> None:
    """Send a provenance message to the service at ``address``."""
    _call(address, REGISTER_METHOD, RegisterRequest(message=message), RegisterResponse)


def query(address: str) -> str:
    """Return the service's reference values as a JSON object string."""
    response = _call(address, QUERY_METHOD, QueryRequest(), QueryResponse)
    return response.reference_value_results