"""gRPC front end of the reference value provider service."""

from __future__ import annotations

import json
import logging
import threading
from concurrent import futures

import grpc

from rvps.api import (
    SERVICE_NAME,
    QueryRequest,
    QueryResponse,
    RegisterRequest,
    RegisterResponse,
)
from rvps.config import Config
from rvps.core import Rvps
from rvps.errors import RvpsError

_WORKERS = 10

log = logging.getLogger(__name__)


class RvpsServer:
    """Serves register and query calls against one service instance."""

    def __init__(self, rvps: Rvps) -> None:
        self._rvps = rvps
        self._lock = threading.Lock()

    def query_reference_value(
        self, request: QueryRequest, context: grpc.ServicerContext
    ) -> QueryResponse:
        with self._lock:
            try:
                digests = self._rvps.get_digests()
            except RvpsError as err:
                context.abort(grpc.StatusCode.ABORTED, f"Query reference value: {err}")
        try:
            results = json.dumps(digests)
        except (TypeError, ValueError) as err:
            context.abort(grpc.StatusCode.ABORTED, f"Serde reference value: {err}")
        log.info("Reference values: %s", results)
        return QueryResponse(reference_value_results=results)

    def register_reference_value(
        self, request: RegisterRequest, context: grpc.ServicerContext
    ) -> RegisterResponse:
        log.debug("registry reference value: %s", request.message)
        with self._lock:
            try:
                self._rvps.verify_and_extract(request.message)
            except RvpsError as err:
                context.abort(grpc.StatusCode.ABORTED, f"Register reference value: {err}")
        return RegisterResponse()


def _handler(servicer: RvpsServer) -> grpc.GenericRpcHandler:
    return grpc.method_handlers_generic_handler(
        SERVICE_NAME,
        {
            "QueryReferenceValue": grpc.unary_unary_rpc_method_handler(
                servicer.query_reference_value,
                request_deserializer=QueryRequest.decode,
                response_serializer=QueryResponse.encode,
            ),
            "RegisterReferenceValue": grpc.unary_unary_rpc_method_handler(
                servicer.register_reference_value,
                request_deserializer=RegisterRequest.decode,
                response_serializer=RegisterResponse.encode,
            ),
        },
    )


def build_server(address: str, config: Config) -> tuple[grpc.Server, int]:
    """Create a server bound to ``address``; return it with the bound port."""
    servicer = RvpsServer(Rvps(config))
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=_WORKERS))
    server.add_generic_rpc_handlers((_handler(servicer),))
    try:
        port = server.add_insecure_port(address)
    except RuntimeError as err:
        raise RvpsError(f"gRPC error: bind {address}: {err}") from err
    if port == 0:
        raise RvpsError(f"gRPC error: cannot bind {address}")
    return server, port


def start(address: str, config: Config) -> None:
    """Serve on ``address`` until the server terminates."""
    server, port = build_server(address, config)
    server.start()
    log.info("RVPS listening on port %d", port)
    try:
        server.wait_for_termination()
    finally:
        server.stop(None)