"""Command-line client for registering and querying reference values."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from rvps import client
from rvps.errors import RvpsError

DEFAULT_ADDR = "http://127.0.0.1:50003"

log = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rvps-tool", description="Client of the reference value provider service."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    register = commands.add_parser("register", help="Register reference values")
    register.add_argument(
        "-a", "--addr", default=DEFAULT_ADDR, help="address of the target service"
    )
    register.add_argument(
        "-p", "--path", required=True, help="path to the provenance json file"
    )

    query = commands.add_parser("query", help="Query reference values")
    query.add_argument(
        "-a", "--addr", default=DEFAULT_ADDR, help="address of the target service"
    )
    return parser.parse_args(argv)


def _register(addr: str, provenance_path: str) -> None:
    try:
        message = Path(provenance_path).read_text()
    except OSError as err:
        raise RvpsError(f"read provenance: {err}") from err
    client.register(addr, message)
    log.info("Register provenance succeeded.")


def _query(addr: str) -> None:
    rvs = client.query(addr)
    log.info("Get reference values succeeded:\n %s", rvs)


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    log.info("CoCo RVPS Client tool")
    try:
        if args.command == "register":
            _register(args.addr, args.path)
        else:
            _query(args.addr)
    except RvpsError as err:
        log.error("%s", err)
        return 1
    return 0