"""Command that runs the reference value provider service."""

from __future__ import annotations

import argparse
import ipaddress
import logging
import re
from typing import Sequence

from rvps.config import Config
from rvps.errors import RvpsError
from rvps.server import start

DEFAULT_CONFIG_PATH = "/etc/rvps.json"
DEFAULT_ADDRESS = "127.0.0.1:50003"

log = logging.getLogger(__name__)


def _parse_socket_address(text: str) -> str:
    """Validate an ``ip:port`` or ``[ipv6]:port`` address and return it normalized."""
    host, sep, port_text = text.rpartition(":")
    if not sep or not host or not re.fullmatch(r"[0-9]+", port_text):
        raise RvpsError(f"parse socket addr failed: invalid socket address {text!r}")
    port = int(port_text)
    if port > 65535:
        raise RvpsError(f"parse socket addr failed: invalid port in {text!r}")
    bracketed = host.startswith("[") and host.endswith("]")
    if bracketed:
        host = host[1:-1]
    try:
        ip = ipaddress.ip_address(host)
    except ValueError as err:
        raise RvpsError(f"parse socket addr failed: {err}") from err
    if (ip.version == 6) != bracketed:
        raise RvpsError(f"parse socket addr failed: invalid socket address {text!r}")
    return f"[{ip}]:{port}" if ip.version == 6 else f"{ip}:{port}"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rvps", description="Reference value provider service."
    )
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="path to the configuration file",
    )
    parser.add_argument(
        "-a",
        "--address",
        default=DEFAULT_ADDRESS,
        help="address the server listens on",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    log.info("CoCo RVPS")
    try:
        config = Config.from_file(args.config)
    except RvpsError as err:
        log.warning(
            "fail to read config from %s. Error: %s. Using default configuration.",
            args.config,
            err,
        )
        config = Config()
    log.info("Listen socket: %s", args.address)
    try:
        address = _parse_socket_address(args.address)
        start(address, config)
    except RvpsError as err:
        log.error("%s", err)
        return 1
    return 0