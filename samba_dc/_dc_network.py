"""Discover the address the domain controller should advertise."""

from __future__ import annotations

import ipaddress
import logging
import socket
from collections import abc as cabc
from collections.abc import Iterator
from typing import Any

import psutil

from ._dc_errors import AddressDiscoveryError, InputValidationError

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS_NETWORK = "192.168.0.0/16"


def iter_ipv4_addresses(
    interfaces: cabc.Mapping[str, cabc.Sequence[Any]] | None = None,
) -> Iterator[tuple[str, str]]:
    """Yield ``(interface, address)`` pairs for every IPv4 address on the host."""

    table = psutil.net_if_addrs() if interfaces is None else interfaces
    for name, addresses in table.items():
        for entry in addresses:
            if entry.family == socket.AF_INET:
                yield name, entry.address


def discover_host_address(
    network: str = DEFAULT_ADDRESS_NETWORK,
    interfaces: cabc.Mapping[str, cabc.Sequence[Any]] | None = None,
) -> str:
    """Return the first non-loopback IPv4 address inside *network*.

    Examples
    --------
    >>> from types import SimpleNamespace as NS
    >>> table = {"lo": [NS(family=socket.AF_INET, address="127.0.0.1")],
    ...          "eth0": [NS(family=socket.AF_INET, address="192.168.10.5")]}
    >>> discover_host_address("192.168.0.0/16", table)
    '192.168.10.5'
    """

    try:
        target = ipaddress.ip_network(network, strict=False)
    except ValueError as exc:
        msg = f"Invalid address network {network!r}: {exc}"
        raise InputValidationError(msg) from exc

    for name, address in iter_ipv4_addresses(interfaces):
        ip = ipaddress.ip_address(address)
        if ip.is_loopback or ip.is_link_local:
            continue
        if ip in target:
            logger.debug("Using %s from interface %s", address, name)
            return address

    msg = f"No IPv4 address on this host is inside {target}; pass --host-address"
    raise AddressDiscoveryError(msg)
