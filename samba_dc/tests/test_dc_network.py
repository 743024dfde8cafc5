"""Tests for host address discovery."""

from __future__ import annotations

import socket
from types import SimpleNamespace

import pytest

from samba_dc._dc_errors import AddressDiscoveryError, InputValidationError
from samba_dc._dc_network import discover_host_address, iter_ipv4_addresses


def _addr(address: str, family: int = socket.AF_INET) -> SimpleNamespace:
    return SimpleNamespace(family=family, address=address)


def test_iter_ipv4_addresses_skips_other_families() -> None:
    table = {
        "eth0": [_addr("fe80::1", socket.AF_INET6), _addr("192.168.1.10")],
    }
    assert list(iter_ipv4_addresses(table)) == [("eth0", "192.168.1.10")]


def test_discover_host_address_matches_private_range() -> None:
    table = {
        "lo": [_addr("127.0.0.1")],
        "eth0": [_addr("10.0.0.192")],
        "eth1": [_addr("192.168.56.20")],
    }
    assert discover_host_address("192.168.0.0/16", table) == "192.168.56.20"


def test_discover_host_address_does_not_match_substring() -> None:
    table = {"eth0": [_addr("10.0.0.192"), _addr("172.19.2.1")]}
    with pytest.raises(AddressDiscoveryError, match="192.168.0.0/16"):
        discover_host_address("192.168.0.0/16", table)


def test_discover_host_address_custom_network() -> None:
    table = {"eth0": [_addr("10.20.30.40")]}
    assert discover_host_address("10.0.0.0/8", table) == "10.20.30.40"


def test_discover_host_address_skips_link_local() -> None:
    table = {"eth0": [_addr("169.254.3.4")]}
    with pytest.raises(AddressDiscoveryError):
        discover_host_address("169.254.0.0/16", table)


def test_discover_host_address_rejects_bad_network() -> None:
    with pytest.raises(InputValidationError, match="Invalid address network"):
        discover_host_address("not-a-network", {})


def test_discover_host_address_reads_psutil(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "samba_dc._dc_network.psutil.net_if_addrs",
        lambda: {"ens3": [_addr("192.168.122.5")]},
    )
    assert discover_host_address() == "192.168.122.5"
