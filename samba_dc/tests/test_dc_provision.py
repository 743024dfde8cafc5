"""Tests for service registration and domain provisioning."""

from __future__ import annotations

from pathlib import Path

import pytest

from samba_dc._dc_errors import ProvisionError, ServiceError
from samba_dc._dc_inputs import DomainSettings
from samba_dc._dc_models import BootstrapOptions
from samba_dc._dc_provision import (
    build_provision_args,
    provision_domain,
    register_service,
    start_service,
)


def test_build_provision_args(settings: DomainSettings) -> None:
    assert build_provision_args(settings) == [
        "domain",
        "provision",
        "--server-role=dc",
        "--use-rfc2307",
        "--dns-backend=SAMBA_INTERNAL",
        "--realm=EXAMPLE.COM",
        "--domain=EXAMPLE",
        "--adminpass=Sup3rSecret!",
    ]


def test_provision_domain_invokes_samba_tool_once(
    commands, settings: DomainSettings, tmp_path: Path
) -> None:
    options = BootstrapOptions(prefix=tmp_path)

    assert provision_domain(settings, options) is True

    assert len(commands.calls) == 1
    call = commands.calls[0]
    assert call.command == str(tmp_path / "bin" / "samba-tool")
    assert call.context is not None
    assert call.context.stream is True, "Provisioning output should not be captured"
    assert call.context.secrets == ("Sup3rSecret!",)


def test_provision_domain_skips_existing_database(
    commands, settings: DomainSettings, tmp_path: Path
) -> None:
    options = BootstrapOptions(prefix=tmp_path)
    options.sam_database.parent.mkdir(parents=True)
    options.sam_database.write_bytes(b"")

    assert provision_domain(settings, options) is False
    assert commands.calls == []


def test_provision_domain_failure(commands, settings: DomainSettings, tmp_path: Path) -> None:
    options = BootstrapOptions(prefix=tmp_path)
    commands.fail_on(str(options.samba_tool))

    with pytest.raises(ProvisionError, match="Provisioning EXAMPLE.COM failed"):
        provision_domain(settings, options)
    assert len(commands.calls) == 1, "Provisioning must not be retried"


def test_register_service(commands) -> None:
    register_service()
    assert commands.invoked("systemctl") == [
        ("daemon-reload",),
        ("enable", "samba"),
        ("restart", "systemd-resolved"),
    ]


def test_register_service_failure(commands) -> None:
    commands.fail_on("systemctl", "enable")
    with pytest.raises(ServiceError, match="Registering the samba service failed"):
        register_service()


def test_start_service_failure(commands) -> None:
    commands.fail_on("systemctl", "start")
    with pytest.raises(ServiceError, match="Starting"):
        start_service()
