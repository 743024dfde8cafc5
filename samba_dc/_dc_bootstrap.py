"""Bootstrap orchestration for a single-host Samba AD domain controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ._dc_config_files import append_hosts_entry, write_config_files
from ._dc_inputs import DomainSettings
from ._dc_models import BootstrapOptions
from ._dc_provision import provision_domain, register_service, start_service
from ._dc_system import prepare_system
from ._dc_templates import HOSTS_PATH, render_config_files, render_hosts_entry

logger = logging.getLogger(__name__)

__all__ = [
    "BootstrapResult",
    "bootstrap",
    "write_configuration",
]


@dataclass(slots=True)
class BootstrapResult:
    """What a bootstrap run changed on the host."""

    written_files: list[Path] = field(default_factory=list)
    hosts_updated: bool = False
    provisioned: bool = False


def write_configuration(
    settings: DomainSettings,
    options: BootstrapOptions,
    result: BootstrapResult,
) -> None:
    """Render the configuration files and add this host to ``/etc/hosts``."""

    print("\n--- Writing configuration files ---")
    rendered = render_config_files(settings, options.prefix)
    result.written_files = write_config_files(rendered, options)
    for path in result.written_files:
        print(f"  {path}")

    hosts_file = options.target(HOSTS_PATH)
    result.hosts_updated = append_hosts_entry(hosts_file, render_hosts_entry(settings))
    if result.hosts_updated:
        print(f"  {hosts_file} (appended)")


def bootstrap(settings: DomainSettings, options: BootstrapOptions) -> BootstrapResult:
    """Execute the bootstrap pipeline and report what changed.

    Any phase failure propagates as a :class:`~samba_dc._dc_errors.SambaDCError`
    subclass and stops the run.
    """

    print(f"Bootstrapping domain controller {settings.fqdn}...")
    print(f"  Realm: {settings.realm}")
    print(f"  Domain: {settings.domain}")
    print(f"  DNS backend: {settings.dns_backend}")
    print(f"  Address: {settings.host_address}")

    result = BootstrapResult()
    if options.skip_system:
        logger.info("Skipping host preparation")
    else:
        prepare_system(settings, options)

    write_configuration(settings, options, result)

    print("\n--- Registering samba service ---")
    register_service()

    print("\n--- Provisioning domain ---")
    result.provisioned = provision_domain(settings, options)

    print("\n--- Starting samba service ---")
    start_service()
    return result
