"""Register the Samba unit and provision the domain."""

from __future__ import annotations

from ._dc_commands import CommandContext, run_command
from ._dc_errors import CommandError, ProvisionError, ServiceError
from ._dc_inputs import DomainSettings
from ._dc_models import BootstrapOptions

SERVICE_NAME = "samba"


def build_provision_args(settings: DomainSettings) -> list[str]:
    """Return the ``samba-tool`` arguments that provision *settings*.

    Examples
    --------
    >>> settings = DomainSettings("dc1.example.com", "dc1", "EXAMPLE.COM",
    ...     "EXAMPLE", "SAMBA_INTERNAL", "Sup3rSecret!", "192.168.1.10")
    >>> build_provision_args(settings)[-4:]
    ['--dns-backend=SAMBA_INTERNAL', '--realm=EXAMPLE.COM', '--domain=EXAMPLE', '--adminpass=Sup3rSecret!']
    """

    return [
        "domain",
        "provision",
        "--server-role=dc",
        "--use-rfc2307",
        f"--dns-backend={settings.dns_backend}",
        f"--realm={settings.realm}",
        f"--domain={settings.domain}",
        f"--adminpass={settings.admin_password}",
    ]


def register_service() -> None:
    """Load the unit file, enable it and restart systemd-resolved."""

    try:
        run_command("systemctl", "daemon-reload")
        run_command("systemctl", "enable", SERVICE_NAME)
        run_command("systemctl", "restart", "systemd-resolved")
    except CommandError as exc:
        msg = f"Registering the {SERVICE_NAME} service failed: {exc}"
        raise ServiceError(msg) from exc


def start_service() -> None:
    try:
        run_command("systemctl", "start", SERVICE_NAME)
    except CommandError as exc:
        msg = f"Starting the {SERVICE_NAME} service failed: {exc}"
        raise ServiceError(msg) from exc


def provision_domain(settings: DomainSettings, options: BootstrapOptions) -> bool:
    """Run ``samba-tool domain provision`` once.

    Output goes straight to the terminal. There is no retry and nothing is
    rolled back on failure. An existing ``sam.ldb`` means the domain was
    already provisioned and the call is skipped.

    Returns
    -------
    bool
        ``True`` if provisioning ran, ``False`` if it was skipped.
    """

    if options.sam_database.exists():
        print(f"Domain database {options.sam_database} exists; skipping provisioning")
        return False
    try:
        run_command(
            str(options.samba_tool),
            *build_provision_args(settings),
            context=CommandContext(stream=True, secrets=(settings.admin_password,)),
        )
    except CommandError as exc:
        msg = f"Provisioning {settings.realm} failed: {exc}"
        raise ProvisionError(msg) from exc
    return True
