"""Prepare the host: packages, Samba build, hostname, SELinux and firewall.

Every step checks its commands. A failing command raises the error type of
its phase and the remaining steps do not run. Steps whose result is already
present on the host (installed packages, downloaded tarball, installed
``samba-tool``) are skipped so a failed run can simply be repeated.
"""

from __future__ import annotations

import logging
import os
import platform
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from ._dc_commands import CommandContext, command_succeeds, run_command
from ._dc_errors import (
    BuildError,
    CommandError,
    DependencyInstallError,
    HostConfigurationError,
    PrivilegeError,
    SambaDCError,
)
from ._dc_inputs import DomainSettings
from ._dc_models import BootstrapOptions

logger = logging.getLogger(__name__)

EPEL_RELEASE_URL = "https://dl.fedoraproject.org/pub/epel/epel-release-latest-9.noarch.rpm"

BUILD_PACKAGES: tuple[str, ...] = (
    "avahi-devel",
    "bison",
    "cups-devel",
    "curl",
    "dbus-devel",
    "docbook-style-xsl",
    "flex",
    "gcc",
    "gdb",
    "gnutls-devel",
    "gpgme-devel",
    "jansson-devel",
    "keyutils-libs-devel",
    "krb5-workstation",
    "libacl-devel",
    "libaio-devel",
    "libarchive-devel",
    "libattr-devel",
    "libblkid-devel",
    "libicu-devel",
    "libnsl2-devel",
    "libtasn1-devel",
    "libtasn1-tools",
    "libtirpc-devel",
    "libxml2-devel",
    "libxslt",
    "lmdb-devel",
    "make",
    "openldap-devel",
    "pam-devel",
    "perl",
    "perl-ExtUtils-MakeMaker",
    "perl-Parse-Yapp",
    "perl-Test-Base",
    "pkgconfig",
    "policycoreutils-python-utils",
    "popt-devel",
    "python3-cryptography",
    "python3-dbus",
    "python3-devel",
    "python3-gpg",
    "python3-pip",
    "readline-devel",
    "rpcgen",
    "systemd-devel",
    "tar",
    "which",
    "zlib-devel",
)

PYTHON_MODULES: tuple[str, ...] = ("dnspython", "markdown", "pyasn1")

SELINUX_BOOLEANS: tuple[str, ...] = (
    "samba_create_home_dirs",
    "samba_domain_controller",
    "samba_enable_home_dirs",
    "samba_portmapper",
    "use_samba_home_dirs",
)

AD_DC_PORTS: tuple[str, ...] = (
    "53/tcp",
    "53/udp",
    "88/tcp",
    "88/udp",
    "123/udp",
    "135/tcp",
    "137-138/udp",
    "139/tcp",
    "389/tcp",
    "389/udp",
    "445/tcp",
    "464/tcp",
    "464/udp",
    "636/tcp",
    "3268-3269/tcp",
    "49152-65535/tcp",
)

STREAM = CommandContext(stream=True)


def ensure_root(geteuid: Callable[[], int] = os.geteuid) -> None:
    """Raise :class:`PrivilegeError` unless running as the superuser."""

    if geteuid() != 0:
        raise PrivilegeError("This script must be run as root")


@contextmanager
def _step(error_type: type[SambaDCError], description: str) -> Iterator[None]:
    """Announce a step and convert command failures to *error_type*."""

    print(f"\n--- {description} ---")
    try:
        yield
    except CommandError as exc:
        msg = f"{description} failed: {exc}"
        raise error_type(msg) from exc


def enable_repositories(arch: str | None = None) -> None:
    """Enable CodeReady Builder and install the EPEL release package."""

    machine = arch or platform.machine()
    run_command(
        "subscription-manager",
        "repos",
        "--enable",
        f"codeready-builder-for-rhel-9-{machine}-rpms",
        context=STREAM,
    )
    if command_succeeds("rpm", "-q", "epel-release"):
        logger.info("epel-release already installed")
        return
    run_command("dnf", "install", "-y", EPEL_RELEASE_URL, context=STREAM)


def install_packages(packages: tuple[str, ...] = BUILD_PACKAGES) -> bool:
    """Install *packages* with dnf unless rpm already provides them all.

    The probe asks ``rpm -q --whatprovides`` because some names in the list,
    such as ``pkgconfig``, are capabilities rather than package names.
    Returns whether dnf was run.
    """

    if command_succeeds("rpm", "-q", "--whatprovides", *packages):
        print("All build dependencies already installed")
        return False
    run_command("dnf", "install", "-y", *packages, context=STREAM)
    return True


def install_python_modules(modules: tuple[str, ...] = PYTHON_MODULES) -> None:
    run_command("pip3", "install", *modules, context=STREAM)


def download_source(options: BootstrapOptions) -> bool:
    """Fetch the release tarball into ``options.work_dir`` if it is missing."""

    if options.tarball_path.exists():
        print(f"Using existing {options.tarball_path}")
        return False
    options.work_dir.mkdir(parents=True, exist_ok=True)
    partial = options.tarball_path.with_name(options.tarball_name + ".part")
    run_command(
        "curl",
        "--fail",
        "--location",
        "--retry",
        "3",
        "--output",
        str(partial),
        options.download_url,
        context=STREAM,
    )
    partial.replace(options.tarball_path)
    return True


def extract_source(options: BootstrapOptions) -> bool:
    if options.source_dir.is_dir():
        print(f"Using existing source tree {options.source_dir}")
        return False
    run_command(
        "tar",
        "-xzf",
        str(options.tarball_path),
        "-C",
        str(options.work_dir),
        context=STREAM,
    )
    return True


def build_and_install(options: BootstrapOptions) -> bool:
    """Configure, compile and install Samba under ``options.prefix``.

    Skipped when ``samba-tool`` is already installed there. Returns whether a
    build ran.
    """

    if options.samba_tool.exists():
        print(f"Samba already installed at {options.prefix}")
        return False
    in_source = CommandContext(cwd=options.source_dir, stream=True)
    run_command(
        str(options.source_dir / "configure"),
        f"--prefix={options.prefix}",
        "--sysconfdir=/etc/samba",
        context=in_source,
    )
    run_command("make", f"-j{options.build_jobs}", context=in_source)
    run_command("make", "install", context=in_source)
    return True


def set_hostname(fqdn: str) -> None:
    run_command("hostnamectl", "set-hostname", fqdn)


def configure_selinux(options: BootstrapOptions) -> bool:
    """Turn on the Samba DC booleans and relabel the install prefix.

    Returns ``False`` without changes when SELinux is disabled or absent.
    """

    try:
        mode = run_command("getenforce").strip()
    except CommandError:
        logger.info("getenforce unavailable; skipping SELinux configuration")
        return False
    if mode == "Disabled":
        print("SELinux disabled; skipping")
        return False
    run_command("setsebool", "-P", *(f"{name}=on" for name in SELINUX_BOOLEANS))
    run_command("restorecon", "-R", str(options.prefix))
    return True


def open_firewall_ports(ports: tuple[str, ...] = AD_DC_PORTS) -> None:
    """Permanently open the AD DC ports in firewalld and reload it.

    ``--add-port`` leaves ports that are already open untouched.
    """

    run_command(
        "firewall-cmd",
        "--permanent",
        *(f"--add-port={port}" for port in ports),
    )
    run_command("firewall-cmd", "--reload")


def prepare_system(settings: DomainSettings, options: BootstrapOptions) -> None:
    """Run every host preparation step in order."""

    with _step(DependencyInstallError, "Enabling repositories"):
        enable_repositories()
    with _step(DependencyInstallError, "Installing build dependencies"):
        install_packages()
    with _step(DependencyInstallError, "Installing Python modules"):
        install_python_modules()
    with _step(BuildError, f"Downloading Samba {options.samba_version}"):
        download_source(options)
    with _step(BuildError, "Extracting Samba source"):
        extract_source(options)
    with _step(BuildError, "Building and installing Samba"):
        build_and_install(options)
    with _step(HostConfigurationError, f"Setting hostname to {settings.fqdn}"):
        set_hostname(settings.fqdn)
    with _step(HostConfigurationError, "Configuring SELinux"):
        configure_selinux(options)
    with _step(HostConfigurationError, "Opening firewall ports"):
        open_firewall_ports()
