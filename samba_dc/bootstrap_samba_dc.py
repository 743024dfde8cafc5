#!/usr/bin/env -S uv run python
# /// script
# requires-python = ">=3.10"
# dependencies = ["cyclopts>=2.9", "plumbum", "psutil"]
# ///
"""Bootstrap a single-host Samba Active Directory domain controller.

This script:
- checks it runs as root;
- collects the FQDN, NetBIOS domain, DNS backend and administrator password
  (flags, ``DC_*`` environment variables, or interactive prompts);
- installs build dependencies, then downloads, builds and installs Samba;
- sets the hostname, SELinux booleans and firewall ports;
- writes resolved, Kerberos, Samba and systemd configuration; and
- provisions the domain with ``samba-tool``.

Examples
--------
>>> sudo python samba_dc/bootstrap_samba_dc.py
>>> sudo python samba_dc/bootstrap_samba_dc.py --fqdn dc1.example.com --no-interactive
"""

from __future__ import annotations

import logging
import sys
from collections import abc as cabc
from dataclasses import replace
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from samba_dc._dc_bootstrap import bootstrap
from samba_dc._dc_errors import SambaDCError
from samba_dc._dc_inputs import RawDomainInputs, collect_settings
from samba_dc._dc_models import (
    DEFAULT_PREFIX,
    DEFAULT_SAMBA_VERSION,
    DEFAULT_WORK_DIR,
    BootstrapOptions,
)
from samba_dc._dc_system import ensure_root
from samba_dc._input_resolution import InputResolution, resolve_input

app = App(help="Bootstrap a single-host Samba AD domain controller.")
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
PACKAGE_LOGGER = "samba_dc"


def _to_path(value: str | Path | None, fallback: Path) -> Path:
    if value is None:
        return fallback
    return value if isinstance(value, Path) else Path(str(value))


def build_options(
    *,
    samba_version: str | None = None,
    prefix: Path | None = None,
    root: Path | None = None,
    work_dir: Path | None = None,
    build_jobs: int | None = None,
    skip_system: bool = False,
    env: cabc.Mapping[str, str] | None = None,
) -> BootstrapOptions:
    """Build bootstrap options from CLI parameters and environment."""

    resolved_version = resolve_input(
        samba_version,
        InputResolution(env_key="SAMBA_VERSION", default=DEFAULT_SAMBA_VERSION),
        env=env,
    )
    resolved_prefix = resolve_input(
        prefix,
        InputResolution(env_key="SAMBA_PREFIX", default=DEFAULT_PREFIX, as_path=True),
        env=env,
    )
    resolved_root = resolve_input(
        root,
        InputResolution(env_key="DC_ROOT", default=Path("/"), as_path=True),
        env=env,
    )
    resolved_work_dir = resolve_input(
        work_dir,
        InputResolution(env_key="SAMBA_WORK_DIR", default=DEFAULT_WORK_DIR, as_path=True),
        env=env,
    )
    raw_jobs = resolve_input(
        None if build_jobs is None else str(build_jobs),
        InputResolution(env_key="SAMBA_BUILD_JOBS"),
        env=env,
    )

    options = BootstrapOptions(
        samba_version=str(resolved_version),
        prefix=_to_path(resolved_prefix, DEFAULT_PREFIX),
        root=_to_path(resolved_root, Path("/")),
        work_dir=_to_path(resolved_work_dir, DEFAULT_WORK_DIR),
        skip_system=skip_system,
    )
    if raw_jobs is None:
        return options

    try:
        jobs = int(str(raw_jobs))
    except ValueError as exc:
        msg = f"SAMBA_BUILD_JOBS must be an integer, got: {raw_jobs!r}"
        raise SystemExit(msg) from exc
    if jobs < 1:
        raise SystemExit("SAMBA_BUILD_JOBS must be at least 1")
    return replace(options, build_jobs=jobs)


@app.default
def main(
    fqdn: Annotated[str | None, Parameter(help="Fully qualified host name, e.g. dc1.example.com.")] = None,
    domain: Annotated[str | None, Parameter(help="NetBIOS domain override.")] = None,
    dns_backend: Annotated[str | None, Parameter(help="DNS backend (default SAMBA_INTERNAL).")] = None,
    host_address: Annotated[str | None, Parameter(help="IPv4 address to advertise.")] = None,
    address_network: Annotated[str | None, Parameter(help="Network searched for the host address.")] = None,
    dns_forwarder: Annotated[str | None, Parameter(help="Upstream DNS forwarder for smb.conf.")] = None,
    samba_version: Annotated[str | None, Parameter(help="Samba release to build.")] = None,
    prefix: Annotated[Path | None, Parameter(help="Samba install prefix.")] = None,
    root: Annotated[Path | None, Parameter(help="Directory configuration files are written under.")] = None,
    work_dir: Annotated[Path | None, Parameter(help="Directory for the Samba tarball and source tree.")] = None,
    build_jobs: Annotated[int | None, Parameter(help="Parallel make jobs.")] = None,
    skip_system: Annotated[bool, Parameter(help="Skip package, build, SELinux and firewall steps.")] = False,
    interactive: Annotated[bool, Parameter(help="Prompt for values not given as flags.")] = True,
    verbose: Annotated[bool, Parameter(help="Log every command that runs.")] = False,
) -> int:
    """Entry point for command-line execution."""

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    if verbose:
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)

    try:
        ensure_root()
    except SambaDCError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    options = build_options(
        samba_version=samba_version,
        prefix=prefix,
        root=root,
        work_dir=work_dir,
        build_jobs=build_jobs,
        skip_system=skip_system,
    )
    raw = RawDomainInputs(
        fqdn=fqdn,
        domain=domain,
        dns_backend=dns_backend,
        host_address=host_address,
        address_network=address_network,
        dns_forwarder=dns_forwarder,
        interactive=interactive,
    )

    try:
        settings = collect_settings(raw)
        result = bootstrap(settings, options)
    except SambaDCError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.debug("Wrote %d configuration files", len(result.written_files))
    print(f"\nDomain controller {settings.fqdn} bootstrap complete.")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(app())
