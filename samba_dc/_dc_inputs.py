"""Collect and derive the domain settings for the bootstrap run.

Values resolve from CLI flags first, then ``DC_*`` environment variables,
then interactive prompts. Optional prompts keep their default on a blank
answer. The administrator password is read with echo disabled and must be
confirmed.
"""

from __future__ import annotations

import getpass
import logging
from collections import abc as cabc
from dataclasses import dataclass, field

from ._dc_errors import InputValidationError, PasswordMismatchError
from ._dc_network import DEFAULT_ADDRESS_NETWORK, discover_host_address
from ._input_resolution import InputResolution, resolve_text

logger = logging.getLogger(__name__)

DEFAULT_DNS_BACKEND = "SAMBA_INTERNAL"
DNS_BACKENDS = frozenset({"SAMBA_INTERNAL", "BIND9_FLATFILE", "BIND9_DLZ", "NONE"})

Prompt = cabc.Callable[[str], str]
AddressFinder = cabc.Callable[[str], str]


@dataclass(frozen=True, slots=True)
class DomainSettings:
    """Everything the renderer and provisioner need about the new domain."""

    fqdn: str
    hostname: str
    realm: str
    domain: str
    dns_backend: str
    admin_password: str = field(repr=False)
    host_address: str
    dns_forwarder: str | None = None

    @property
    def netbios_name(self) -> str:
        """NetBIOS name of this host (the upper-cased short hostname)."""

        return self.hostname.upper()

    @property
    def dns_domain(self) -> str:
        """DNS suffix of the domain in lower case."""

        return self.realm.lower()


@dataclass(frozen=True, slots=True)
class RawDomainInputs:
    """Domain inputs supplied on the command line."""

    fqdn: str | None = None
    domain: str | None = None
    dns_backend: str | None = None
    host_address: str | None = None
    address_network: str | None = None
    dns_forwarder: str | None = None
    interactive: bool = True


def derive_names(fqdn: str) -> tuple[str, str, str]:
    """Split *fqdn* into hostname, realm and NetBIOS domain.

    Examples
    --------
    >>> derive_names("dc1.example.com")
    ('dc1', 'EXAMPLE.COM', 'EXAMPLE')
    >>> derive_names("dc1.corp.internal.example.com")
    ('dc1', 'CORP.INTERNAL.EXAMPLE.COM', 'CORP')
    """

    labels = fqdn.strip().rstrip(".").split(".")
    if len(labels) < 2 or not all(labels):
        msg = f"FQDN {fqdn!r} must contain a hostname and a domain, e.g. dc1.example.com"
        raise InputValidationError(msg)
    hostname = labels[0]
    realm = ".".join(labels[1:]).upper()
    domain = labels[1].upper()
    return hostname, realm, domain


def normalise_dns_backend(value: str) -> str:
    """Upper-case *value* and check it names a backend Samba understands."""

    backend = value.strip().upper()
    if backend not in DNS_BACKENDS:
        choices = ", ".join(sorted(DNS_BACKENDS))
        msg = f"DNS backend {value!r} is not one of: {choices}"
        raise InputValidationError(msg)
    return backend


def prompt_fqdn(prompt: Prompt = input) -> str:
    """Ask for the FQDN until a non-blank answer is given."""

    while True:
        answer = prompt("Fully qualified domain name of this host (e.g. dc1.example.com): ").strip()
        if answer:
            return answer
        print("The FQDN is required.")


def prompt_with_default(label: str, default: str, prompt: Prompt = input) -> str:
    """Ask for an optional override, keeping *default* on a blank answer.

    Examples
    --------
    >>> prompt_with_default("Domain", "EXAMPLE", prompt=lambda _: "  ")
    'EXAMPLE'
    >>> prompt_with_default("Domain", "EXAMPLE", prompt=lambda _: "CORP2")
    'CORP2'
    """

    answer = prompt(f"{label} [{default}]: ").strip()
    return answer or default


def prompt_password(read_secret: Prompt = getpass.getpass) -> str:
    """Read the administrator password twice with echo disabled.

    An empty first entry is asked again; a confirmation that differs is an
    error and is not retried.
    """

    while True:
        password = read_secret("Administrator password: ")
        if password.strip():
            break
        print("The password cannot be empty.")
    confirmation = read_secret("Confirm administrator password: ")
    if confirmation != password:
        raise PasswordMismatchError("Passwords do not match")
    return password


def _resolve_fqdn(
    raw: RawDomainInputs,
    env: cabc.Mapping[str, str] | None,
    prompt: Prompt,
) -> str:
    fqdn = resolve_text(
        raw.fqdn,
        InputResolution(env_key="DC_FQDN", required=not raw.interactive),
        env=env,
    )
    return fqdn if fqdn is not None else prompt_fqdn(prompt)


def _resolve_optional(
    param_value: str | None,
    env_key: str,
    label: str,
    default: str,
    *,
    raw: RawDomainInputs,
    env: cabc.Mapping[str, str] | None,
    prompt: Prompt,
) -> str:
    value = resolve_text(param_value, InputResolution(env_key=env_key), env=env)
    if value is not None:
        return value.strip()
    if not raw.interactive:
        return default
    return prompt_with_default(label, default, prompt)


def _resolve_password(
    raw: RawDomainInputs,
    env: cabc.Mapping[str, str] | None,
    read_secret: Prompt,
) -> str:
    password = resolve_text(
        None,
        InputResolution(env_key="DC_ADMIN_PASSWORD", required=not raw.interactive),
        env=env,
    )
    if password is not None:
        logger.debug("Administrator password taken from DC_ADMIN_PASSWORD")
        return password
    return prompt_password(read_secret)


def collect_settings(
    raw: RawDomainInputs,
    *,
    env: cabc.Mapping[str, str] | None = None,
    prompt: Prompt = input,
    read_secret: Prompt = getpass.getpass,
    address_finder: AddressFinder = discover_host_address,
) -> DomainSettings:
    """Resolve every domain setting, prompting for what is still missing."""

    fqdn = _resolve_fqdn(raw, env, prompt)
    hostname, realm, derived_domain = derive_names(fqdn)

    domain = _resolve_optional(
        raw.domain,
        "DC_DOMAIN",
        "NetBIOS domain name",
        derived_domain,
        raw=raw,
        env=env,
        prompt=prompt,
    )
    if not domain:
        raise InputValidationError("The NetBIOS domain name cannot be empty")

    dns_backend = normalise_dns_backend(
        _resolve_optional(
            raw.dns_backend,
            "DC_DNS_BACKEND",
            "DNS backend",
            DEFAULT_DNS_BACKEND,
            raw=raw,
            env=env,
            prompt=prompt,
        )
    )

    admin_password = _resolve_password(raw, env, read_secret)

    host_address = resolve_text(
        raw.host_address, InputResolution(env_key="DC_HOST_ADDRESS"), env=env
    )
    if host_address is None:
        network = resolve_text(
            raw.address_network,
            InputResolution(env_key="DC_ADDRESS_NETWORK", default=DEFAULT_ADDRESS_NETWORK),
            env=env,
        )
        host_address = address_finder(str(network))

    dns_forwarder = resolve_text(
        raw.dns_forwarder, InputResolution(env_key="DC_DNS_FORWARDER"), env=env
    )

    return DomainSettings(
        fqdn=fqdn.strip().rstrip("."),
        hostname=hostname,
        realm=realm,
        domain=domain,
        dns_backend=dns_backend,
        admin_password=admin_password,
        host_address=host_address,
        dns_forwarder=dns_forwarder,
    )
