"""Fixed templates for the files a Samba AD domain controller needs.

Rendering uses :meth:`string.Template.substitute`, so a missing value raises
``KeyError`` rather than leaving a placeholder in the output.
"""

from __future__ import annotations

from pathlib import Path
from string import Template

from ._dc_inputs import DomainSettings
from ._dc_models import DEFAULT_PREFIX

RESOLVED_CONF_PATH = Path("/etc/systemd/resolved.conf.d/custom.conf")
KRB5_CONF_PATH = Path("/etc/krb5.conf.d/samba-dc")
SMB_CONF_PATH = Path("/etc/samba/smb.conf")
SERVICE_UNIT_PATH = Path("/etc/systemd/system/samba.service")
HOSTS_PATH = Path("/etc/hosts")

RESOLVED_TEMPLATE = Template(
    """\
[Resolve]
DNSStubListener=no
Domains=${dns_domain}
DNS=${host_address}
"""
)

KRB5_TEMPLATE = Template(
    """\
[libdefaults]
\tdefault_realm = ${realm}
\tdns_lookup_realm = false
\tdns_lookup_kdc = true

[realms]
${realm} = {
\tkdc = ${fqdn}
\tadmin_server = ${fqdn}
\tdefault_domain = ${dns_domain}
}

[domain_realm]
\t${hostname} = ${realm}
\t.${dns_domain} = ${realm}
\t${dns_domain} = ${realm}
"""
)

SMB_CONF_TEMPLATE = Template(
    """\
# Global parameters
[global]
\tnetbios name = ${netbios_name}
\trealm = ${realm}
\tserver role = active directory domain controller
\tworkgroup = ${domain}
\tidmap_ldb:use rfc2307 = yes
${extra_global}
[sysvol]
\tpath = ${prefix}/var/locks/sysvol
\tread only = No

[netlogon]
\tpath = ${prefix}/var/locks/sysvol/${dns_domain}/scripts
\tread only = No
"""
)

SERVICE_UNIT_TEMPLATE = Template(
    """\
[Unit]
Description=Samba Active Directory Domain Controller
After=network.target remote-fs.target nss-lookup.target

[Service]
Type=forking
ExecStart=${prefix}/sbin/samba -D
PIDFile=${prefix}/var/run/samba.pid
ExecReload=/bin/kill -HUP $$MAINPID

[Install]
WantedBy=multi-user.target
"""
)


def render_resolved_conf(settings: DomainSettings) -> str:
    """Point systemd-resolved at the domain controller's own DNS server."""

    return RESOLVED_TEMPLATE.substitute(
        dns_domain=settings.dns_domain,
        host_address=settings.host_address,
    )


def render_krb5_conf(settings: DomainSettings) -> str:
    return KRB5_TEMPLATE.substitute(
        realm=settings.realm,
        fqdn=settings.fqdn,
        hostname=settings.hostname,
        dns_domain=settings.dns_domain,
    )


def render_smb_conf(settings: DomainSettings, prefix: Path = DEFAULT_PREFIX) -> str:
    """Render ``smb.conf`` for an AD DC installed under *prefix*.

    Examples
    --------
    >>> settings = DomainSettings("dc1.example.com", "dc1", "EXAMPLE.COM",
    ...     "EXAMPLE", "SAMBA_INTERNAL", "pw", "192.168.1.10")
    >>> "netbios name = DC1" in render_smb_conf(settings)
    True
    """

    extra_global = ""
    if settings.dns_forwarder:
        extra_global = f"\tdns forwarder = {settings.dns_forwarder}\n"
    return SMB_CONF_TEMPLATE.substitute(
        netbios_name=settings.netbios_name,
        realm=settings.realm,
        domain=settings.domain,
        dns_domain=settings.dns_domain,
        prefix=prefix,
        extra_global=extra_global,
    )


def render_service_unit(prefix: Path = DEFAULT_PREFIX) -> str:
    return SERVICE_UNIT_TEMPLATE.substitute(prefix=prefix)


def render_hosts_entry(settings: DomainSettings) -> str:
    """Return the ``/etc/hosts`` line for this host, without a newline.

    Examples
    --------
    >>> settings = DomainSettings("dc1.example.com", "dc1", "EXAMPLE.COM",
    ...     "EXAMPLE", "SAMBA_INTERNAL", "pw", "192.168.1.10")
    >>> render_hosts_entry(settings)
    '192.168.1.10\\tdc1 dc1.example.com'
    """

    return f"{settings.host_address}\t{settings.hostname} {settings.fqdn}"


def render_config_files(
    settings: DomainSettings,
    prefix: Path = DEFAULT_PREFIX,
) -> dict[Path, str]:
    """Render every configuration file keyed by its absolute system path."""

    return {
        RESOLVED_CONF_PATH: render_resolved_conf(settings),
        KRB5_CONF_PATH: render_krb5_conf(settings),
        SMB_CONF_PATH: render_smb_conf(settings, prefix),
        SERVICE_UNIT_PATH: render_service_unit(prefix),
    }
