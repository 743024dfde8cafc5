"""Exception hierarchy for the Samba domain controller bootstrap.

Each pipeline phase raises its own error type so the CLI can report which
step halted the run. All of them derive from :class:`SambaDCError`.

Exceptions
----------
SambaDCError
PrivilegeError
InputValidationError
PasswordMismatchError
AddressDiscoveryError
CommandError
DependencyInstallError
BuildError
HostConfigurationError
ConfigWriteError
ServiceError
ProvisionError
"""

from __future__ import annotations


class SambaDCError(Exception):
    """Base error for domain controller bootstrap failures."""


class PrivilegeError(SambaDCError):
    """Raised when the bootstrap is not running as the superuser."""


class InputValidationError(SambaDCError):
    """Raised when a collected value is unusable.

    Examples
    --------
    >>> raise InputValidationError("FQDN must contain at least two labels")
    Traceback (most recent call last):
    ...
    InputValidationError: FQDN must contain at least two labels
    """


class PasswordMismatchError(InputValidationError):
    """Raised when the password confirmation differs from the first entry."""


class AddressDiscoveryError(SambaDCError):
    """Raised when no interface address matches the configured network."""


class CommandError(SambaDCError):
    """Raised when an external command exits non-zero or cannot be found."""


class DependencyInstallError(SambaDCError):
    """Raised when repository or package installation fails."""


class BuildError(SambaDCError):
    """Raised when downloading or compiling Samba fails."""


class HostConfigurationError(SambaDCError):
    """Raised when hostname, SELinux or firewall configuration fails."""


class ConfigWriteError(SambaDCError):
    """Raised when a configuration file or the hosts file cannot be written."""


class ServiceError(SambaDCError):
    """Raised when the systemd unit cannot be registered or started."""


class ProvisionError(SambaDCError):
    """Raised when ``samba-tool domain provision`` fails."""
