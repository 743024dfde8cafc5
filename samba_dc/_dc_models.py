"""Data models shared by the bootstrap phases."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_SAMBA_VERSION = "4.19.5"
DEFAULT_PREFIX = Path("/usr/local/samba")
DEFAULT_WORK_DIR = Path("/usr/local/src")
DOWNLOAD_BASE_URL = "https://download.samba.org/pub/samba/stable"


def _default_build_jobs() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True, slots=True)
class BootstrapOptions:
    """How and where Samba is built, installed and configured."""

    samba_version: str = DEFAULT_SAMBA_VERSION
    prefix: Path = DEFAULT_PREFIX
    root: Path = Path("/")
    work_dir: Path = DEFAULT_WORK_DIR
    build_jobs: int = field(default_factory=_default_build_jobs)
    skip_system: bool = False

    @property
    def tarball_name(self) -> str:
        """File name of the release tarball."""

        return f"samba-{self.samba_version}.tar.gz"

    @property
    def download_url(self) -> str:
        """Release tarball URL on download.samba.org.

        Examples
        --------
        >>> BootstrapOptions(samba_version="4.19.5").download_url
        'https://download.samba.org/pub/samba/stable/samba-4.19.5.tar.gz'
        """

        return f"{DOWNLOAD_BASE_URL}/{self.tarball_name}"

    @property
    def tarball_path(self) -> Path:
        return self.work_dir / self.tarball_name

    @property
    def source_dir(self) -> Path:
        return self.work_dir / f"samba-{self.samba_version}"

    @property
    def samba_tool(self) -> Path:
        return self.prefix / "bin" / "samba-tool"

    @property
    def sam_database(self) -> Path:
        """Database file that exists once the domain has been provisioned."""

        return self.prefix / "private" / "sam.ldb"

    def target(self, path: Path) -> Path:
        """Map an absolute system path below :attr:`root`.

        Examples
        --------
        >>> BootstrapOptions(root=Path("/mnt/sysroot")).target(Path("/etc/hosts"))
        PosixPath('/mnt/sysroot/etc/hosts')
        """

        return self.root / path.relative_to("/")
