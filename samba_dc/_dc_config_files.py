"""Write rendered configuration files and the hosts entry to disk."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from ._dc_errors import ConfigWriteError
from ._dc_models import BootstrapOptions

logger = logging.getLogger(__name__)


def write_config_files(
    rendered: Mapping[Path, str],
    options: BootstrapOptions,
) -> list[Path]:
    """Write each rendered file below ``options.root``, replacing any existing file.

    Parameters
    ----------
    rendered : Mapping[Path, str]
        Absolute system paths mapped to file content.
    options : BootstrapOptions
        Supplies the root directory the system paths are mapped under.

    Returns
    -------
    list[Path]
        Paths actually written, in input order.

    Raises
    ------
    ConfigWriteError
        If a directory or file cannot be created.
    """

    written: list[Path] = []
    for system_path, content in rendered.items():
        if not system_path.is_absolute():
            msg = f"Refusing to write relative configuration path {system_path}"
            raise ValueError(msg)
        dest = options.target(system_path)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(content, encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to write {dest}: {exc}"
            raise ConfigWriteError(msg) from exc
        logger.debug("Wrote %s (%d bytes)", dest, len(content))
        written.append(dest)
    return written


def append_hosts_entry(hosts_file: Path, entry: str) -> bool:
    """Append *entry* to *hosts_file* unless the exact line is already there.

    Existing lines are never removed or rewritten. Returns whether the file
    changed. Filesystem failures raise :class:`ConfigWriteError`.

    Examples
    --------
    >>> import tempfile
    >>> hosts = Path(tempfile.mkdtemp()) / "hosts"
    >>> _ = hosts.write_text("127.0.0.1\\tlocalhost\\n")
    >>> append_hosts_entry(hosts, "192.168.1.10\\tdc1 dc1.example.com")
    True
    >>> append_hosts_entry(hosts, "192.168.1.10\\tdc1 dc1.example.com")
    False
    """

    try:
        existing = hosts_file.read_text(encoding="utf-8") if hosts_file.exists() else ""
        if entry in existing.splitlines():
            logger.info("%s already contains %r", hosts_file, entry)
            return False
        hosts_file.parent.mkdir(parents=True, exist_ok=True)
        with hosts_file.open("a", encoding="utf-8") as handle:
            if existing and not existing.endswith("\n"):
                handle.write("\n")
            handle.write(f"{entry}\n")
    except OSError as exc:
        msg = f"Failed to update {hosts_file}: {exc}"
        raise ConfigWriteError(msg) from exc
    return True
