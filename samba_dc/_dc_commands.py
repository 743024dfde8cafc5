"""Command helpers for the host-side bootstrap steps."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from plumbum import FG, CommandNotFound, local
from plumbum.commands.processes import ProcessExecutionError, ProcessTimedOut

from ._dc_errors import CommandError

logger = logging.getLogger(__name__)

REDACTED = "********"

# plumbum logs the raw argv of every command at debug level, secrets included.
logging.getLogger("plumbum").setLevel(logging.INFO)


@dataclass(slots=True)
class CommandContext:
    """Execution options for :func:`run_command`."""

    env: dict[str, str] | None = None
    cwd: Path | None = None
    timeout: int | None = None
    stream: bool = False
    secrets: tuple[str, ...] = ()


def describe_command(command: str, args: Iterable[str], secrets: Iterable[str] = ()) -> str:
    """Return a printable command line with *secrets* masked.

    Examples
    --------
    >>> describe_command("samba-tool", ["--adminpass=hunter2"], secrets=["hunter2"])
    'samba-tool --adminpass=********'
    """

    hidden = [secret for secret in secrets if secret]
    parts = [command]
    for arg in args:
        for secret in hidden:
            arg = arg.replace(secret, REDACTED)
        parts.append(arg)
    return " ".join(parts)


@contextmanager
def _working_directory(path: Path | None) -> Iterator[None]:
    if path is None:
        yield
        return
    with local.cwd(path):
        yield


def _merged_env(env: dict[str, str] | None) -> dict[str, str] | None:
    if env is None:
        return None
    return {**os.environ, **env}


def run_command(
    command: str,
    *args: str,
    context: CommandContext | None = None,
) -> str:
    """Execute an external command and return its standard output.

    With ``context.stream`` set the command inherits the terminal and the
    return value is empty.

    Examples
    --------
    >>> run_command("printf", "hello")
    'hello'
    """

    ctx = context or CommandContext()
    display = describe_command(command, args, ctx.secrets)
    logger.debug("Running: %s", display)
    try:
        bound = local[command][list(args)]
    except CommandNotFound as exc:
        msg = f"Command {command!r} not found on PATH"
        raise CommandError(msg) from exc

    try:
        with _working_directory(ctx.cwd):
            if ctx.stream:
                runner = bound.with_env(**ctx.env) if ctx.env else bound
                runner & FG(timeout=ctx.timeout)
                return ""
            _, stdout, _ = bound.run(env=_merged_env(ctx.env), timeout=ctx.timeout)
    except ProcessTimedOut as exc:
        msg = f"Command {display!r} timed out after {ctx.timeout}s"
        raise CommandError(msg) from exc
    except ProcessExecutionError as exc:
        detail = (exc.stderr or "").strip()
        msg = f"Command {display!r} failed with exit code {exc.retcode}"
        if detail:
            msg = f"{msg}: {detail}"
        raise CommandError(msg) from exc
    except OSError as exc:
        msg = f"Command {display!r} could not be started: {exc}"
        raise CommandError(msg) from exc
    return stdout


def command_succeeds(command: str, *args: str) -> bool:
    """Return whether *command* exits zero, treating a missing binary as failure.

    Used for read-only probes such as ``rpm -q`` where a non-zero exit is an
    answer rather than an error.
    """

    try:
        bound = local[command][list(args)]
    except CommandNotFound:
        logger.debug("Probe command %s not found", command)
        return False
    try:
        retcode, _, _ = bound.run(retcode=None)
    except OSError:
        logger.debug("Probe command %s could not be started", command)
        return False
    return retcode == 0
