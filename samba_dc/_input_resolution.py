"""Shared helpers for resolving CLI, environment and default inputs."""

from __future__ import annotations

import os
from collections import abc as cabc
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class InputResolution:
    """Where to look for a value that was not given on the command line."""

    env_key: str
    default: str | Path | None = None
    required: bool = False
    as_path: bool = False


def resolve_input(
    param_value: str | Path | None,
    resolution: InputResolution,
    env: cabc.Mapping[str, str] | None = None,
) -> str | Path | None:
    """Resolve input from parameter, environment variable, or default.

    Blank environment values count as unset so an exported but empty
    variable falls through to the default.

    Examples
    --------
    >>> resolve_input(None, InputResolution("SAMBA_VERSION", default="4.19.5"), env={})
    '4.19.5'
    >>> resolve_input(None, InputResolution("DC_ROOT", as_path=True), env={"DC_ROOT": "/mnt"})
    PosixPath('/mnt')
    """

    if param_value is not None:
        return param_value

    env_value = (os.environ if env is None else env).get(resolution.env_key)
    if env_value is not None and env_value.strip():
        return Path(env_value) if resolution.as_path else env_value.strip()

    if resolution.required:
        msg = f"{resolution.env_key} is required"
        raise SystemExit(msg)

    return resolution.default


def resolve_text(
    param_value: str | None,
    resolution: InputResolution,
    env: cabc.Mapping[str, str] | None = None,
) -> str | None:
    """Resolve a plain string input, returning ``None`` when nothing is set."""

    value = resolve_input(param_value, resolution, env=env)
    return None if value is None else str(value)
