"""Tests for the plumbum-backed command helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from samba_dc._dc_commands import (
    REDACTED,
    CommandContext,
    command_succeeds,
    describe_command,
    run_command,
)
from samba_dc._dc_errors import CommandError


def test_run_command_returns_stdout() -> None:
    assert run_command("printf", "hello") == "hello"


def test_run_command_passes_environment() -> None:
    output = run_command(
        "sh",
        "-c",
        'printf %s "$DC_TEST_VALUE"',
        context=CommandContext(env={"DC_TEST_VALUE": "from-env"}),
    )
    assert output == "from-env"


def test_run_command_uses_working_directory(tmp_path: Path) -> None:
    output = run_command("pwd", context=CommandContext(cwd=tmp_path))
    assert Path(output.strip()).resolve() == tmp_path.resolve()


def test_run_command_raises_on_failure() -> None:
    with pytest.raises(CommandError, match="exit code 3: boom"):
        run_command("sh", "-c", "echo boom >&2; exit 3")


def test_run_command_failure_redacts_secrets() -> None:
    with pytest.raises(CommandError) as excinfo:
        run_command(
            "sh",
            "-c",
            "exit 1",
            "--adminpass=Sup3rSecret!",
            context=CommandContext(secrets=("Sup3rSecret!",)),
        )
    assert "Sup3rSecret!" not in str(excinfo.value)
    assert REDACTED in str(excinfo.value)


def test_run_command_missing_binary() -> None:
    with pytest.raises(CommandError, match="not found"):
        run_command("definitely-not-a-real-command-xyz")


def test_describe_command_masks_every_secret() -> None:
    line = describe_command("tool", ["--a=one", "--b=two"], secrets=("one", "two", ""))
    assert line == f"tool --a={REDACTED} --b={REDACTED}"


def test_command_succeeds() -> None:
    assert command_succeeds("true") is True
    assert command_succeeds("false") is False
    assert command_succeeds("definitely-not-a-real-command-xyz") is False


@pytest.mark.parametrize("stream", [False, True])
def test_debug_logging_never_shows_secrets(caplog: pytest.LogCaptureFixture, stream: bool) -> None:
    caplog.set_level(logging.DEBUG)

    run_command(
        "true",
        "--adminpass=Sup3rSecret!",
        context=CommandContext(stream=stream, secrets=("Sup3rSecret!",)),
    )

    leaked = [r for r in caplog.records if "Sup3rSecret!" in r.getMessage()]
    assert leaked == [], f"secret logged by {[r.name for r in leaked]}"
    assert f"Running: true --adminpass={REDACTED}" in caplog.messages
