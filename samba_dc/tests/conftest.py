from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from samba_dc._dc_commands import CommandContext  # noqa: E402
from samba_dc._dc_errors import CommandError  # noqa: E402
from samba_dc._dc_inputs import DomainSettings  # noqa: E402


@dataclass
class RecordedCommand:
    command: str
    args: tuple[str, ...]
    context: CommandContext | None


@dataclass
class CommandRecorder:
    """Stand-in for ``run_command``/``command_succeeds`` that records calls."""

    calls: list[RecordedCommand] = field(default_factory=list)
    probes: list[tuple[str, ...]] = field(default_factory=list)
    outputs: dict[str, str] = field(default_factory=dict)
    handlers: dict[str, Callable[[tuple[str, ...]], None]] = field(default_factory=dict)
    failures: list[tuple[str, ...]] = field(default_factory=list)
    probe_results: dict[str, bool] = field(default_factory=dict)

    def fail_on(self, command: str, *prefix: str) -> None:
        self.failures.append((command, *prefix))

    def run(self, command: str, *args: str, context: CommandContext | None = None) -> str:
        self.calls.append(RecordedCommand(command, tuple(args), context))
        invocation = (command, *args)
        for failure in self.failures:
            if invocation[: len(failure)] == failure:
                msg = f"Command {command!r} failed with exit code 1"
                raise CommandError(msg)
        if command in self.handlers:
            self.handlers[command](tuple(args))
        return self.outputs.get(command, "")

    def succeeds(self, command: str, *args: str) -> bool:
        self.probes.append((command, *args))
        return self.probe_results.get(command, False)

    def invoked(self, command: str) -> list[tuple[str, ...]]:
        return [call.args for call in self.calls if call.command == command]


@pytest.fixture
def commands(monkeypatch: pytest.MonkeyPatch) -> CommandRecorder:
    recorder = CommandRecorder()
    for module in ("samba_dc._dc_system", "samba_dc._dc_provision"):
        monkeypatch.setattr(f"{module}.run_command", recorder.run)
    monkeypatch.setattr("samba_dc._dc_system.command_succeeds", recorder.succeeds)
    return recorder


@pytest.fixture
def settings() -> DomainSettings:
    return DomainSettings(
        fqdn="dc1.example.com",
        hostname="dc1",
        realm="EXAMPLE.COM",
        domain="EXAMPLE",
        dns_backend="SAMBA_INTERNAL",
        admin_password="Sup3rSecret!",
        host_address="192.168.1.10",
    )
