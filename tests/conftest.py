"""
Shared pytest fixtures for tunnelprobe tests.
"""
from typing import Optional, Sequence

import pytest

from tunnelprobe.core.interfaces import CommandResult, CommandRunner, Launcher
from tunnelprobe.core.telemetry import get_telemetry


ED25519_MATERIAL = "AAAAC3NzaC1lZDI1NTE5AAAAIOMqqnkVzrm0SdG6UOoqKLsabgH5C9okWi0dh2l9GKJl"
RSA_MATERIAL = "AAAAB3NzaC1yc2EAAAADAQABAAABAQC7vbqajDhA"


class FakeRunner(CommandRunner):
    """CommandRunner returning a canned result and remembering its calls"""

    def __init__(self, result: Optional[CommandResult] = None):
        self.result = result or CommandResult(exit_code=0)
        self.calls: list[tuple[list[str], Optional[float]]] = []

    def run(self, argv: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        self.calls.append((list(argv), timeout))
        return self.result


class RecordingLauncher(Launcher):
    """Launcher that records argv instead of replacing the process"""

    def __init__(self):
        self.argv: Optional[list[str]] = None

    def exec(self, argv):
        self.argv = list(argv)


def keyscan_output(host: str = "example.com") -> str:
    return (
        f"# {host}:22 SSH-2.0-OpenSSH_9.0\n"
        f"{host} ssh-ed25519 {ED25519_MATERIAL}\n"
        f"# {host}:22 SSH-2.0-OpenSSH_9.0\n"
        f"{host} ssh-rsa {RSA_MATERIAL}\n"
    )


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    """Fresh telemetry and no environment overrides for every test"""
    monkeypatch.delenv("TUNNELPROBE_DEBUG", raising=False)
    monkeypatch.delenv("TUNNELPROBE_TIMEOUT", raising=False)
    get_telemetry().clear()
    yield
    get_telemetry().clear()


@pytest.fixture
def empty_runner() -> FakeRunner:
    """ssh-keyscan that finds nothing"""
    return FakeRunner(CommandResult(exit_code=1))


@pytest.fixture
def keys_runner() -> FakeRunner:
    """ssh-keyscan that returns an ed25519 and an rsa key"""
    return FakeRunner(CommandResult(exit_code=0, stdout=keyscan_output()))


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()
