"""Tests for ConnectivityProber and the process handoff."""

import os

import pytest

from tunnelprobe.core.exceptions import HandoffError, NoSuitableMethodError
from tunnelprobe.core.telemetry import Telemetry
from tunnelprobe.domain.probe.cascade import ProbeSet
from tunnelprobe.domain.probe.handoff import ExecLauncher
from tunnelprobe.domain.probe.keyscan import probe_host_key
from tunnelprobe.domain.probe.models import (
    ConnectionTarget,
    ProbeConfig,
    ProbeOptions,
    ProbeResult,
    RelayDescriptor,
    Strategy,
)
from tunnelprobe.domain.probe.service import ConnectivityProber


def keyscan_with(runner):
    def host_key(target, options):
        return probe_host_key(target, options, runner)
    return host_key


def never(*args):
    raise AssertionError("probe should not run")


class TestConnectivityProber:
    """Tests for plan/connect."""

    def test_exhausted_end_to_end(self, empty_runner, launcher):
        config = ProbeConfig(target=ConnectionTarget("example.com", 22))
        prober = ConnectivityProber(
            config,
            probes=ProbeSet(host_key=keyscan_with(empty_runner)),
            launcher=launcher,
            telemetry=Telemetry(),
        )

        with pytest.raises(NoSuitableMethodError) as excinfo:
            prober.connect()

        assert str(excinfo.value) == "no suitable connection method found for example.com:22"
        assert launcher.argv is None
        assert len(empty_runner.calls) == 1

    def test_direct_connect(self, keys_runner, launcher):
        config = ProbeConfig(target=ConnectionTarget("example.com", 22), options=ProbeOptions(timeout=4))
        prober = ConnectivityProber(
            config,
            probes=ProbeSet(host_key=keyscan_with(keys_runner), http_proxy=never, proxy_command=never),
            launcher=launcher,
            telemetry=Telemetry(),
        )

        prober.connect()

        assert launcher.argv == ["socat", "-", "TCP:example.com:22,connect-timeout=4"]

    def test_plan_relay(self, empty_runner, launcher):
        config = ProbeConfig(
            target=ConnectionTarget("example.com", 22),
            options=ProbeOptions(timeout=0),
            relay=RelayDescriptor("jump"),
        )
        prober = ConnectivityProber(
            config,
            probes=ProbeSet(host_key=keyscan_with(empty_runner)),
            launcher=launcher,
            telemetry=Telemetry(),
        )

        outcome, argv = prober.plan()

        assert outcome.strategy is Strategy.RELAY
        assert argv == ["ssh", "-p", "22", "jump", "nc", "example.com", "22"]
        assert launcher.argv is None

    def test_proxy_command_handoff_reruns_command(self, empty_runner, launcher):
        config = ProbeConfig(
            target=ConnectionTarget("example.com", 2222),
            proxy_command="ssh -W %h:%p bastion",
        )
        prober = ConnectivityProber(
            config,
            probes=ProbeSet(
                host_key=keyscan_with(empty_runner),
                proxy_command=lambda template, target, options: ProbeResult(True, "SSH-2.0-x"),
            ),
            launcher=launcher,
            telemetry=Telemetry(),
        )

        prober.connect()

        assert launcher.argv == ["ssh", "-W", "example.com:2222", "bastion"]


class TestExecLauncher:
    """Tests for the execvp handoff."""

    def test_execs_argv(self, monkeypatch):
        calls = []
        monkeypatch.setattr(os, "execvp", lambda file, args: calls.append((file, args)))

        ExecLauncher().exec(["socat", "-", "TCP:example.com:22"])

        assert calls == [("socat", ["socat", "-", "TCP:example.com:22"])]

    def test_failure_is_handoff_error(self, monkeypatch):
        def fail(file, args):
            raise FileNotFoundError(2, "No such file or directory")

        monkeypatch.setattr(os, "execvp", fail)

        with pytest.raises(HandoffError, match="failed to exec socat"):
            ExecLauncher().exec(["socat", "-", "TCP:example.com:22"])

    def test_empty_argv(self):
        with pytest.raises(HandoffError):
            ExecLauncher().exec([])
