"""
Probe domain module
"""
from .models import (
    IpVersion,
    ConnectionTarget,
    LocalTarget,
    ProxyDescriptor,
    RelayDescriptor,
    ProbeOptions,
    ProbeConfig,
    ProbeResult,
    Strategy,
    StrategyOutcome,
)
from .cascade import ProbeSet, StrategyCascade
from .command import build_tunnel_command
from .service import ConnectivityProber

__all__ = [
    "IpVersion",
    "ConnectionTarget",
    "LocalTarget",
    "ProxyDescriptor",
    "RelayDescriptor",
    "ProbeOptions",
    "ProbeConfig",
    "ProbeResult",
    "Strategy",
    "StrategyOutcome",
    "ProbeSet",
    "StrategyCascade",
    "build_tunnel_command",
    "ConnectivityProber",
]
