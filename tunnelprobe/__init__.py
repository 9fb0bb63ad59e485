"""
tunnelprobe - pick a working transport for an SSH connection

Meant to be used as an SSH ProxyCommand. Tries, in order:
- the host's local name
- the host's public name
- an HTTP CONNECT proxy
- a user-supplied proxy command
- an SSH relay host
and replaces itself with the tunnel program of the first one that works.
"""

__version__ = "0.1.0"

from .core import (
    TunnelProbeError,
    ConfigError,
    NoSuitableMethodError,
    HandoffError,
)

from .domain.probe import (
    IpVersion,
    ConnectionTarget,
    ProxyDescriptor,
    RelayDescriptor,
    ProbeOptions,
    ProbeConfig,
    Strategy,
    StrategyOutcome,
    StrategyCascade,
    ConnectivityProber,
    build_tunnel_command,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "TunnelProbeError",
    "ConfigError",
    "NoSuitableMethodError",
    "HandoffError",
    # Models
    "IpVersion",
    "ConnectionTarget",
    "ProxyDescriptor",
    "RelayDescriptor",
    "ProbeOptions",
    "ProbeConfig",
    "Strategy",
    "StrategyOutcome",
    # Services
    "StrategyCascade",
    "ConnectivityProber",
    "build_tunnel_command",
]
