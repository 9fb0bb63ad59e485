"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stderr_console
from .interfaces import CommandResult, CommandRunner, Launcher
from .telemetry import Telemetry, ProbeRecord, get_telemetry
from .utils import load_ssh_config, resolve_ssh_alias, SubprocessRunner

__all__ = [
    "TunnelProbeError",
    "ConfigError",
    "NoSuitableMethodError",
    "HandoffError",
    "setup_logging",
    "get_logger",
    "get_stderr_console",
    "CommandResult",
    "CommandRunner",
    "Launcher",
    "Telemetry",
    "ProbeRecord",
    "get_telemetry",
    "load_ssh_config",
    "resolve_ssh_alias",
    "SubprocessRunner",
]
