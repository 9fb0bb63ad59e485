"""
Tunnel command construction

Turns the cascade's StrategyOutcome into the argv of the program that will
carry the SSH byte stream.
"""
import shlex
from typing import Optional

from ...core.constants import (
    DEFAULT_HTTP_PROXY_PORT,
    RELAY_PROGRAM,
    RELAY_CONNECT_PROGRAM,
    SSH_PROGRAM,
)
from ...core.exceptions import NoSuitableMethodError
from .models import (
    ConnectionTarget,
    ProbeOptions,
    ProxyDescriptor,
    RelayDescriptor,
    Strategy,
    StrategyOutcome,
)


def _socat_host(host: str) -> str:
    return f"[{host}]" if ":" in host else host


def _connect_timeout(options: ProbeOptions) -> list[str]:
    return [f"connect-timeout={options.timeout}"] if options.timeout else []


def direct_command(target: ConnectionTarget, options: ProbeOptions) -> list[str]:
    """socat [-4|-6] - TCP:host:port[,connect-timeout=T]"""
    argv = [RELAY_PROGRAM]
    if options.ip_version.flag:
        argv.append(options.ip_version.flag)
    address = ",".join(
        [f"TCP:{_socat_host(target.host)}:{target.port}"] + _connect_timeout(options)
    )
    argv.extend(["-", address])
    return argv


def http_proxy_command(
    target: ConnectionTarget,
    proxy: ProxyDescriptor,
    options: ProbeOptions,
) -> list[str]:
    """socat - PROXY:proxy:host:port[,proxyport=P][,proxyauth=U:W][,connect-timeout=T]"""
    params = [f"PROXY:{_socat_host(proxy.host)}:{_socat_host(target.host)}:{target.port}"]
    if proxy.port != DEFAULT_HTTP_PROXY_PORT:
        params.append(f"proxyport={proxy.port}")
    if proxy.has_credentials:
        params.append(f"proxyauth={proxy.user}:{proxy.password or ''}")
    params.extend(_connect_timeout(options))
    return [RELAY_PROGRAM, "-", ",".join(params)]


def relay_command(
    target: ConnectionTarget,
    relay: RelayDescriptor,
    options: ProbeOptions,
) -> list[str]:
    """ssh to the relay and run the minimal connect tool there"""
    argv = [SSH_PROGRAM]
    if options.ip_version.flag:
        argv.append(options.ip_version.flag)
    if options.timeout:
        argv.extend(["-o", f"ConnectTimeout={options.timeout}"])
    argv.extend(["-p", str(relay.port), relay.host])
    argv.extend([RELAY_CONNECT_PROGRAM, target.host, str(target.port)])
    return argv


def build_tunnel_command(outcome: StrategyOutcome, options: Optional[ProbeOptions] = None) -> list[str]:
    """
    Build the tunnel argv for outcome.

    Raises:
        NoSuitableMethodError: If the cascade found nothing
    """
    options = options or ProbeOptions()
    strategy = outcome.strategy

    if strategy in (Strategy.DIRECT_LOCAL, Strategy.DIRECT_PUBLIC):
        return direct_command(outcome.target, options)
    if strategy is Strategy.HTTP_PROXY:
        return http_proxy_command(outcome.target, outcome.proxy, options)
    if strategy is Strategy.PROXY_COMMAND:
        return shlex.split(outcome.command)
    if strategy is Strategy.RELAY:
        return relay_command(outcome.target, outcome.relay, options)

    raise NoSuitableMethodError(outcome.target.host, outcome.target.port)
