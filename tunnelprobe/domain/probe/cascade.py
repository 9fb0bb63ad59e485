"""
Strategy cascade

Tries the configured strategies one at a time, cheapest and most direct
first, and stops at the first one that works:

    local name -> public name -> HTTP proxy -> proxy command -> relay

The relay is taken on trust once configured. Checking it would cost an extra
SSH round trip through the relay.
"""
from dataclasses import dataclass
from typing import Callable, Optional

from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from .http_proxy import check_http_proxy
from .keyscan import probe_host_key
from .models import (
    CommandProbeOptions,
    ConnectionTarget,
    KeyScanOptions,
    ProbeConfig,
    ProbeResult,
    ProxyCheckOptions,
    ProxyDescriptor,
    Strategy,
    StrategyOutcome,
)
from .proxy_command import validate_proxy_command
from .tokens import expand_tokens

logger = get_logger(__name__)


HostKeyProbe = Callable[[ConnectionTarget, KeyScanOptions], bool]
HttpProxyProbe = Callable[[ProxyDescriptor, ProxyCheckOptions], bool]
ProxyCommandProbe = Callable[[str, ConnectionTarget, CommandProbeOptions], ProbeResult]


@dataclass(frozen=True)
class ProbeSet:
    """The probe implementations a cascade calls"""
    host_key: HostKeyProbe = probe_host_key
    http_proxy: HttpProxyProbe = check_http_proxy
    proxy_command: ProxyCommandProbe = validate_proxy_command


class StrategyCascade:
    """
    Picks the first working strategy for one ProbeConfig.

    No state survives between strategies; each probe gets only its own view
    of the options.
    """

    def __init__(
        self,
        config: ProbeConfig,
        probes: Optional[ProbeSet] = None,
        telemetry: Optional[Telemetry] = None,
    ):
        self.config = config
        self.probes = probes or ProbeSet()
        self.telemetry = telemetry or get_telemetry()

    def select(self) -> StrategyOutcome:
        """
        Run the cascade.

        Returns:
            The first successful StrategyOutcome, or one with
            Strategy.NONE_FOUND when nothing worked. Probe failures never
            raise out of here.
        """
        outcome = self._run()
        self.telemetry.record_selection(outcome.strategy.value)
        if outcome.found:
            logger.info(f"Selected {outcome.strategy.value} for {self.config.target}")
        else:
            logger.info(f"No strategy works for {self.config.target}")
        return outcome

    def _run(self) -> StrategyOutcome:
        config = self.config
        options = config.options

        if config.local is not None:
            if self._host_key("local", config.local):
                return StrategyOutcome(Strategy.DIRECT_LOCAL, target=config.local)

        if self._host_key("public", config.target):
            return StrategyOutcome(Strategy.DIRECT_PUBLIC, target=config.target)

        if config.proxy is not None:
            with self.telemetry.track("http-proxy", str(config.proxy)) as record:
                record.ok = bool(self.probes.http_proxy(config.proxy, options.proxy_check))
            if record.ok:
                return StrategyOutcome(Strategy.HTTP_PROXY, target=config.target, proxy=config.proxy)

        if config.proxy_command is not None:
            with self.telemetry.track("proxy-command", config.proxy_command) as record:
                result = self.probes.proxy_command(
                    config.proxy_command, config.target, options.command_probe
                )
                record.ok = result.ok
                record.detail = result.message
            if result.ok:
                return StrategyOutcome(
                    Strategy.PROXY_COMMAND,
                    target=config.target,
                    command=expand_tokens(config.proxy_command, config.target.host, config.target.port),
                )

        if config.relay is not None:
            with self.telemetry.track("relay", str(config.relay)) as record:
                record.ok = True
                record.detail = "not verified"
            return StrategyOutcome(Strategy.RELAY, target=config.target, relay=config.relay)

        return StrategyOutcome(Strategy.NONE_FOUND, target=config.target)

    def _host_key(self, label: str, target: ConnectionTarget) -> bool:
        with self.telemetry.track(f"{label}-keyscan", str(target)) as record:
            record.ok = bool(self.probes.host_key(target, self.config.options.key_scan))
        return record.ok
