"""
Probe domain service - business logic
"""
from typing import NoReturn, Optional

from ...core.exceptions import NoSuitableMethodError
from ...core.interfaces import Launcher
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from .cascade import ProbeSet, StrategyCascade
from .command import build_tunnel_command
from .handoff import ExecLauncher
from .models import ProbeConfig, StrategyOutcome

logger = get_logger(__name__)


class ConnectivityProber:
    """
    Connectivity prober - pure business logic.
    
    Selects a strategy, builds its tunnel command and hands the process
    over to it. No direct dependency on CLI or Typer.
    """
    
    def __init__(
        self,
        config: ProbeConfig,
        probes: Optional[ProbeSet] = None,
        launcher: Optional[Launcher] = None,
        telemetry: Optional[Telemetry] = None,
    ):
        """
        Initialize prober.
        
        Args:
            config: Validated probe configuration
            probes: Probe implementations (defaults to the real ones)
            launcher: Process handoff implementation
            telemetry: Telemetry collector
        """
        self.config = config
        self.telemetry = telemetry or get_telemetry()
        self.cascade = StrategyCascade(config, probes, self.telemetry)
        self.launcher = launcher or ExecLauncher()
    
    def select(self) -> StrategyOutcome:
        """Run the cascade"""
        return self.cascade.select()
    
    def plan(self) -> tuple[StrategyOutcome, list[str]]:
        """
        Select a strategy and build its tunnel command.
        
        Raises:
            NoSuitableMethodError: If every strategy failed
        """
        outcome = self.select()
        if not outcome.found:
            target = self.config.target
            raise NoSuitableMethodError(target.host, target.port)
        
        argv = build_tunnel_command(outcome, self.config.options)
        logger.debug(f"Tunnel command: {argv[0]} with {len(argv) - 1} argument(s)")
        return outcome, argv
    
    def handoff(self, argv: list[str]) -> NoReturn:
        """
        Replace this process with argv. Only returns by raising.
        
        Raises:
            HandoffError: If the tunnel command cannot be started
        """
        logger.info(f"Handing off to {argv[0]}")
        self.launcher.exec(argv)
    
    def connect(self) -> NoReturn:
        """
        Select, build and exec the tunnel command.
        
        Raises:
            NoSuitableMethodError: If every strategy failed
            HandoffError: If the tunnel command cannot be started
        """
        _, argv = self.plan()
        self.handoff(argv)
