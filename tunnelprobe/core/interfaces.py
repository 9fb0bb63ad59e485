"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NoReturn, Optional, Sequence


@dataclass(frozen=True)
class CommandResult:
    """Result of a finished (or abandoned) local command"""
    exit_code: int
    stdout: str = ""
    timed_out: bool = False
    error: Optional[str] = None
    
    @property
    def success(self) -> bool:
        return self.exit_code == 0 and not self.timed_out and self.error is None


class CommandRunner(ABC):
    """Runs a local command to completion and captures its stdout"""
    
    @abstractmethod
    def run(self, argv: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        """
        Run argv, discarding its stderr.
        
        Must not raise for spawn failures or timeouts; those are reported
        through the returned CommandResult.
        """
        pass


class Launcher(ABC):
    """Hands the process over to the tunnel command"""
    
    @abstractmethod
    def exec(self, argv: Sequence[str]) -> NoReturn:
        """Replace the current process with argv"""
        pass
