"""
Core utility functions
"""
import subprocess
from pathlib import Path
from typing import Dict, Any, Optional, Sequence

import paramiko

from .constants import SSH_CONFIG_PATH
from .exceptions import ConfigError
from .interfaces import CommandResult, CommandRunner


# ============================================================
# SSH Config Management
# ============================================================

def load_ssh_config(hostname: str, config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration for specified Host from ~/.ssh/config.
    
    Args:
        hostname: Host name in SSH configuration
        config_path: Override for the ssh_config location
    
    Returns:
        Dictionary containing host and, when configured, port.
        An unknown host or a missing file yields {"host": hostname}.
    
    Raises:
        ConfigError: If the file can't be read or parsed, or Port is invalid
    """
    config_path = config_path or Path(SSH_CONFIG_PATH).expanduser()
    if not config_path.exists():
        return {"host": hostname}

    try:
        ssh_config = paramiko.SSHConfig.from_path(str(config_path))
        entry = ssh_config.lookup(hostname)
    except (
        OSError,
        paramiko.ssh_exception.ConfigParseError,
        paramiko.ssh_exception.CouldNotCanonicalize,
    ) as e:
        raise ConfigError(f"Failed to read {config_path}: {e}") from e

    result: Dict[str, Any] = {"host": entry.get("hostname", hostname)}
    if "port" in entry:
        port = entry["port"]
        if not (port.isascii() and port.isdigit()) or not (1 <= int(port) <= 65535):
            raise ConfigError(f"Invalid Port for {hostname} in {config_path}: {port}")
        result["port"] = int(port)
    return result


def resolve_ssh_alias(
    host: str,
    port: Optional[int],
    config_path: Optional[Path] = None,
) -> tuple[str, Optional[int]]:
    """
    Translate an ssh_config alias into a real host (and port).
    
    ssh-keyscan and socat don't read ssh_config, so ``myalias`` has to become
    its HostName before probing. An explicit port always wins over Port.
    """
    entry = load_ssh_config(host, config_path)
    if port is None:
        port = entry.get("port")
    return entry["host"], port


# ============================================================
# Local Command Execution
# ============================================================

class SubprocessRunner(CommandRunner):
    """CommandRunner backed by subprocess.run"""
    
    def run(self, argv: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        try:
            result = subprocess.run(
                list(argv),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            stdout = e.stdout or ""
            if isinstance(stdout, bytes):
                stdout = stdout.decode("utf-8", errors="replace")
            return CommandResult(exit_code=124, stdout=stdout, timed_out=True)
        except OSError as e:
            return CommandResult(exit_code=127, error=str(e))
        
        return CommandResult(exit_code=result.returncode, stdout=result.stdout)

