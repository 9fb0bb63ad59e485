"""
Main CLI application
"""
import shlex
import typer
from pathlib import Path
from typing import Optional

from rich.markup import escape
from rich.table import Table

from ...core.constants import DEFAULT_TIMEOUT
from ...core.exceptions import ConfigError, NoSuitableMethodError, HandoffError
from ...core.logging import setup_logging, get_logger, get_stderr_console
from ...core.telemetry import get_telemetry
from ...core.utils import resolve_ssh_alias
from ...domain.probe import ProbeConfig, ConnectivityProber
from ..config.loader import ConfigLoader

logger = get_logger(__name__)
stderr_console = get_stderr_console()

# Create main app
app = typer.Typer(
    name="tunnelprobe",
    add_completion=False,
    help="Pick a working transport for an SSH connection (use as ProxyCommand)",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def print_probe_summary() -> None:
    """Render the probe telemetry as a table on stderr"""
    telemetry = get_telemetry()
    table = Table(title="Probes", show_lines=False)
    table.add_column("Probe")
    table.add_column("Subject")
    table.add_column("Result")
    table.add_column("Time", justify="right")
    table.add_column("Detail")
    
    for record in telemetry.get_records():
        result = "[green]ok[/green]" if record.ok else "[red]failed[/red]"
        table.add_row(
            record.probe,
            escape(record.subject),
            result,
            f"{record.elapsed:.2f}s",
            escape(record.detail),
        )
    
    stderr_console.print(table)
    stderr_console.print(f"Selected: [bold]{telemetry.selected or 'none'}[/bold]")


@app.command()
def main(
    host: str = typer.Argument(..., help="Target host (%h in an ssh ProxyCommand)"),
    port: Optional[int] = typer.Argument(None, help="Target port (%p), default 22"),
    ipv4: bool = typer.Option(False, "-4", help="Only use IPv4"),
    ipv6: bool = typer.Option(False, "-6", help="Only use IPv6"),
    local: Optional[str] = typer.Option(
        None, "--local", "-l",
        help="Local name of the host, tried first (host[:port])",
    ),
    proxy: Optional[str] = typer.Option(
        None, "--proxy", "-x",
        help="HTTP proxy (\\[user:pass@]host[:port], port defaults to 8080)",
    ),
    proxy_command: Optional[str] = typer.Option(
        None, "--proxy-command", "-c",
        help="Command reaching the host's SSH port; %h and %p are expanded",
    ),
    relay: Optional[str] = typer.Option(
        None, "--relay", "-r",
        help="SSH relay host (host[:port]) running nc, used last and not verified",
    ),
    key: Optional[str] = typer.Option(
        None, "--key", "-k",
        help="Expected host key (base64 material, or 'type material')",
    ),
    timeout: Optional[int] = typer.Option(
        None, "--timeout", "-t", min=0,
        help=f"Per-probe timeout in seconds, 0 = none (default: {DEFAULT_TIMEOUT})",
    ),
    debug: int = typer.Option(
        0, "--debug", "-d", count=True,
        help="Increase diagnostic output (repeatable)",
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config",
        help="Configuration file path (TOML)",
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file",
        help="Also write diagnostics to this file",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n",
        help="Print the selected tunnel command instead of running it",
    ),
    no_ssh_config: bool = typer.Option(
        False, "--no-ssh-config",
        help="Don't resolve HOST through ~/.ssh/config",
    ),
):
    """
    Find a way to reach HOST and become the tunnel to it.
    
    Strategies are tried in this order, the first that works wins:
    local name, public name, HTTP proxy, proxy command, relay.
    
    TUNNELPROBE_DEBUG and TUNNELPROBE_TIMEOUT override -d and -t.
    
    Examples:
        # ~/.ssh/config
        Host work
            ProxyCommand tunnelprobe -l work.lan -x proxy.corp:3128 %h %p
        
        tunnelprobe --dry-run -r jump.example.com example.com 22
    """
    try:
        config_loader = ConfigLoader()
        cli_overrides = {
            "host": host,
            "port": port,
            "local": local,
            "proxy": proxy,
            "proxy_command": proxy_command,
            "relay": relay,
            "key": key,
            "timeout": timeout,
            # Unset flags must not mask TOML values
            "debug": debug or None,
            "ipv4": ipv4 or None,
            "ipv6": ipv6 or None,
            "log_file": str(log_file) if log_file else None,
        }
        cfg = config_loader.load(toml_path=config_file, cli_overrides=cli_overrides)
        
        try:
            debug_level = int(cfg.get("debug", 0))
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid debug: {cfg.get('debug')}") from None
        cfg_log_file = cfg.get("log_file")
        setup_logging(
            debug_level=debug_level,
            log_file=Path(cfg_log_file).expanduser() if cfg_log_file else None,
        )
        
        if not no_ssh_config and cfg.get("ssh_config", True):
            resolved_host, resolved_port = resolve_ssh_alias(cfg["host"], cfg.get("port"))
            if resolved_host != cfg["host"]:
                logger.info(f"Resolved {cfg['host']} to {resolved_host} via ssh_config")
            cfg["host"] = resolved_host
            if resolved_port is not None:
                cfg["port"] = resolved_port
        
        probe_config = ProbeConfig.from_dict(cfg)
    except ConfigError as e:
        stderr_console.print(f"[red]Configuration error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)
    
    prober = ConnectivityProber(probe_config)
    
    try:
        try:
            outcome, argv = prober.plan()
        finally:
            if debug_level >= 2:
                print_probe_summary()
        
        if dry_run:
            stderr_console.print(f"Strategy: [bold]{outcome.strategy.value}[/bold]")
            stderr_console.print(escape(shlex.join(argv)), soft_wrap=True, highlight=False)
            raise typer.Exit(0)
        
        prober.handoff(argv)
    except (NoSuitableMethodError, HandoffError) as e:
        stderr_console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
