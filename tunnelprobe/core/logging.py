"""
Rich-based logging system

Everything goes to stderr: stdout is the tunnel's data channel.
"""
import logging
from typing import Optional
from pathlib import Path

from rich.logging import RichHandler
from rich.console import Console
from rich.traceback import install as install_traceback


# Global console instance
_stderr_console = Console(stderr=True)

# Install rich traceback handler
install_traceback(console=_stderr_console, show_locals=False, width=120)


def level_for_debug(debug_level: int) -> int:
    """Map a -d count to a logging level"""
    if debug_level <= 0:
        return logging.WARNING
    if debug_level == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    debug_level: int = 0,
    log_file: Optional[Path] = None,
    rich_tracebacks: bool = True,
) -> None:
    """
    Setup Rich logging system.
    
    Args:
        debug_level: Debug verbosity (0 = warnings only, 1 = info, 2+ = debug)
        log_file: Optional log file path
        rich_tracebacks: Enable rich tracebacks
    """
    log_level = level_for_debug(debug_level)
    
    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    
    # Remove existing handlers
    root_logger.handlers.clear()
    
    # Create Rich handler for stderr
    rich_handler = RichHandler(
        console=_stderr_console,
        show_time=debug_level >= 2,
        show_path=debug_level >= 2,
        rich_tracebacks=rich_tracebacks,
        markup=False,
        show_level=True,
    )
    rich_handler.setLevel(log_level)
    root_logger.addHandler(rich_handler)
    
    # Add file handler if specified
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)


def flush_logging() -> None:
    """Flush every root handler (before the process image is replaced)"""
    for handler in logging.getLogger().handlers:
        handler.flush()


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance.
    
    Args:
        name: Logger name (usually __name__)
    
    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def get_stderr_console() -> Console:
    """Get stderr console for errors, logs and diagnostics"""
    return _stderr_console
