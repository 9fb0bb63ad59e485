"""
Process handoff to the selected tunnel command
"""
import os
import sys
from typing import NoReturn, Sequence

from ...core.exceptions import HandoffError
from ...core.interfaces import Launcher
from ...core.logging import get_logger, flush_logging

logger = get_logger(__name__)


class ExecLauncher(Launcher):
    """Launcher that replaces the current process image via execvp"""
    
    def exec(self, argv: Sequence[str]) -> NoReturn:
        """
        Replace this process with argv.
        
        stdin/stdout are inherited untouched, so the caller's byte stream
        flows straight into the tunnel program.
        
        Raises:
            HandoffError: If argv is empty or the program cannot be started
        """
        if not argv:
            raise HandoffError("empty tunnel command")
        
        logger.debug(f"exec {argv[0]} with {len(argv) - 1} argument(s)")
        
        # Buffers are lost once the image is replaced
        flush_logging()
        sys.stdout.flush()
        sys.stderr.flush()
        
        try:
            os.execvp(argv[0], list(argv))
        except OSError as e:
            raise HandoffError(f"failed to exec {argv[0]}: {e}") from e
