"""
Host key probe

Asks ssh-keyscan for the target's host keys. Getting any key back means an SSH
server answered at that address; with a reference key it must also be the
server we expect.
"""
import time
from typing import Optional

from ...core.constants import KEYSCAN_PROGRAM, KEYSCAN_GRACE_SECONDS
from ...core.interfaces import CommandRunner
from ...core.logging import get_logger
from ...core.utils import SubprocessRunner
from .models import ConnectionTarget, KeyScanOptions

logger = get_logger(__name__)


def keyscan_command(target: ConnectionTarget, options: KeyScanOptions) -> list[str]:
    """Build the ssh-keyscan argument vector"""
    argv = [KEYSCAN_PROGRAM]
    if options.ip_version.flag:
        argv.append(options.ip_version.flag)
    if options.timeout:
        argv.extend(["-T", str(options.timeout)])
    argv.extend(["-p", str(target.port), target.host])
    return argv


def key_material(line: str) -> Optional[str]:
    """
    Key material of a keyscan line (``host keytype material``).

    Returns None for lines with fewer than three fields.
    """
    fields = line.split()
    if len(fields) < 3:
        return None
    return fields[2]


def scan_host_keys(
    target: ConnectionTarget,
    options: KeyScanOptions,
    runner: Optional[CommandRunner] = None,
) -> list[str]:
    """
    Fetch host key lines for target.

    Failures of any kind (cannot spawn, timeout, non-zero exit) come back as
    whatever lines were printed, usually none. Never raises.
    """
    runner = runner or SubprocessRunner()
    argv = keyscan_command(target, options)
    wall_clock = options.timeout + KEYSCAN_GRACE_SECONDS if options.timeout else None

    logger.info(f"Scanning host keys of {target} (timeout={options.timeout or 'none'})")
    logger.debug(f"Running: {' '.join(argv)}")

    start = time.monotonic()
    result = runner.run(argv, timeout=wall_clock)
    elapsed = time.monotonic() - start

    if result.error:
        logger.info(f"{KEYSCAN_PROGRAM} could not be started: {result.error}")
    elif result.timed_out:
        logger.info(f"{KEYSCAN_PROGRAM} timed out after {elapsed:.2f}s")

    keys = [
        line.strip()
        for line in result.stdout.splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    logger.info(f"{len(keys)} key(s) from {target} in {elapsed:.2f}s (exit {result.exit_code})")
    return keys


def probe_host_key(
    target: ConnectionTarget,
    options: KeyScanOptions,
    runner: Optional[CommandRunner] = None,
) -> bool:
    """
    Check that an SSH server answers at target.

    With ``options.reference_key`` set, one of the returned keys must carry
    exactly that material; otherwise any key will do.
    """
    keys = scan_host_keys(target, options, runner)
    if not keys:
        return False

    if options.reference_key is None:
        return True

    for line in keys:
        if key_material(line) == options.reference_key:
            logger.debug(f"Reference key matched: {line.split()[1]}")
            return True

    logger.info(f"{target} returned {len(keys)} key(s), none matching the reference key")
    return False
