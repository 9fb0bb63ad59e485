"""
Proxy-command probe

Runs the user's proxy command once and waits for the SSH identification line
it should relay from the far end. The process only exists to produce that one
line; the tunnel is a fresh invocation of the same command.
"""
import os
import re
import shlex
import signal
import subprocess
import threading
from typing import Callable, Optional

from ...core.logging import get_logger
from .models import ConnectionTarget, CommandProbeOptions, ProbeResult
from .tokens import expand_tokens

logger = get_logger(__name__)

SSH_BANNER_RE = re.compile(r"^SSH-2\.\d+")
TIMED_OUT = "timed out"


def is_ssh_banner(line: str) -> bool:
    """True if line starts like an SSH-2 protocol version banner"""
    return SSH_BANNER_RE.match(line) is not None


def first_line(text: str) -> str:
    return text.splitlines()[0] if text else ""


class Deadline:
    """
    One-shot watchdog around a blocking call.

    Calls ``on_expire`` from a timer thread once ``seconds`` elapse. Leaving
    the with-block always disarms it. ``seconds`` of 0 (or None) arms nothing
    and never expires.
    """

    def __init__(self, seconds: Optional[float], on_expire: Callable[[], None]):
        self.seconds = seconds
        self._on_expire = on_expire
        self._expired = threading.Event()
        self._timer: Optional[threading.Timer] = None

    def _fire(self) -> None:
        self._expired.set()
        self._on_expire()

    def __enter__(self) -> "Deadline":
        if self.seconds:
            self._timer = threading.Timer(self.seconds, self._fire)
            self._timer.daemon = True
            self._timer.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def armed(self) -> bool:
        return self._timer is not None

    @property
    def expired(self) -> bool:
        return self._expired.is_set()


def _kill_group(process: subprocess.Popen) -> None:
    # The command may have forked helpers that hold our stdout pipe open
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass


def _dispose(process: subprocess.Popen) -> None:
    """Tear down the probe process and close its pipes"""
    for stream in (process.stdin, process.stdout):
        if stream is not None:
            try:
                stream.close()
            except OSError:
                pass

    if process.poll() is None:
        try:
            os.killpg(process.pid, signal.SIGTERM)
        except (ProcessLookupError, PermissionError):
            pass
        try:
            process.wait(timeout=1)
        except subprocess.TimeoutExpired:
            _kill_group(process)
            process.wait()


def validate_proxy_command(
    template: str,
    target: ConnectionTarget,
    options: CommandProbeOptions,
) -> ProbeResult:
    """
    Check that the proxy command reaches an SSH server.

    Outcomes, first match wins:
        - the command cannot be spawned: the spawn error
        - no line before the deadline: "timed out"
        - the first line is not an SSH-2 banner: "unexpected banner: <line>"

    Returns:
        ProbeResult, ok with the banner as message on success
    """
    command = expand_tokens(template, target.host, target.port)
    logger.info(f"Validating proxy command: {command} (timeout={options.timeout or 'none'})")

    try:
        argv = shlex.split(command)
    except ValueError as e:
        return _failed(command, f"cannot parse command: {e}")
    if not argv:
        return _failed(command, "empty command")

    try:
        process = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=None if options.debug_level >= 2 else subprocess.DEVNULL,
            process_group=0,
        )
    except OSError as e:
        return _failed(command, first_line(str(e)))

    try:
        with Deadline(options.timeout, lambda: _kill_group(process)) as deadline:
            raw = process.stdout.readline()

        # A complete line wins even if the timer fired while it was returned
        if not raw.endswith(b"\n") and deadline.expired:
            return _failed(command, TIMED_OUT)
        if not raw:
            return _failed(command, "connection closed before banner")

        line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        if not is_ssh_banner(line):
            return _failed(command, f"unexpected banner: {first_line(line)}")

        logger.info(f"Proxy command answered with {line}")
        return ProbeResult(ok=True, message=line)
    finally:
        _dispose(process)


def _failed(command: str, message: str) -> ProbeResult:
    logger.info(f"Proxy command failed: {message}")
    logger.debug(f"Failed command: {command}")
    return ProbeResult(ok=False, message=message)
