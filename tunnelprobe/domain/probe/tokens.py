"""
Placeholder expansion for user-supplied command templates

Only %h (host) and %p (port) are understood. Every other %-token, %% included,
is left exactly as written.
"""
import re

from ...core.constants import HOST_TOKEN, PORT_TOKEN

_TOKEN_RE = re.compile("|".join(re.escape(t) for t in (HOST_TOKEN, PORT_TOKEN)))


def expand_tokens(template: str, host: str, port: int) -> str:
    """
    Substitute %h and %p in a single left-to-right pass.

    Markers appearing inside host or port are never expanded again.

    Examples:
        expand_tokens("nc %h %p", "example.com", 22) -> "nc example.com 22"
        expand_tokens("ssh -W %h:%p %r@jump", "db", 5432) -> "ssh -W db:5432 %r@jump"
    """
    values = {HOST_TOKEN: host, PORT_TOKEN: str(port)}
    return _TOKEN_RE.sub(lambda m: values[m.group(0)], template)
