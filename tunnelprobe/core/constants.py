"""
Project constants definitions
"""

# ============================================================
# Default Values
# ============================================================

DEFAULT_SSH_PORT = 22
DEFAULT_HTTP_PROXY_PORT = 8080
DEFAULT_TIMEOUT = 5
DEFAULT_DEBUG_LEVEL = 0

# ============================================================
# Probes
# ============================================================

# Extra wall-clock slack on top of ssh-keyscan's own -T timeout
KEYSCAN_GRACE_SECONDS = 5

PROXY_CHECK_URL = "http://www.google.com/"

# Synthetic status for requests that never got an HTTP response
CONNECT_FAILED_STATUS = 599
CONNECT_FAILED_REASON = "Connect Failed"

HOST_TOKEN = "%h"
PORT_TOKEN = "%p"

# ============================================================
# External Programs
# ============================================================

KEYSCAN_PROGRAM = "ssh-keyscan"
RELAY_PROGRAM = "socat"
SSH_PROGRAM = "ssh"
# The relay host is only expected to carry a minimal connect tool
RELAY_CONNECT_PROGRAM = "nc"

# ============================================================
# Environment
# ============================================================

ENV_DEBUG = "TUNNELPROBE_DEBUG"
ENV_TIMEOUT = "TUNNELPROBE_TIMEOUT"

# ============================================================
# SSH Config
# ============================================================

SSH_CONFIG_PATH = "~/.ssh/config"
