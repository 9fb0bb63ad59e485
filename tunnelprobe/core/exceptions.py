"""
Unified exception definitions
"""


class TunnelProbeError(Exception):
    """Base exception class"""
    pass


class ConfigError(TunnelProbeError):
    """Configuration error"""
    pass


class NoSuitableMethodError(TunnelProbeError):
    """Every configured strategy failed"""

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        super().__init__(f"no suitable connection method found for {host}:{port}")


class HandoffError(TunnelProbeError):
    """Tunnel command could not replace the current process"""
    pass
