"""
Probe domain models
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any
from urllib.parse import quote

from ...core.constants import (
    DEFAULT_SSH_PORT,
    DEFAULT_HTTP_PROXY_PORT,
    DEFAULT_TIMEOUT,
    DEFAULT_DEBUG_LEVEL,
)
from ...core.exceptions import ConfigError


# Characters that end or nest a socat address option value
SOCAT_ADDRESS_SPECIALS = ",!'\"\\[](){}"


class IpVersion(str, Enum):
    """IP version constraint forwarded to every external tool"""
    ANY = "any"
    V4 = "4"
    V6 = "6"

    @classmethod
    def from_flags(cls, ipv4: bool, ipv6: bool) -> "IpVersion":
        """
        Build from -4/-6 style flags.

        Raises:
            ConfigError: If both flags are set
        """
        if ipv4 and ipv6:
            raise ConfigError("options -4 and -6 are mutually exclusive")
        if ipv4:
            return cls.V4
        if ipv6:
            return cls.V6
        return cls.ANY

    @property
    def flag(self) -> Optional[str]:
        """Command-line flag (-4/-6), None when unconstrained"""
        if self is IpVersion.ANY:
            return None
        return f"-{self.value}"


def _split_host_port(spec: str) -> tuple[str, Optional[int]]:
    """
    Split ``host[:port]``; IPv6 literals must be bracketed to carry a port.

    Raises:
        ConfigError: On an empty host or a non-numeric / out of range port
    """
    spec = spec.strip()
    host, port_str = spec, None

    if spec.startswith("["):
        end = spec.find("]")
        if end < 0:
            raise ConfigError(f"Unterminated IPv6 address: {spec}")
        host = spec[1:end]
        rest = spec[end + 1:]
        if rest:
            if not rest.startswith(":"):
                raise ConfigError(f"Invalid address: {spec}")
            port_str = rest[1:]
    elif spec.count(":") == 1:
        host, port_str = spec.split(":", 1)

    if not host:
        raise ConfigError(f"Missing host in '{spec}'")

    if port_str is None:
        return host, None
    return host, _parse_port(port_str, spec)


def _parse_port(value: Any, context: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"Invalid port in '{context}': {value}")
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid port in '{context}': {value}") from None
    if not (1 <= port <= 65535):
        raise ConfigError(f"Invalid port in '{context}': {port}")
    return port


@dataclass(frozen=True)
class ConnectionTarget:
    """A host:port to reach, plus the IP version it must be reached over"""
    host: str
    port: int = DEFAULT_SSH_PORT
    ip_version: IpVersion = IpVersion.ANY

    @classmethod
    def parse(
        cls,
        spec: str,
        default_port: int = DEFAULT_SSH_PORT,
        ip_version: IpVersion = IpVersion.ANY,
    ) -> "ConnectionTarget":
        """Parse ``host[:port]``"""
        host, port = _split_host_port(spec)
        return cls(host=host, port=port or default_port, ip_version=ip_version)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


# The local name is tried first but otherwise looks exactly like the public one
LocalTarget = ConnectionTarget


@dataclass(frozen=True)
class ProxyDescriptor:
    """HTTP proxy able to CONNECT"""
    host: str
    port: int = DEFAULT_HTTP_PROXY_PORT
    user: Optional[str] = None
    password: Optional[str] = None

    def __post_init__(self):
        # socat reads proxyauth=USER:PASS up to the next address separator
        for name, value in (("user", self.user), ("password", self.password)):
            if value and any(c in SOCAT_ADDRESS_SPECIALS for c in value):
                raise ConfigError(
                    f"Proxy {name} can't contain any of {SOCAT_ADDRESS_SPECIALS!r}"
                )
        if self.user and ":" in self.user:
            raise ConfigError("Proxy user can't contain ':'")

    @classmethod
    def parse(cls, spec: str) -> "ProxyDescriptor":
        """
        Parse ``[user:pass@]host[:port]``.

        A userinfo without ':' is a bare user with an empty password.
        """
        user = password = None
        hostpart = spec.strip()
        if "@" in hostpart:
            userinfo, hostpart = hostpart.rsplit("@", 1)
            user, _, password = userinfo.partition(":")

        host, port = _split_host_port(hostpart)
        return cls(
            host=host,
            port=port or DEFAULT_HTTP_PROXY_PORT,
            user=user,
            password=password,
        )

    @property
    def has_credentials(self) -> bool:
        return self.user is not None

    @property
    def url(self) -> str:
        """Proxy URL for an HTTP client, credentials percent-encoded"""
        auth = ""
        if self.has_credentials:
            auth = f"{quote(self.user, safe='')}:{quote(self.password or '', safe='')}@"
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{auth}{host}:{self.port}"

    def __str__(self) -> str:
        # Never leak the password into logs
        who = f"{self.user}@" if self.has_credentials else ""
        return f"{who}{self.host}:{self.port}"


@dataclass(frozen=True)
class RelayDescriptor:
    """SSH host used as a jump point"""
    host: str
    port: int = DEFAULT_SSH_PORT

    @classmethod
    def parse(cls, spec: str) -> "RelayDescriptor":
        """Parse ``host[:port]``"""
        host, port = _split_host_port(spec)
        return cls(host=host, port=port or DEFAULT_SSH_PORT)

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


# ============================================================
# Options
# ============================================================

@dataclass(frozen=True)
class KeyScanOptions:
    """What the key scanner needs"""
    timeout: int
    debug_level: int
    ip_version: IpVersion
    reference_key: Optional[str] = None


@dataclass(frozen=True)
class ProxyCheckOptions:
    """What the HTTP proxy checker needs"""
    timeout: int
    debug_level: int


@dataclass(frozen=True)
class CommandProbeOptions:
    """What the proxy-command validator needs"""
    timeout: int
    debug_level: int


@dataclass(frozen=True)
class ProbeOptions:
    """Settings shared by every probe; timeout 0 means no timeout"""
    timeout: int = DEFAULT_TIMEOUT
    debug_level: int = DEFAULT_DEBUG_LEVEL
    ip_version: IpVersion = IpVersion.ANY
    reference_key: Optional[str] = None

    def __post_init__(self):
        if self.timeout < 0:
            raise ConfigError(f"Invalid timeout: {self.timeout}")
        if self.debug_level < 0:
            raise ConfigError(f"Invalid debug level: {self.debug_level}")

    @property
    def key_scan(self) -> KeyScanOptions:
        return KeyScanOptions(
            timeout=self.timeout,
            debug_level=self.debug_level,
            ip_version=self.ip_version,
            reference_key=self.reference_key,
        )

    @property
    def proxy_check(self) -> ProxyCheckOptions:
        return ProxyCheckOptions(timeout=self.timeout, debug_level=self.debug_level)

    @property
    def command_probe(self) -> CommandProbeOptions:
        return CommandProbeOptions(timeout=self.timeout, debug_level=self.debug_level)


def normalize_reference_key(value: Optional[str]) -> Optional[str]:
    """
    Accept either bare key material or a ``type material [comment]`` line.

    Examples:
        normalize_reference_key("AAAAC3Nz") -> "AAAAC3Nz"
        normalize_reference_key("ssh-ed25519 AAAAC3Nz") -> "AAAAC3Nz"
    """
    if value is None:
        return None
    fields = value.split()
    if not fields:
        return None
    if len(fields) == 1:
        return fields[0]
    return fields[1]


@dataclass(frozen=True)
class ProbeConfig:
    """Everything one run of the cascade needs"""
    target: ConnectionTarget
    options: ProbeOptions = field(default_factory=ProbeOptions)
    local: Optional[LocalTarget] = None
    proxy: Optional[ProxyDescriptor] = None
    proxy_command: Optional[str] = None
    relay: Optional[RelayDescriptor] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProbeConfig":
        """
        Create from a merged configuration dictionary.

        Raises:
            ConfigError: If the configuration is invalid. Always raised before
                anything is probed.
        """
        ip_version = IpVersion.from_flags(
            _get_bool(data, "ipv4"),
            _get_bool(data, "ipv6"),
        )

        host = _get_str(data, "host")
        if not host:
            raise ConfigError("Missing target host")

        port = data.get("port")
        target = ConnectionTarget(
            host=host,
            port=_parse_port(port, host) if port is not None else DEFAULT_SSH_PORT,
            ip_version=ip_version,
        )

        options = ProbeOptions(
            timeout=_parse_int(data.get("timeout", DEFAULT_TIMEOUT), "timeout"),
            debug_level=_parse_int(data.get("debug", DEFAULT_DEBUG_LEVEL), "debug"),
            ip_version=ip_version,
            reference_key=normalize_reference_key(_get_str(data, "key")),
        )

        local = None
        local_spec = _get_str(data, "local")
        if local_spec:
            local = LocalTarget.parse(local_spec, default_port=target.port, ip_version=ip_version)

        proxy_spec = _get_str(data, "proxy")
        relay_spec = _get_str(data, "relay")
        proxy = ProxyDescriptor.parse(proxy_spec) if proxy_spec else None
        relay = RelayDescriptor.parse(relay_spec) if relay_spec else None

        return cls(
            target=target,
            options=options,
            local=local,
            proxy=proxy,
            proxy_command=_get_str(data, "proxy_command") or None,
            relay=relay,
        )


def _get_str(data: Dict[str, Any], name: str) -> Optional[str]:
    value = data.get(name)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"Invalid {name}: expected a string, got {value!r}")
    return value


def _get_bool(data: Dict[str, Any], name: str) -> bool:
    value = data.get(name)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"Invalid {name}: expected true or false, got {value!r}")
    return value


def _parse_int(value: Any, name: str) -> int:
    # bool is an int subclass
    if isinstance(value, bool):
        raise ConfigError(f"Invalid {name}: {value}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid {name}: {value}") from None


# ============================================================
# Results
# ============================================================

@dataclass(frozen=True)
class ProbeResult:
    """Yes/no answer from a probe plus the reason for a no"""
    ok: bool
    message: str = ""

    def __bool__(self) -> bool:
        return self.ok


class Strategy(str, Enum):
    """Terminal states of the cascade, in priority order"""
    DIRECT_LOCAL = "direct-local"
    DIRECT_PUBLIC = "direct-public"
    HTTP_PROXY = "http-proxy"
    PROXY_COMMAND = "proxy-command"
    RELAY = "relay"
    NONE_FOUND = "none"


@dataclass(frozen=True)
class StrategyOutcome:
    """
    Selected strategy and the parameters its tunnel command needs.

    ``target`` is always the host:port the tunnel must end up at; for
    DIRECT_LOCAL it is the local name.
    """
    strategy: Strategy
    target: ConnectionTarget
    proxy: Optional[ProxyDescriptor] = None
    relay: Optional[RelayDescriptor] = None
    command: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.strategy is not Strategy.NONE_FOUND

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "strategy": self.strategy.value,
            "target": str(self.target),
            "proxy": str(self.proxy) if self.proxy else None,
            "relay": str(self.relay) if self.relay else None,
            "command": self.command,
        }
