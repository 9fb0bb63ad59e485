"""
Configuration loader with priority: env > CLI > TOML > defaults
"""
import os
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional

from ...core.constants import ENV_DEBUG, ENV_TIMEOUT
from ...core.exceptions import ConfigError


# Keys a TOML file may set, with their TOML type. The target host is always a
# command-line argument.
TOML_KEYS = {
    "port": int,
    "local": str,
    "proxy": str,
    "proxy_command": str,
    "relay": str,
    "key": str,
    "timeout": int,
    "debug": int,
    "ipv4": bool,
    "ipv6": bool,
    "log_file": str,
    "ssh_config": bool,
}


class ConfigLoader:
    """Configuration loader with priority support"""
    
    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._environ = os.environ if environ is None else environ
    
    def load_toml(self, path: Path) -> Dict[str, Any]:
        """
        Load TOML configuration file.
        
        Raises:
            ConfigError: If the file is missing or unparsable, or a key is unknown or
                mistyped
        """
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        
        try:
            data = tomllib.loads(path.read_text(encoding='utf-8'))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse TOML configuration: {e}") from e
        
        unknown = sorted(set(data) - set(TOML_KEYS))
        if unknown:
            raise ConfigError(f"Unknown configuration key(s) in {path}: {', '.join(unknown)}")
        
        for key, value in data.items():
            expected = TOML_KEYS[key]
            # bool is an int subclass
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                raise ConfigError(
                    f"Invalid {key} in {path}: expected {expected.__name__}, got {value!r}"
                )
        return data
    
    def load_env(self) -> Dict[str, Any]:
        """Load the debug level and timeout overrides from the environment"""
        config = {}
        
        env_mappings = {
            ENV_DEBUG: "debug",
            ENV_TIMEOUT: "timeout",
        }
        
        for env_key, config_key in env_mappings.items():
            value = self._environ.get(env_key)
            if value is None or value.strip() == "":
                continue
            try:
                config[config_key] = int(value)
            except ValueError:
                raise ConfigError(f"{env_key} must be an integer, got '{value}'") from None
        
        return config
    
    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configurations with priority.
        Later configs override earlier ones; None never overrides.
        """
        result = {}
        
        for config in configs:
            for key, value in config.items():
                if value is not None:
                    result[key] = value
        
        return result
    
    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> Dict[str, Any]:
        """
        Load configuration with priority: env > CLI > TOML > defaults
        
        Args:
            toml_path: Path to TOML configuration file
            cli_overrides: CLI parameter values (None = not given)
            use_env: Whether to apply environment overrides
        
        Returns:
            Merged configuration dictionary
        """
        configs = []
        
        # 1. Load TOML if provided
        if toml_path:
            configs.append(self.load_toml(toml_path))
        
        # 2. Apply CLI values
        if cli_overrides:
            configs.append(cli_overrides)
        
        # 3. Environment overrides (highest priority)
        if use_env:
            configs.append(self.load_env())
        
        return self.merge_configs(*configs)
