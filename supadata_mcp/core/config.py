"""
Configuration Manager for the Supadata Command Dispatcher

Handles YAML/JSON configuration files and environment variable integration.
Configuration is read once at startup and handed to components explicitly.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict
from pathlib import Path

from supadata_mcp.core.base import ConfigurationError


DEFAULT_API_URL = "https://api.supadata.ai/v1"


@dataclass(frozen=True)
class RetryConfig:
    """Bounded exponential backoff settings"""
    max_attempts: int = 3
    initial_delay_ms: int = 1000
    max_delay_ms: int = 10000
    backoff_factor: int = 2


@dataclass
class ApiConfig:
    """Remote API connection settings"""
    api_key: Optional[str] = None
    base_url: str = DEFAULT_API_URL
    timeout: int = 60
    cloud_service: bool = False
    tool_prefix: str = "supadata_"


@dataclass
class LoggingConfig:
    """Logging system configuration"""
    level: str = "INFO"
    file: Optional[str] = None
    max_size: str = "10MB"
    backup_count: int = 3
    debug: bool = False


# env var -> (section, key)
_INT_ENV_OVERRIDES = {
    'SUPADATA_RETRY_MAX_ATTEMPTS': ('retry', 'max_attempts'),
    'SUPADATA_RETRY_INITIAL_DELAY': ('retry', 'initial_delay_ms'),
    'SUPADATA_RETRY_MAX_DELAY': ('retry', 'max_delay_ms'),
    'SUPADATA_RETRY_BACKOFF_FACTOR': ('retry', 'backoff_factor'),
    'SUPADATA_TIMEOUT': ('api', 'timeout'),
}

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


class ConfigManager:
    """
    Centralized configuration manager with support for YAML/JSON files
    and environment variable integration.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or "config/config.yaml"
        self._config_data: Dict[str, Any] = {}
        self.api_config: Optional[ApiConfig] = None
        self.retry_config: Optional[RetryConfig] = None
        self.logging_config: Optional[LoggingConfig] = None

    def load_config(self, config_path: Optional[str] = None) -> Dict[str, Any]:
        """Load configuration from file with environment variable override"""
        if config_path:
            self.config_path = config_path

        config_file = Path(self.config_path)

        if not config_file.exists():
            self._config_data = self._get_default_config()
        else:
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    if config_file.suffix.lower() == '.json':
                        self._config_data = json.load(f)
                    else:  # Assume YAML
                        self._config_data = yaml.safe_load(f) or {}
            except (OSError, ValueError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config from {config_file}: {e}")

        self._apply_env_overrides()
        self._parse_config()

        return self._config_data

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration dictionary"""
        return {
            'api': asdict(ApiConfig()),
            'retry': asdict(RetryConfig()),
            'logging': asdict(LoggingConfig()),
        }

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides"""
        if os.getenv('SUPADATA_API_KEY'):
            self._config_data.setdefault('api', {})['api_key'] = os.getenv('SUPADATA_API_KEY')

        if os.getenv('SUPADATA_API_URL'):
            self._config_data.setdefault('api', {})['base_url'] = os.getenv('SUPADATA_API_URL')

        if os.getenv('CLOUD_SERVICE'):
            self._config_data.setdefault('api', {})['cloud_service'] = (
                os.getenv('CLOUD_SERVICE').strip().lower() in _TRUE_VALUES
            )

        # Unparseable or non-positive numbers keep the configured value
        for env_name, (section, key) in _INT_ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if not raw:
                continue
            try:
                value = int(raw)
            except ValueError:
                continue
            if value > 0:
                self._config_data.setdefault(section, {})[key] = value

        if os.getenv('LOG_LEVEL'):
            self._config_data.setdefault('logging', {})['level'] = os.getenv('LOG_LEVEL')

        if os.getenv('SUPADATA_DEBUG'):
            debug = os.getenv('SUPADATA_DEBUG').strip().lower() in _TRUE_VALUES
            self._config_data.setdefault('logging', {})['debug'] = debug

    def _parse_config(self) -> None:
        """Parse configuration into dataclass objects"""
        api_data = self._config_data.get('api') or {}
        self.api_config = ApiConfig(
            api_key=api_data.get('api_key'),
            base_url=api_data.get('base_url', DEFAULT_API_URL),
            timeout=api_data.get('timeout', 60),
            cloud_service=bool(api_data.get('cloud_service', False)),
            tool_prefix=api_data.get('tool_prefix', 'supadata_')
        )

        retry_data = self._config_data.get('retry') or {}
        self.retry_config = RetryConfig(
            max_attempts=retry_data.get('max_attempts', 3),
            initial_delay_ms=retry_data.get('initial_delay_ms', 1000),
            max_delay_ms=retry_data.get('max_delay_ms', 10000),
            backoff_factor=retry_data.get('backoff_factor', 2)
        )

        logging_data = self._config_data.get('logging') or {}
        debug = bool(logging_data.get('debug', False))
        self.logging_config = LoggingConfig(
            level='DEBUG' if debug else logging_data.get('level', 'INFO'),
            file=logging_data.get('file'),
            max_size=logging_data.get('max_size', '10MB'),
            backup_count=logging_data.get('backup_count', 3),
            debug=debug
        )

    def validate_config(self) -> bool:
        """Validate loaded configuration"""
        if not self.api_config or not self.retry_config:
            raise ConfigurationError("Configuration not loaded")

        if not self.api_config.api_key and not self.api_config.cloud_service:
            raise ConfigurationError("SUPADATA_API_KEY environment variable is required")

        retry = self.retry_config
        for name in ('max_attempts', 'initial_delay_ms', 'max_delay_ms', 'backoff_factor'):
            value = getattr(retry, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigurationError(f"Invalid retry setting {name}: {value!r}")

        if retry.max_delay_ms < retry.initial_delay_ms:
            raise ConfigurationError("retry.max_delay_ms must not be lower than retry.initial_delay_ms")

        return True

    def as_dict(self) -> Dict[str, Any]:
        """Parsed configuration as a plain dictionary"""
        if not self.api_config:
            raise ConfigurationError("Configuration not loaded")

        return {
            'api': asdict(self.api_config),
            'retry': asdict(self.retry_config),
            'logging': asdict(self.logging_config),
        }
