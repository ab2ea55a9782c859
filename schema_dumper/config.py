"""
Configuration loading and validation for MySQL Schema Dumper.
"""

import os
import re
from typing import Any, Optional

import yaml

from .connection import DatabaseConnection
from .models import DumpConfig, ScriptProfile


class ConfigLoader:
    """Loads and validates configuration from YAML file."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')

    # Fallbacks for settings given neither on the command line nor in the file
    ENV_FALLBACKS = {
        'instance': 'DB_INSTANCE',
        'database': 'DB_DATABASE',
        'output_directory': 'DB_DIR',
    }

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.config = self._load_config() if config_path else {}

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f)

        return self._resolve_env_vars(config or {})

    def _resolve_env_vars(self, obj: Any) -> Any:
        """Recursively resolve environment variables in config."""
        if isinstance(obj, str):
            matches = self.ENV_VAR_PATTERN.findall(obj)
            for match in matches:
                env_value = os.environ.get(match, '')
                obj = obj.replace(f'${{{match}}}', env_value)
            return obj
        elif isinstance(obj, dict):
            return {k: self._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_env_vars(item) for item in obj]
        return obj

    def get_instance(self, instance_name: str) -> dict[str, Any]:
        """Get database instance configuration."""
        instances = self.config.get('instances', {})
        if instance_name not in instances:
            raise ValueError(f"Instance '{instance_name}' not found in configuration")
        return instances[instance_name]

    def resolve_instance(self, instance_name: str) -> dict[str, Any]:
        """Get connection settings for an instance.

        Names not defined under 'instances' are read as host[:port], with
        credentials from DB_USER and DB_PASSWORD.
        """
        if instance_name in self.config.get('instances', {}):
            return self.get_instance(instance_name)

        host, _, port = instance_name.partition(':')
        if port and not port.isdigit():
            raise ValueError(f"Invalid port in instance '{instance_name}'")
        return {
            'host': host,
            'port': int(port) if port else DatabaseConnection.DEFAULT_PORT,
            'user': os.environ.get('DB_USER', ''),
            'password': os.environ.get('DB_PASSWORD', ''),
        }

    def get_dump_settings(self) -> dict[str, Any]:
        """Get dump settings."""
        return self.config.get('dump', {})

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        return self.config.get('logging', {})

    @staticmethod
    def _to_bool(settings: dict[str, Any], key: str) -> bool:
        """Read a flag that may come from YAML or from a resolved ${VAR} string."""
        value = settings.get(key, False)
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        text = str(value).strip().lower()
        if text in ('true', '1', 'yes', 'on'):
            return True
        if text in ('false', '0', 'no', 'off', ''):
            return False
        raise ValueError(f"{key} must be true or false, got {value!r}")

    def build_dump_config(self, overrides: Optional[dict[str, Any]] = None) -> DumpConfig:
        """Merge settings with priority: overrides > config file > environment > defaults.

        Overrides set to None are treated as not given.

        Raises:
            ValueError: A required setting is missing or a value is out of range.
        """
        settings: dict[str, Any] = {}
        for key, env_var in self.ENV_FALLBACKS.items():
            if os.environ.get(env_var):
                settings[key] = os.environ[env_var]
        settings.update(self.get_dump_settings())
        settings.update({k: v for k, v in (overrides or {}).items() if v is not None})

        if 'replace' in settings:
            settings['replace_existing'] = settings.pop('replace')

        try:
            max_parallel = int(settings.get('max_parallel', DumpConfig.DEFAULT_PARALLEL))
        except (TypeError, ValueError):
            raise ValueError(f"max_parallel must be an integer, got {settings.get('max_parallel')!r}")

        try:
            profile = ScriptProfile(str(settings.get('profile', ScriptProfile.NORMAL.value)).lower())
        except ValueError:
            choices = ', '.join(p.value for p in ScriptProfile)
            raise ValueError(f"profile must be one of: {choices}")

        return DumpConfig(
            instance=settings.get('instance', ''),
            database=settings.get('database', ''),
            output_directory=settings.get('output_directory', ''),
            max_parallel=max_parallel,
            single_thread=self._to_bool(settings, 'single_thread'),
            replace_existing=self._to_bool(settings, 'replace_existing'),
            skip_errors=self._to_bool(settings, 'skip_errors'),
            extended_properties=self._to_bool(settings, 'extended_properties'),
            with_dependencies=self._to_bool(settings, 'with_dependencies'),
            profile=profile,
        )
