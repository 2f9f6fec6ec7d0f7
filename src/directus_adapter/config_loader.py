"""
ConfigLoader module for loading and validating TOML client configuration files
"""

import os
import logging
import tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


class EnvironmentError(Exception):
    """Raised when required environment variables are missing"""
    pass


@dataclass
class ClientConfig:
    """Configuration data class for the API client from TOML file"""
    base_url: str
    authentication: Dict[str, Any]
    project: Optional[str] = None
    transport: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)


class ConfigLoader:
    """Loads and validates TOML configuration files"""

    # Required configuration sections and their mandatory keys
    REQUIRED_SECTIONS = {
        'api': ['base_url'],
        'authentication': ['type']
    }

    # Optional sections that can have default empty values
    OPTIONAL_SECTIONS = [
        'transport',
        'logging'
    ]

    SUPPORTED_AUTH_TYPES = {'none', 'bearer_token', 'credentials'}

    # Environment variable references each authentication type needs
    AUTH_TYPE_KEYS = {
        'none': [],
        'bearer_token': ['token_env'],
        'credentials': ['email_env', 'password_env']
    }

    @staticmethod
    def load_toml_config(config_path: Path) -> ClientConfig:
        """
        Load client configuration from TOML file

        Args:
            config_path: Path to the TOML configuration file

        Returns:
            ClientConfig object with all configuration data

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If required configuration is missing or the TOML is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'rb') as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}")

        # Validate required sections and keys
        ConfigLoader._validate_required_sections(config_data)
        ConfigLoader._validate_authentication(config_data['authentication'])

        return ClientConfig(
            base_url=config_data['api']['base_url'],
            project=config_data['api'].get('project'),
            authentication=config_data['authentication'],
            transport=config_data.get('transport', {}),
            logging=config_data.get('logging', {})
        )

    @staticmethod
    def _validate_required_sections(config_data: Dict[str, Any]) -> None:
        """
        Validate that all required configuration sections and keys are present

        Args:
            config_data: Parsed TOML configuration data

        Raises:
            ConfigurationError: If any required section or key is missing
        """
        missing_items = []

        for section_name, required_keys in ConfigLoader.REQUIRED_SECTIONS.items():
            if section_name not in config_data:
                missing_items.append(f"Section [{section_name}]")
            else:
                section_data = config_data[section_name]
                for key in required_keys:
                    if key not in section_data:
                        missing_items.append(f"Key '{key}' in section [{section_name}]")

        if missing_items:
            raise ConfigurationError(
                f"Missing required configuration items: {', '.join(missing_items)}"
            )

    @staticmethod
    def _validate_authentication(auth_config: Dict[str, Any]) -> None:
        auth_type = auth_config['type']
        if auth_type not in ConfigLoader.SUPPORTED_AUTH_TYPES:
            raise ConfigurationError(f"Unsupported authentication type: {auth_type}")

        missing_keys = [
            key for key in ConfigLoader.AUTH_TYPE_KEYS[auth_type] if key not in auth_config
        ]
        if missing_keys:
            raise ConfigurationError(
                f"Authentication type '{auth_type}' requires: {', '.join(missing_keys)}"
            )

    @staticmethod
    def validate_environment_variables(config: ClientConfig) -> bool:
        """
        Validate that all required environment variables are set

        Args:
            config: ClientConfig object to validate

        Returns:
            True if all environment variables are present

        Raises:
            EnvironmentError: If any required environment variables are missing
        """
        missing_vars = []

        # Check authentication environment variables
        for key, value in config.authentication.items():
            if key.endswith('_env') and isinstance(value, str):
                if not os.getenv(value):
                    missing_vars.append(value)

        if missing_vars:
            raise EnvironmentError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

        return True

    @staticmethod
    def get_environment_value(env_var_name: str) -> str:
        """
        Get environment variable value with proper error handling

        Args:
            env_var_name: Name of the environment variable

        Returns:
            Value of the environment variable

        Raises:
            EnvironmentError: If environment variable is not set
        """
        value = os.getenv(env_var_name)
        if value is None:
            raise EnvironmentError(f"Environment variable '{env_var_name}' is not set")
        return value


def configure_logging(config: ClientConfig, log_dir: Optional[Path] = None) -> None:
    """
    Configure root logging from the [logging] section

    Args:
        config: ClientConfig whose logging section supplies level and log_file_name
        log_dir: Directory for the log file; defaults to the working directory
    """
    level_name = str(config.logging.get('level', 'INFO')).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown logging level: {level_name}")

    handlers = [logging.StreamHandler()]
    log_file_name = config.logging.get('log_file_name')
    if log_file_name:
        log_path = (log_dir or Path.cwd()) / log_file_name
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
