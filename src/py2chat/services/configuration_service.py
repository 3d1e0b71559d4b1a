# src/py2chat/services/configuration_service.py
"""
Configuration service for loading and saving client settings.

Settings live in a small YAML file:

    host: chat.example.org
    port: 1300
    username: alice
    log_level: INFO
"""
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from py2chat.core.errors import ConfigurationError, ErrorCodes
from py2chat.models.connection import ConnectionConfig

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 1300


@dataclass
class ClientSettings:
    """Settings used to start a chat session."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    username: Optional[str] = None
    log_level: str = "INFO"

    def to_dict(self) -> dict:
        """Convert to dictionary for YAML serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientSettings':
        """Create from dictionary loaded from YAML, filling in defaults."""
        defaults = cls()
        return cls(
            host=data.get('host', defaults.host),
            port=data.get('port', defaults.port),
            username=data.get('username', defaults.username),
            log_level=str(data.get('log_level', defaults.log_level)).upper()
        )

    def to_connection_config(self) -> ConnectionConfig:
        """Convert to ConnectionConfig for the connection manager."""
        return ConnectionConfig(host=self.host, port=self.port)


class ConfigurationService:
    """
    Service for managing client configuration.

    Attributes:
        logger: Logger instance
        config_path: Path of the YAML settings file
    """

    def __init__(self, config_path: Union[str, Path]):
        """
        Initialize the configuration service.

        Args:
            config_path: Path to the YAML settings file
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = Path(config_path)

    def load(self) -> ClientSettings:
        """
        Load settings from the YAML file.

        Returns:
            ClientSettings: Loaded settings, or defaults if the file is missing

        Raises:
            ConfigurationError: If the file cannot be parsed or holds
                invalid values
        """
        if not self.config_path.exists():
            self.logger.info(f"Settings file not found: {self.config_path}. Using defaults.")
            return ClientSettings()

        try:
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Could not read settings file {self.config_path}",
                error_code=ErrorCodes.CONFIG_INVALID,
                cause=e
            )

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Settings file {self.config_path} must contain a mapping",
                error_code=ErrorCodes.CONFIG_INVALID
            )

        settings = ClientSettings.from_dict(data)
        valid, errors = settings.to_connection_config().validate()
        if not valid:
            raise ConfigurationError(
                f"Invalid settings in {self.config_path}: {'; '.join(errors)}",
                error_code=ErrorCodes.CONFIG_INVALID
            )

        self.logger.info(f"Loaded settings from {self.config_path}")
        return settings

    def save(self, settings: ClientSettings) -> None:
        """
        Write settings to the YAML file.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as f:
                yaml.dump(settings.to_dict(), f, default_flow_style=False, sort_keys=False, indent=2)
        except OSError as e:
            raise ConfigurationError(
                f"Could not write settings file {self.config_path}",
                error_code=ErrorCodes.CONFIG_SAVE_ERROR,
                cause=e
            )
        self.logger.info(f"Wrote settings to {self.config_path}")
