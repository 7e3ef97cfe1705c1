"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), set_config(), load_from_env()
Hidden: Config sources, validation logic, environment parsing

Can be replaced with different config systems (Consul, etcd, AWS Parameter Store).
"""

import os
from typing import Any, Dict

from dotenv import load_dotenv


# Configuration Contract: Required and Optional Keys
# This defines the black box interface - what the config module guarantees to provide

REQUIRED_CONFIG_KEYS = {
    "host": "API server bind address",
    "port": "API server port",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
    "session_timeout": "Session max inactive interval in seconds",
    "session_cookie_name": "Name of the session cookie",
    "session_sweep_interval": "Seconds between expired session sweeps (0 disables)",
    "session_stream_interval": "Seconds between pushed session info updates",
}

OPTIONAL_CONFIG_KEYS = {
    "debug": {
        "description": "Enable debug mode (uvicorn reload)",
        "default": False,
    },
    "cookie_secure": {
        "description": "Send the session cookie over HTTPS only",
        "default": False,
    },
    "session_max_uis": {
        "description": "Open pages kept per session on one node",
        "default": 5,
    },
}


class ConfigModule:
    """Configuration management module."""

    def __init__(self):
        """Initialize with environment variables (and a .env file if present)."""
        load_dotenv()
        self._config = self._load_from_env()
        self._validate_required_keys()

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ValueError: If required keys are missing or out of range
        """
        missing_keys = []
        for key in REQUIRED_CONFIG_KEYS:
            if key not in self._config or self._config[key] is None:
                missing_keys.append(key)

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables and deployment configuration."
            )

        if self._config["session_timeout"] < 1:
            raise ValueError("SESSION_TIMEOUT must be a positive number of seconds")

        if self._config["session_stream_interval"] < 1:
            raise ValueError("SESSION_STREAM_INTERVAL must be a positive number of seconds")

        if self._config["session_max_uis"] < 1:
            raise ValueError("SESSION_MAX_UIS must be at least 1")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        return {
            # API settings
            "host": os.getenv("API_HOST", "0.0.0.0"),
            "port": int(os.getenv("API_PORT", "8080")),
            "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
            "debug": os.getenv("DEBUG", "false").lower() == "true",
            # Session settings
            "session_timeout": int(os.getenv("SESSION_TIMEOUT", "1800")),
            "session_cookie_name": os.getenv("SESSION_COOKIE_NAME", "SESSION"),
            "session_sweep_interval": int(os.getenv("SESSION_SWEEP_INTERVAL", "60")),
            "session_stream_interval": int(os.getenv("SESSION_STREAM_INTERVAL", "5")),
            "cookie_secure": os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true",
            "session_max_uis": int(os.getenv("SESSION_MAX_UIS", "5")),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications

        Example:
            >>> schema = ConfigModule.get_config_schema()
            >>> print(schema['required']['session_timeout'])
            'Session max inactive interval in seconds'
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


__all__ = ["get_config", "ConfigModule"]
