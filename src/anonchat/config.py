"""Centralized configuration management for AnonChat.

Reads from environment variables with sensible defaults.
The CLI and the controllers use this module for configuration.

Environment variables follow the pattern ANONCHAT_*.

Example:
    >>> from anonchat.config import get_config
    >>> config = get_config()
    >>> print(config.backend_url)
    http://localhost:8000
"""

import logging
import os
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:8000"


def _getenv_int(key: str, default: int) -> int:
    """Get integer from environment with fallback to default."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        log.warning(f"Invalid integer value for {key}={value}, using default {default}")
        return default


def _getenv_float(key: str, default: float) -> float:
    """Get float from environment with fallback to default."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        log.warning(f"Invalid float value for {key}={value}, using default {default}")
        return default


@dataclass
class AnonChatConfig:
    """AnonChat configuration loaded from environment variables.

    All fields have defaults that work against a local development backend.

    Attributes
    ----------
    backend_url : str
        Base URL of the chat backend. Trailing slashes are stripped.
    poll_interval_ms : int
        Delay between two message refreshes of an active room, in milliseconds.
    request_timeout : float
        Timeout for a single HTTP request in seconds.
    log_level : str
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    viewport_height : int
        Number of messages visible at once in the terminal chat view.
    """

    backend_url: str = field(
        default_factory=lambda: os.getenv("ANONCHAT_BACKEND_URL", DEFAULT_BACKEND_URL)
    )
    poll_interval_ms: int = field(
        default_factory=lambda: _getenv_int("ANONCHAT_POLL_INTERVAL_MS", 2000)
    )
    request_timeout: float = field(
        default_factory=lambda: _getenv_float("ANONCHAT_REQUEST_TIMEOUT", 10.0)
    )
    log_level: str = field(
        default_factory=lambda: os.getenv("ANONCHAT_LOG_LEVEL", "WARNING")
    )
    viewport_height: int = field(
        default_factory=lambda: _getenv_int("ANONCHAT_VIEWPORT_HEIGHT", 20)
    )

    def __post_init__(self):
        self._validate()
        self._log_config()

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000

    def _validate(self):
        """Validate configuration values.

        Raises
        ------
        ValueError
            If configuration is invalid.
        """
        # Empty string means "unset", like the frontend's `||` fallback
        self.backend_url = (self.backend_url or DEFAULT_BACKEND_URL).rstrip("/")

        if self.poll_interval_ms < 1:
            raise ValueError(
                f"Invalid poll interval: {self.poll_interval_ms}ms. Must be positive"
            )

        if self.request_timeout <= 0:
            raise ValueError(
                f"Invalid request timeout: {self.request_timeout}s. Must be positive"
            )

        if self.viewport_height < 1:
            raise ValueError(
                f"Invalid viewport height: {self.viewport_height}. Must be at least 1"
            )

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_levels:
            log.warning(
                f"Invalid log level '{self.log_level}', using WARNING. "
                f"Valid levels: {', '.join(valid_levels)}"
            )
            self.log_level = "WARNING"
        self.log_level = self.log_level.upper()

    def _log_config(self):
        log.debug("AnonChat Configuration:")
        log.debug(f"  Backend: {self.backend_url}")
        log.debug(f"  Poll Interval: {self.poll_interval_ms}ms")
        log.debug(f"  Request Timeout: {self.request_timeout}s")
        log.debug(f"  Log Level: {self.log_level}")


# Global config instance (singleton pattern)
_config: AnonChatConfig | None = None


def get_config() -> AnonChatConfig:
    """Get or create the global configuration instance.

    Returns
    -------
    AnonChatConfig
        Global configuration instance loaded from environment variables.
    """
    global _config
    if _config is None:
        _config = AnonChatConfig()
    return _config


def reload_config() -> AnonChatConfig:
    """Reload configuration from environment.

    Useful for testing or when environment variables change at runtime.
    """
    global _config
    _config = AnonChatConfig()
    return _config
