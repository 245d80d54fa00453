"""
Configuration error hierarchy.

All configuration failures are fatal: the entry point catches `ConfigError`,
logs it, and exits with status 1 before connecting to Discord.

Exception Hierarchy
-------------------
ConfigError (base)
└── ConfigValidationError (missing, malformed, or out-of-range values)
"""

from src.core.exceptions import ErrorSeverity, MarneBotError


class ConfigError(MarneBotError):
    """
    Base exception for all configuration-related errors.

    Raised directly when the configuration file exists but cannot be read or
    does not contain a mapping.

    Example
    -------
    >>> try:
    ...     settings = load_settings("config.txt")
    ... except ConfigError as e:
    ...     logger.critical(f"Cannot start: {e}")
    ...     sys.exit(1)
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL
    DEFAULT_RETRYABLE = False


class ConfigValidationError(ConfigError):
    """
    Raised when a configuration value is missing or invalid.

    This exception is raised when:
    - `token` is absent or empty
    - neither `server_name` nor `server_id` is set
    - `game` is not a supported title
    - a number or boolean cannot be parsed, or is out of range
    """

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(message, details={"key": key})


__all__ = [
    "ConfigError",
    "ConfigValidationError",
]
