"""
Static configuration for the Marne status bot.

Purpose
-------
Build the single, immutable `Settings` record the bot runs with. Settings are
assembled once at startup from three sources and passed explicitly to every
component; nothing reads the environment after `load_settings()` returns.

Sources (lowest to highest precedence)
--------------------------------------
1. Built-in defaults (`DEFAULTS`)
2. Config file: `config.txt` (TOML `key = 'value'` lines, the format the
   container entrypoint writes) or any `.yaml` / `.yml` file
3. Environment variables, lowercase as the container sets them
   (`token`, `game`, ...) or uppercase (`TOKEN`, `GAME`, ...)

A `.env` file in the working directory is loaded into the process
environment first (python-dotenv).

Validation
----------
- `token` is required and must be non-empty
- at least one of `server_name` / `server_id` is required
- `game` must be a supported title (`bf1`, `bfv`)
- numbers and booleans must parse and stay within bounds

Any violation raises `ConfigValidationError`. The container placeholders
(`default_token_value`, ...) count as unset.

Environment Variables
---------------------
Required:
- token: Discord bot token
- server_name or server_id: server to monitor

Optional (with defaults):
- game: bf1
- set_banner_image: true
- poll_interval: 60 (seconds)
- health_host / health_port: 0.0.0.0 / 3030
- log_level: INFO
- log_json: JSON logs (default: production only)
- environment: development
- CONFIG_PATH: config file location (default: config.txt)
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv

from src.core.config.errors import ConfigError, ConfigValidationError

# Bootstrap logger; the structured logging stack is configured from Settings
logger = logging.getLogger(__name__)


# ============================================================================
# Enums and Constants
# ============================================================================


class Game(Enum):
    """Supported Battlefield titles."""

    BF1 = "bf1"
    BFV = "bfv"

    @classmethod
    def from_string(cls, value: str) -> "Game":
        try:
            return cls(value.strip().lower())
        except ValueError:
            supported = ", ".join(g.value for g in cls)
            raise ConfigValidationError(
                "game", f"Unsupported game '{value}', expected one of: {supported}"
            ) from None


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid")  # Logs warning
        <Environment.DEVELOPMENT: 'development'>
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


DEFAULT_CONFIG_PATH = "config.txt"

DEFAULTS: Dict[str, Any] = {
    "token": "",
    "game": Game.BF1.value,
    "server_name": None,
    "server_id": None,
    "set_banner_image": True,
    "poll_interval": 60.0,
    "health_host": "0.0.0.0",
    "health_port": 3030,
    "log_level": "INFO",
    "log_json": None,
    "environment": Environment.DEVELOPMENT.value,
}

# Values the container image ships in ENV before the operator overrides them
PLACEHOLDER_VALUES = frozenset(
    {
        "default_token_value",
        "default_server_name_value",
        "default_server_id_value",
    }
)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off"}


# ============================================================================
# Settings Record
# ============================================================================


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Immutable process-wide settings, built once by `load_settings()`.

    Attributes
    ----------
    token:
        Discord bot token.
    game:
        Title whose server list is polled.
    server_name / server_id:
        Server to monitor; the name wins when both are set.
    set_banner_image:
        Whether the profile image follows the current map.
    poll_interval:
        Seconds between ticks.
    health_host / health_port:
        Bind address of the health endpoint.
    """

    token: str
    game: Game = Game.BF1
    server_name: Optional[str] = None
    server_id: Optional[int] = None
    set_banner_image: bool = True
    poll_interval: float = 60.0
    health_host: str = "0.0.0.0"
    health_port: int = 3030
    log_level: str = "INFO"
    log_json: Optional[bool] = None
    environment: Environment = Environment.DEVELOPMENT

    @property
    def server_identifier(self) -> Union[str, int]:
        """Name of the monitored server, or its ID when no name is set."""
        if self.server_name:
            return self.server_name
        if self.server_id is None:
            raise ConfigValidationError(
                "server_name", "either server_name or server_id must be set"
            )
        return self.server_id

    def is_production(self) -> bool:
        return self.environment is Environment.PRODUCTION

    def summary(self) -> Dict[str, Any]:
        """Non-sensitive settings summary for startup logs."""
        return {
            "game": self.game.value,
            "server_name": self.server_name,
            "server_id": self.server_id,
            "set_banner_image": self.set_banner_image,
            "poll_interval": self.poll_interval,
            "health_port": self.health_port,
            "log_level": self.log_level,
            "environment": self.environment.value,
            "token_set": bool(self.token),
        }


# ============================================================================
# Config File Parsing
# ============================================================================


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a config file into a flat dictionary.

    `.yaml` / `.yml` files are parsed with PyYAML; anything else is parsed as
    TOML. A missing file yields an empty dictionary.

    Raises
    ------
    ConfigError:
        If the file cannot be parsed or its root is not a mapping.
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"Config file {path} not found; using environment and defaults")
        return {}

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = tomllib.loads(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(
            f"Config file {path} is not valid: {exc}", details={"path": str(path)}
        ) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file {path} must contain key/value pairs",
            details={"path": str(path), "root_type": type(data).__name__},
        )
    return {str(key).lower(): value for key, value in data.items()}


# ============================================================================
# Loader
# ============================================================================


class _SettingsLoader:
    """Resolve raw values from environment, file and defaults, then coerce them."""

    def __init__(self, file_values: Mapping[str, Any], environ: Mapping[str, str]) -> None:
        self._file = file_values
        self._environ = environ
        self.sources: Dict[str, str] = {}

    def _raw(self, key: str) -> Any:
        for env_key in (key, key.upper()):
            value = self._environ.get(env_key)
            if value is not None and value.strip() and value not in PLACEHOLDER_VALUES:
                self.sources[key] = "environment"
                return value.strip()

        value = self._file.get(key)
        if isinstance(value, str):
            value = value.strip()
            if value in PLACEHOLDER_VALUES:
                value = None
        if value is not None and value != "":
            self.sources[key] = "file"
            return value

        self.sources[key] = "default"
        return DEFAULTS[key]

    def str_value(self, key: str) -> Optional[str]:
        value = self._raw(key)
        return None if value is None else str(value)

    def int_value(
        self,
        key: str,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> Optional[int]:
        value = self._raw(key)
        if value is None:
            return None
        if isinstance(value, bool):
            raise ConfigValidationError(key, f"{key}={value!r} is not a valid integer")
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            raise ConfigValidationError(key, f"{key}={value!r} is not a valid integer") from None
        self._check_bounds(key, parsed, min_val, max_val)
        return parsed

    def float_value(
        self,
        key: str,
        min_val: Optional[float] = None,
        max_val: Optional[float] = None,
    ) -> float:
        value = self._raw(key)
        if isinstance(value, bool):
            raise ConfigValidationError(key, f"{key}={value!r} is not a valid number")
        try:
            parsed = float(value)
        except (TypeError, ValueError):
            raise ConfigValidationError(key, f"{key}={value!r} is not a valid number") from None
        self._check_bounds(key, parsed, min_val, max_val)
        return parsed

    def bool_value(self, key: str) -> Optional[bool]:
        """Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive)."""
        value = self._raw(key)
        if value is None or isinstance(value, bool):
            return value
        normalized = str(value).strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ConfigValidationError(key, f"{key}={value!r} is not a valid boolean")

    @staticmethod
    def _check_bounds(key, value, min_val, max_val) -> None:
        if min_val is not None and value < min_val:
            raise ConfigValidationError(key, f"{key}={value} is below minimum {min_val}")
        if max_val is not None and value > max_val:
            raise ConfigValidationError(key, f"{key}={value} exceeds maximum {max_val}")


def load_settings(
    path: Union[str, Path, None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Load and validate settings.

    Parameters
    ----------
    path:
        Config file to read. Defaults to `CONFIG_PATH` or `config.txt`.
    environ:
        Environment mapping. Defaults to `os.environ` (after loading `.env`).

    Raises
    ------
    ConfigError:
        If the config file is unreadable or any value is missing or invalid.

    Example
    -------
    >>> settings = load_settings(environ={"token": "abc", "server_name": "My Server"})
    >>> settings.game
    <Game.BF1: 'bf1'>
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    if path is None:
        path = environ.get("CONFIG_PATH") or DEFAULT_CONFIG_PATH

    loader = _SettingsLoader(read_config_file(path), environ)

    token = loader.str_value("token") or ""
    if not token.strip():
        raise ConfigValidationError("token", "token is required and must not be empty")

    game = Game.from_string(loader.str_value("game") or Game.BF1.value)

    server_name = loader.str_value("server_name")
    server_id = loader.int_value("server_id")
    if not server_name and server_id is None:
        raise ConfigValidationError(
            "server_name", "either server_name or server_id must be set"
        )

    log_level = (loader.str_value("log_level") or "INFO").upper()
    if log_level not in VALID_LOG_LEVELS:
        logger.warning(f"Invalid log_level '{log_level}', using INFO")
        log_level = "INFO"

    settings = Settings(
        token=token.strip(),
        game=game,
        server_name=server_name,
        server_id=server_id,
        set_banner_image=bool(loader.bool_value("set_banner_image")),
        poll_interval=loader.float_value("poll_interval", min_val=5, max_val=3600),
        health_host=loader.str_value("health_host") or "0.0.0.0",
        health_port=loader.int_value("health_port", min_val=1, max_val=65535) or 3030,
        log_level=log_level,
        log_json=loader.bool_value("log_json"),
        environment=Environment.from_string(
            loader.str_value("environment") or Environment.DEVELOPMENT.value
        ),
    )

    logger.debug(f"Settings sources: {loader.sources}")
    return settings


__all__ = [
    "DEFAULTS",
    "DEFAULT_CONFIG_PATH",
    "Environment",
    "Game",
    "Settings",
    "load_settings",
    "read_config_file",
]
