"""
Configuration subsystem.

- **config.py**: `Settings` record and `load_settings()` (file + environment + defaults)
- **errors.py**: `ConfigError` hierarchy

Usage
-----
```python
from src.core.config import ConfigError, load_settings

try:
    settings = load_settings()
except ConfigError as exc:
    ...
```
"""

from src.core.config.config import (
    DEFAULTS,
    Environment,
    Game,
    Settings,
    load_settings,
    read_config_file,
)
from src.core.config.errors import ConfigError, ConfigValidationError

__all__ = [
    "DEFAULTS",
    "ConfigError",
    "ConfigValidationError",
    "Environment",
    "Game",
    "Settings",
    "load_settings",
    "read_config_file",
]
