"""
Core infrastructure layer.

- Configuration (`Settings`, `load_settings`, `ConfigError`)
- Logging (structured logging, `LogContext`)
- Health endpoint (`HealthServer`, `TickTracker`)
- Error taxonomy (`MarneBotError`, `FetchError`, `UpdateError`)

This package only groups infrastructure modules; import from the submodules
directly.
"""
