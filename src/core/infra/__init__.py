"""
Infrastructure services.

- health: liveness endpoint and tick tracker
"""

from src.core.infra.health import HealthServer, HealthStatus, TickTracker, create_health_app

__all__ = [
    "HealthServer",
    "HealthStatus",
    "TickTracker",
    "create_health_app",
]
