"""Configuration model exports.

    from stylecast.config.models import CacheConfig, StoreConfig
"""

from stylecast.config.models.cache import CacheConfig
from stylecast.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from stylecast.config.models.store import StoreConfig

__all__ = [
    "CacheConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "StoreConfig",
]
