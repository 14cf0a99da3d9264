"""Resolver cache configuration models."""

from pydantic import BaseModel, Field


class CacheConfig(BaseModel):
    """TTLs for the per-resolver caches and the background sweep.

    The durations are tunables; nothing in the resolvers depends on a
    particular value.
    """

    theme_ttl_seconds: float = Field(
        default=300.0,  # 5 minutes
        gt=0,
        description="TTL for resolved themes and theme listings",
    )
    page_ttl_seconds: float = Field(
        default=180.0,  # 3 minutes
        gt=0,
        description="TTL for resolved page and section styles",
    )
    component_ttl_seconds: float = Field(
        default=300.0,  # 5 minutes
        gt=0,
        description="TTL for resolved component and variant styles",
    )
    sweep_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Interval of the background expired-entry sweep",
    )
