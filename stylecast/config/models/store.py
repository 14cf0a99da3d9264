"""Record store backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

StoreBackendType = Literal["inmemory", "http"]


class StoreConfig(BaseModel):
    """Configuration for the configuration record store adapter."""

    backend: StoreBackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    base_url: str | None = Field(
        default=None,
        description="Base URL of the record store REST endpoint (http backend)",
    )
    api_key: str | None = Field(
        default=None,
        description="API key sent with each request (from env var)",
    )
    table: str = Field(
        default="style_fragments",
        description="Record collection holding style fragments",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Per-request timeout in seconds",
    )
