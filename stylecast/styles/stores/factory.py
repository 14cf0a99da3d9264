"""RecordStore factory for creating backend instances.

The endpoint URL and key may come from TOML or from the environment:
- STYLECAST_STORE_URL: REST endpoint of the record store
- STYLECAST_STORE_API_KEY: API key for the endpoint
"""

import os

from stylecast.config.models.store import StoreConfig
from stylecast.observability.logging import get_logger
from stylecast.styles.stores.http import HttpRecordStore
from stylecast.styles.stores.inmemory import InMemoryRecordStore
from stylecast.styles.stores.record_store import RecordStore

logger = get_logger(__name__)


def create_record_store(config: StoreConfig) -> RecordStore:
    """Create a RecordStore instance based on configuration.

    Args:
        config: Record store configuration from settings

    Returns:
        Configured RecordStore instance

    Raises:
        ValueError: If backend type is not supported or the URL is missing
    """
    backend = config.backend

    if backend == "inmemory":
        logger.info("creating_record_store", backend="inmemory")
        return InMemoryRecordStore()

    elif backend == "http":
        base_url = config.base_url or os.environ.get("STYLECAST_STORE_URL")
        api_key = config.api_key or os.environ.get("STYLECAST_STORE_API_KEY")
        if not base_url:
            raise ValueError("HTTP record store requires base_url or STYLECAST_STORE_URL")

        logger.info(
            "creating_record_store",
            backend="http",
            url=base_url,
            table=config.table,
            has_api_key=bool(api_key),
        )
        return HttpRecordStore(
            base_url,
            table=config.table,
            api_key=api_key,
            timeout=config.timeout_seconds,
        )

    else:
        raise ValueError(f"Unsupported record store backend: {backend}")
