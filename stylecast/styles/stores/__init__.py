"""Record store adapters for style fragments."""

from stylecast.styles.stores.factory import create_record_store
from stylecast.styles.stores.http import HttpRecordStore
from stylecast.styles.stores.inmemory import InMemoryRecordStore
from stylecast.styles.stores.record_store import RecordStore

__all__ = [
    "HttpRecordStore",
    "InMemoryRecordStore",
    "RecordStore",
    "create_record_store",
]
