"""Storage adapters for bucket records.

* :class:`MemoryAdapter` -- in-process ``dict``, mainly a test double.
* :class:`LocalAdapter` -- one JSON file per bucket on the local disk.
* :class:`SQLAdapter` -- one row per bucket in a SQLAlchemy-managed table.
* :class:`RedisAdapter` -- one string key per bucket in Redis.
"""

from __future__ import annotations

from .base import StorageAdapter
from .local import LocalAdapter
from .memory import MemoryAdapter
from .redis_store import RedisAdapter
from .sql import SQLAdapter, bucket_table

__all__ = [
    "StorageAdapter",
    "MemoryAdapter",
    "LocalAdapter",
    "SQLAdapter",
    "RedisAdapter",
    "bucket_table",
]
