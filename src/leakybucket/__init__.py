"""leakybucket: persistent leaky-bucket rate limiting.

Public re-exports
-----------------

* **Bucket:** :class:`Bucket`
* **Configuration:** :class:`BucketConfig`
* **State:** :class:`BucketState`
* **Adapters:** :class:`StorageAdapter` protocol and the shipped backends
* **Errors:** Every :class:`LeakyBucketError` subclass and :class:`ErrorCode`

Usage::

    from leakybucket import Bucket, BucketCapacityError, LocalAdapter

    bucket = Bucket("user-42", LocalAdapter("/tmp/buckets"), {"capacity": 5, "leak": 30})
    bucket.leak()
    try:
        bucket.fill()
    except BucketCapacityError:
        ...
    finally:
        bucket.save()
"""

from __future__ import annotations

# ── Adapters ───────────────────────────────────────────────────────────
from leakybucket.adapters import (
    LocalAdapter,
    MemoryAdapter,
    RedisAdapter,
    SQLAdapter,
    StorageAdapter,
)

# ── Bucket ─────────────────────────────────────────────────────────────
from leakybucket.bucket import Bucket

# ── Configuration ──────────────────────────────────────────────────────
from leakybucket.config import DEFAULT_CAPACITY, DEFAULT_LEAK, BucketConfig

# ── Errors ─────────────────────────────────────────────────────────────
from leakybucket.errors import (
    AdapterError,
    BucketCapacityError,
    BucketConfigError,
    BucketCorruptError,
    BucketNotFoundError,
    ErrorCode,
    LeakyBucketError,
)

# ── Models ─────────────────────────────────────────────────────────────
from leakybucket.models import BucketState, decode_state, encode_state

__all__ = [
    # Bucket
    "Bucket",
    # Configuration
    "BucketConfig",
    "DEFAULT_CAPACITY",
    "DEFAULT_LEAK",
    # State
    "BucketState",
    "encode_state",
    "decode_state",
    # Adapters
    "StorageAdapter",
    "MemoryAdapter",
    "LocalAdapter",
    "SQLAdapter",
    "RedisAdapter",
    # Errors
    "LeakyBucketError",
    "ErrorCode",
    "BucketConfigError",
    "BucketCorruptError",
    "BucketCapacityError",
    "AdapterError",
    "BucketNotFoundError",
]
