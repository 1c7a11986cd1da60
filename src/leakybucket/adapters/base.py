"""Storage adapter protocol.

A bucket persists itself as one opaque string per bucket ID.  Anything
offering the four methods below can store buckets; the adapter knows
nothing about drops, time or capacity.

Failure contract shared by every adapter shipped with the package:

* Backend failures raise :class:`~leakybucket.errors.AdapterError`, with
  the backend exception as ``cause``.
* ``read`` and ``delete`` of a record that does not exist raise
  :class:`~leakybucket.errors.BucketNotFoundError`.
* ``save`` overwrites any existing record for the ID.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageAdapter(Protocol):
    """Protocol that any bucket storage backend must satisfy."""

    def exists(self, bucket_id: str) -> bool:
        """Return ``True`` if a record is stored for *bucket_id*."""
        ...

    def save(self, bucket_id: str, contents: str) -> None:
        """Store *contents* for *bucket_id*, replacing any prior record."""
        ...

    def read(self, bucket_id: str) -> str:
        """Return the stored record for *bucket_id*."""
        ...

    def delete(self, bucket_id: str) -> None:
        """Remove the stored record for *bucket_id*."""
        ...
