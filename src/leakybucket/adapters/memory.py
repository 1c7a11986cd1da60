"""In-process dict-backed adapter.

Useful as a test double and for buckets that only need to outlive a single
object within one process.
"""

from __future__ import annotations

from leakybucket.errors import BucketNotFoundError


class MemoryAdapter:
    """Keep bucket records in a plain ``dict``.

    Parameters
    ----------
    records:
        Optional initial mapping of bucket ID to serialised record.  The
        mapping is used directly, not copied, so callers can inspect it.
    """

    def __init__(self, records: dict[str, str] | None = None) -> None:
        self.records: dict[str, str] = records if records is not None else {}

    def exists(self, bucket_id: str) -> bool:
        return bucket_id in self.records

    def save(self, bucket_id: str, contents: str) -> None:
        self.records[bucket_id] = contents

    def read(self, bucket_id: str) -> str:
        try:
            return self.records[bucket_id]
        except KeyError:
            raise BucketNotFoundError(
                f"Unable to read ({bucket_id})",
                context={"bucket_id": bucket_id, "operation": "read", "adapter": "memory"},
            ) from None

    def delete(self, bucket_id: str) -> None:
        if self.records.pop(bucket_id, None) is None:
            raise BucketNotFoundError(
                f"Unable to delete ({bucket_id})",
                context={"bucket_id": bucket_id, "operation": "delete", "adapter": "memory"},
            )
