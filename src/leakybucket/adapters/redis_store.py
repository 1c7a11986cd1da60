"""Redis adapter.

Each bucket is a plain string key ``<key_prefix>:<id>`` on a synchronous
:class:`redis.Redis` client.  No expiry is set; a bucket record lives until
it is deleted.
"""

from __future__ import annotations

from redis import Redis
from redis.exceptions import RedisError

from leakybucket.errors import AdapterError, BucketNotFoundError
from leakybucket.observability import get_logger

log = get_logger("leakybucket.adapters.redis")


class RedisAdapter:
    """Store bucket records as Redis string keys.

    Parameters
    ----------
    client:
        A synchronous Redis client.  Responses may be ``bytes`` or ``str``
        (``decode_responses``); both are handled.
    key_prefix:
        Namespace prepended to every bucket ID.
    """

    def __init__(self, client: Redis, key_prefix: str = "bucket") -> None:
        self.client = client
        self.key_prefix = key_prefix

    def _make_key(self, bucket_id: str) -> str:
        return f"{self.key_prefix}:{bucket_id}"

    def _fail(self, operation: str, bucket_id: str, exc: RedisError) -> AdapterError:
        log.warning(
            "redis %s failed",
            operation,
            extra={"extra_fields": {"bucket_id": bucket_id, "error": str(exc)}},
        )
        return AdapterError(
            f"Unable to {operation} ({bucket_id})",
            context={"bucket_id": bucket_id, "operation": operation, "adapter": "redis"},
            cause=exc,
        )

    def exists(self, bucket_id: str) -> bool:
        try:
            return bool(self.client.exists(self._make_key(bucket_id)))
        except RedisError as exc:
            raise self._fail("check", bucket_id, exc) from exc

    def save(self, bucket_id: str, contents: str) -> None:
        try:
            self.client.set(self._make_key(bucket_id), contents)
        except RedisError as exc:
            raise self._fail("save", bucket_id, exc) from exc
        log.debug("redis save", extra={"extra_fields": {"bucket_id": bucket_id}})

    def read(self, bucket_id: str) -> str:
        try:
            value = self.client.get(self._make_key(bucket_id))
        except RedisError as exc:
            raise self._fail("read", bucket_id, exc) from exc
        if value is None:
            raise BucketNotFoundError(
                f"Unable to read ({bucket_id})",
                context={"bucket_id": bucket_id, "operation": "read", "adapter": "redis"},
            )
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def delete(self, bucket_id: str) -> None:
        try:
            deleted = self.client.delete(self._make_key(bucket_id))
        except RedisError as exc:
            raise self._fail("delete", bucket_id, exc) from exc
        if not deleted:
            raise BucketNotFoundError(
                f"Unable to delete ({bucket_id})",
                context={"bucket_id": bucket_id, "operation": "delete", "adapter": "redis"},
            )
        log.debug("redis delete", extra={"extra_fields": {"bucket_id": bucket_id}})
