"""Persistent leaky bucket.

A :class:`Bucket` holds a number of *drops* that drain at a constant rate.
Callers add drops for each unit of work and refuse the work once the bucket
has no room left.  The bucket state is loaded from and saved to a
:class:`~leakybucket.adapters.StorageAdapter` so that it survives process
restarts and can be shared between workers.

Typical request-throttling flow::

    from leakybucket import Bucket, LocalAdapter

    bucket = Bucket("api-user-42", LocalAdapter("/var/lib/buckets"),
                    {"capacity": 60, "leak": 60})
    bucket.leak()
    if bucket.has_capacity():
        bucket.fill()
        bucket.save()
        handle_request()
    else:
        bucket.save()
        reject(retry_after=bucket.get_seconds_until_capacity())

Nothing happens in the background: time only affects the bucket when
:meth:`Bucket.leak` is called, and storage is only written by
:meth:`Bucket.save` and :meth:`Bucket.delete`.

Concurrency
-----------
There is no locking.  Two holders of the same bucket ID that load, mutate
and save concurrently race, and the last ``save()`` wins.  Callers that
need safe concurrent access must serialise it themselves, for example
with a lock keyed by bucket ID.
"""

from __future__ import annotations

import copy
import time as _time
from collections.abc import Callable, Mapping
from typing import Any

from leakybucket.adapters.base import StorageAdapter
from leakybucket.config import BucketConfig
from leakybucket.errors import BucketCapacityError, BucketConfigError
from leakybucket.models import BucketState, decode_state, encode_state
from leakybucket.observability import NoopMetricsHook, get_logger
from leakybucket.observability.metrics import MetricsHook
from leakybucket.utils.dotpath import delete_path, get_path, has_path, set_path

log = get_logger("leakybucket.bucket")


def _now() -> int:
    return int(_time.time())


class Bucket:
    """A leaky bucket bound to one ID and one storage adapter.

    Parameters
    ----------
    bucket_id:
        Identifier of the bucket in storage.
    adapter:
        Storage backend holding the bucket record.
    settings:
        A :class:`~leakybucket.config.BucketConfig` or a mapping with
        ``capacity`` and ``leak`` (drops per minute).  Missing keys fall
        back to the defaults.
    clock:
        Zero-argument callable returning the current UNIX time in whole
        seconds.  Defaults to the system clock.
    metrics:
        Optional :class:`~leakybucket.observability.MetricsHook`.

    Raises
    ------
    BucketConfigError
        If *settings* holds a non-integer or non-positive value.
    BucketCorruptError
        If the stored record cannot be parsed or lacks ``drops``/``time``.
    AdapterError
        If the adapter fails while checking for or reading the record.
    """

    def __init__(
        self,
        bucket_id: str,
        adapter: StorageAdapter,
        settings: BucketConfig | Mapping[str, Any] | None = None,
        *,
        clock: Callable[[], int] | None = None,
        metrics: MetricsHook | None = None,
    ) -> None:
        self._id = bucket_id
        self._adapter = adapter
        self._clock = clock or _now
        self._metrics = metrics or NoopMetricsHook()

        if isinstance(settings, BucketConfig):
            self._config = settings
        else:
            try:
                self._config = BucketConfig.from_settings(settings)
            except BucketConfigError as exc:
                raise BucketConfigError(
                    f"Invalid bucket configuration for bucket ID: {bucket_id} ({exc.message})",
                    context={"bucket_id": bucket_id, **exc.context},
                    cause=exc,
                ) from exc

        if self.exists():
            self._state = decode_state(adapter.read(bucket_id), bucket_id)
            log.debug(
                "bucket loaded",
                extra={"extra_fields": {"bucket_id": bucket_id, "drops": self._state.drops}},
            )
        else:
            self._state = BucketState.fresh(self._clock())

    def __repr__(self) -> str:
        return (
            f"Bucket(id={self._id!r}, drops={self._state.drops!r}, "
            f"capacity={self._config.capacity}, leak={self._config.leak})"
        )

    # ── Identity & storage ─────────────────────────────────────────────

    @property
    def bucket_id(self) -> str:
        return self._id

    @property
    def adapter(self) -> StorageAdapter:
        return self._adapter

    @property
    def config(self) -> BucketConfig:
        return self._config

    def exists(self) -> bool:
        """Return ``True`` if a record for this bucket ID is in storage."""
        return self._adapter.exists(self._id)

    def save(self) -> Bucket:
        """Persist the current state, replacing any stored record.

        Raises
        ------
        AdapterError
            If the adapter cannot write.  The in-memory state is untouched.
        """
        contents = encode_state(self._state)
        started = _time.perf_counter()
        self._adapter.save(self._id, contents)
        elapsed_ms = (_time.perf_counter() - started) * 1000

        self._metrics.increment("leakybucket.saves_total")
        self._metrics.timing("leakybucket.save_duration_ms", elapsed_ms)
        log.debug(
            "bucket saved",
            extra={"extra_fields": {"bucket_id": self._id, "drops": self._state.drops, "ms": elapsed_ms}},
        )
        return self

    def get(self) -> dict[str, Any]:
        """Return a copy of the full bucket state (``drops``, ``time``,
        and ``data`` when attached)."""
        return self._state.as_dict()

    def reset(self) -> Bucket:
        """Empty the bucket and drop attached data, in memory only."""
        self._state = BucketState.fresh(self._clock())
        return self

    def delete(self) -> Bucket:
        """Reset the bucket and remove its record from storage.

        Raises
        ------
        AdapterError
            If the adapter cannot delete the record, including when no
            record exists (:class:`~leakybucket.errors.BucketNotFoundError`).
        """
        self.reset()
        self._adapter.delete(self._id)
        self._metrics.increment("leakybucket.deletes_total")
        log.debug("bucket deleted", extra={"extra_fields": {"bucket_id": self._id}})
        return self

    # ── Capacity ───────────────────────────────────────────────────────

    def is_full(self) -> bool:
        return self._state.drops >= self._config.capacity

    def get_capacity(self) -> int:
        return self._config.capacity

    def get_capacity_used(self) -> float:
        return self._state.drops

    def get_capacity_remaining(self) -> float:
        if self.is_full():
            return 0
        return self._config.capacity - self._state.drops

    def has_capacity(self, drops: int = 1) -> bool:
        """Return ``True`` if *drops* more drops fit without overflowing.

        The sign of *drops* is ignored.
        """
        return self._config.capacity >= self._state.drops + abs(drops)

    # ── Rates & timing ─────────────────────────────────────────────────

    def get_leak_per_second(self) -> float:
        return self._config.leak_per_second

    get_leak_rate = get_leak_per_second

    def get_seconds_per_drop(self) -> float:
        return 1 / self.get_leak_per_second()

    def get_seconds_until_capacity(self, drops: int = 1) -> float:
        """Return how many seconds of leaking are needed before *drops*
        more drops fit.  ``0`` when they already fit."""
        drops = abs(drops)
        if self.get_capacity_remaining() > drops:
            return 0
        return self.get_seconds_per_drop() * ((self._state.drops + drops) - self._config.capacity)

    def get_seconds_until_empty(self) -> float:
        return self._state.drops * self.get_seconds_per_drop()

    def get_last_time(self) -> int:
        return self._state.time

    def touch(self) -> Bucket:
        """Set the bucket timestamp to now without changing drops."""
        self._state.time = self._clock()
        return self

    # ── Add ────────────────────────────────────────────────────────────

    def fill(self, drops: int = 1, allow_overflow: bool = False) -> Bucket:
        """Add *drops* drops (sign ignored) to the bucket.

        With ``allow_overflow=True`` the bucket may end up above capacity;
        call :meth:`overflow` to clamp it.

        Raises
        ------
        BucketCapacityError
            If overflow is not allowed and the drops do not fit.  The
            bucket is left unchanged.
        """
        drops = abs(drops)
        if not allow_overflow and not self.has_capacity(drops):
            self._metrics.increment("leakybucket.fill_rejected_total")
            log.info(
                "fill rejected",
                extra={"extra_fields": {
                    "bucket_id": self._id,
                    "drops": drops,
                    "used": self._state.drops,
                    "capacity": self._config.capacity,
                }},
            )
            raise BucketCapacityError(
                f"Unable to fill {drops} drops to bucket ({self._id}): Not enough capacity",
                context={
                    "bucket_id": self._id,
                    "drops": drops,
                    "capacity": self._config.capacity,
                    "used": self._state.drops,
                },
            )

        self._state.drops += drops
        self._state.time = self._clock()
        self._metrics.increment(
            "leakybucket.fill_total", drops, tags={"overflow": str(allow_overflow).lower()},
        )
        return self

    # ── Subtract ───────────────────────────────────────────────────────

    def leak(self) -> Bucket:
        """Drain the drops that have leaked since the last timestamp.

        Never goes below zero.  A clock that reads earlier than the stored
        timestamp leaks nothing.
        """
        now = self._clock()
        # Clamped: a clock running backwards must not add drops.
        elapsed = max(0, now - self._state.time)
        leakage = elapsed * self.get_leak_per_second()
        before = self._state.drops

        self._state.drops = max(0.0, before - leakage)
        self._state.time = now
        self._metrics.gauge("leakybucket.leaked_drops", before - self._state.drops)
        return self

    def spill(self, drops: int = 1) -> Bucket:
        """Remove *drops* drops (sign ignored), never going below zero."""
        self._state.drops = max(0.0, self._state.drops - abs(drops))
        self._state.time = self._clock()
        return self

    def overflow(self) -> Bucket:
        """Discard drops in excess of capacity.  Does not touch the timestamp."""
        if self._state.drops > self._config.capacity:
            self._state.drops = float(self._config.capacity)
        return self

    def dump(self) -> Bucket:
        """Empty the bucket."""
        self._state.drops = 0.0
        self._state.time = self._clock()
        return self

    # ── Data ───────────────────────────────────────────────────────────

    def has_data(self, key: str | None = None) -> bool:
        """Return ``True`` if *key* (a dot path) is set.

        Without *key*, return ``True`` if any data is attached.
        """
        data = self._state.data
        if not data:
            return False
        if key is None:
            return True
        return has_path(data, key)

    def set_data(self, key: str | None, value: Any) -> Bucket:
        """Store a copy of *value* at the dot path *key*.

        With ``key=None``, *value* must be a mapping and replaces all
        attached data.
        """
        if key is None:
            if not isinstance(value, Mapping):
                raise TypeError(f"data must be a mapping, got {type(value).__name__}")
            self._state.data = copy.deepcopy(dict(value))
            return self
        if self._state.data is None:
            self._state.data = {}
        set_path(self._state.data, key, copy.deepcopy(value))
        return self

    def get_data(self, key: str | None = None, default: Any = None) -> Any:
        """Return a copy of the value at the dot path *key*, or *default*.

        Without *key*, return a copy of all attached data (an empty dict
        when none).  Changing the result never changes the bucket.
        """
        data = self._state.data
        if key is None:
            return copy.deepcopy(data) if data else {}
        if not data or not has_path(data, key):
            return default
        return copy.deepcopy(get_path(data, key))

    def forget_data(self, key: str | None = None) -> Bucket:
        """Remove the value at the dot path *key*, or all data without *key*."""
        if key is None:
            self._state.data = None
        elif self._state.data:
            delete_path(self._state.data, key)
        return self
