"""Metrics hook protocol and no-op default implementation.

A :class:`~leakybucket.bucket.Bucket` emits counters, timings and gauges
at its decision points.  By default a :class:`NoopMetricsHook` is used so
there is zero overhead.  Callers can pass any object satisfying the
:class:`MetricsHook` protocol to route data points to StatsD, Prometheus or
similar.

Emitted metric names:

* ``leakybucket.fill_total``           -- counter (tag ``overflow``)
* ``leakybucket.fill_rejected_total``  -- counter
* ``leakybucket.leaked_drops``         -- gauge, drops removed by a leak
* ``leakybucket.saves_total``          -- counter
* ``leakybucket.save_duration_ms``     -- timing
* ``leakybucket.deletes_total``        -- counter
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict whose keys and values are
    strings.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that silently discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
