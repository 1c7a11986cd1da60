"""Bucket configuration for leakybucket.

:class:`BucketConfig` is a small dataclass holding the two tuneable knobs of
a leaky bucket: how many drops it holds and how fast it drains.  Instances
are usually built from a plain settings mapping with
:meth:`BucketConfig.from_settings`, which mirrors the way callers pass
settings to :class:`~leakybucket.bucket.Bucket`.

Two module-level constants define the defaults:

* :data:`DEFAULT_CAPACITY` -- drops a bucket can hold.
* :data:`DEFAULT_LEAK` -- drops drained per minute.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from leakybucket.errors import BucketConfigError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CAPACITY: int = 10
"""Maximum number of drops a bucket holds before it is full."""

DEFAULT_LEAK: int = 10
"""Number of drops that leak from a bucket every 60 seconds."""

SETTING_KEYS: tuple[str, ...] = ("capacity", "leak")
"""Settings keys understood by :meth:`BucketConfig.from_settings`."""

_ALIASES: dict[str, str] = {"leak_per_minute": "leak"}


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid drop count.
    return isinstance(value, int) and not isinstance(value, bool)


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BucketConfig:
    """Configuration for a single leaky bucket.

    Parameters
    ----------
    capacity:
        Maximum number of drops the bucket can hold.  Must be a positive
        ``int``.
    leak:
        Number of drops that drain from the bucket per minute.  Must be a
        positive ``int``.  Converted internally to a per-second rate.
    """

    capacity: int = DEFAULT_CAPACITY

    leak: int = DEFAULT_LEAK

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in SETTING_KEYS:
            value = getattr(self, name)
            if not _is_int(value):
                raise BucketConfigError(
                    f"{name} must be an integer, got {type(value).__name__}",
                    context={"setting": name, "value": value},
                )
            if value <= 0:
                raise BucketConfigError(
                    f"{name} must be > 0, got {value}",
                    context={"setting": name, "value": value},
                )

    @property
    def leak_per_minute(self) -> int:
        return self.leak

    @property
    def leak_per_second(self) -> float:
        return self.leak / 60

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None = None) -> BucketConfig:
        """Build a config by merging *settings* over the defaults.

        Only ``capacity`` and ``leak`` (or its alias ``leak_per_minute``)
        are read; any other key is ignored.

        Raises
        ------
        BucketConfigError
            If a value is not a positive integer.
        """
        merged: dict[str, Any] = {
            "capacity": DEFAULT_CAPACITY,
            "leak": DEFAULT_LEAK,
        }
        for key, value in (settings or {}).items():
            key = _ALIASES.get(key, key)
            if key in SETTING_KEYS:
                merged[key] = value
        return cls(**merged)
