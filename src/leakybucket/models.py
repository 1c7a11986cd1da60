"""Bucket state record and its persisted JSON form.

A :class:`BucketState` is the only thing a bucket writes to storage.  The
persisted record is a JSON object::

    {"drops": "4.5", "time": 1719835200, "data": {"user": {"id": 42}}}

``drops`` is always a decimal *string* (see
:mod:`leakybucket.utils.decimal_text`), ``time`` is an integer UNIX
timestamp and ``data`` is optional caller metadata.  Key names are fixed so
that buckets written by earlier releases keep loading.
"""

from __future__ import annotations

import copy
import json
import math
from dataclasses import dataclass, field
from typing import Any

from leakybucket.errors import BucketCorruptError
from leakybucket.utils.decimal_text import format_drops, parse_drops

REQUIRED_FIELDS: tuple[str, ...] = ("drops", "time")


@dataclass
class BucketState:
    """In-memory state of one bucket.

    Attributes
    ----------
    drops:
        Current fill level.  Never negative.
    time:
        UNIX timestamp (seconds) of the last state-changing operation.
    data:
        Caller metadata, or ``None`` when nothing is attached.
    """

    drops: float = 0.0
    time: int = 0
    data: dict[str, Any] | None = field(default=None)

    @classmethod
    def fresh(cls, now: int) -> BucketState:
        """Return an empty bucket stamped with *now*."""
        return cls(drops=0.0, time=now)

    def as_dict(self) -> dict[str, Any]:
        """Return a deep copy of the state as a plain mapping.

        ``data`` is included only when metadata is attached.
        """
        result: dict[str, Any] = {"drops": self.drops, "time": self.time}
        if self.data is not None:
            result["data"] = copy.deepcopy(self.data)
        return result


def encode_state(state: BucketState) -> str:
    """Serialise *state* to the persisted JSON record."""
    record: dict[str, Any] = {
        "drops": format_drops(state.drops),
        "time": state.time,
    }
    if state.data is not None:
        record["data"] = state.data
    return json.dumps(record, separators=(",", ":"))


def decode_state(contents: str, bucket_id: str = "") -> BucketState:
    """Parse a persisted JSON record back into a :class:`BucketState`.

    Raises
    ------
    BucketCorruptError
        If *contents* is not a JSON object, misses ``drops`` or ``time``,
        or holds values that cannot be converted.
    """

    def _corrupt(reason: str, cause: Exception | None = None) -> BucketCorruptError:
        return BucketCorruptError(
            f"Invalid bucket contents for bucket ID: {bucket_id} ({reason})",
            context={"bucket_id": bucket_id, "reason": reason},
            cause=cause,
        )

    try:
        record = json.loads(contents)
    except (TypeError, ValueError) as exc:
        raise _corrupt("record is not valid JSON", exc) from exc

    if not isinstance(record, dict):
        raise _corrupt("record is not a JSON object")

    missing = [name for name in REQUIRED_FIELDS if name not in record]
    if missing:
        raise _corrupt(f"missing field(s): {', '.join(missing)}")

    try:
        drops = parse_drops(record["drops"])
    except ValueError as exc:
        raise _corrupt(str(exc), exc) from exc
    if drops < 0:
        raise _corrupt(f"negative drop count {record['drops']!r}")

    raw_time = record["time"]
    if (
        isinstance(raw_time, bool)
        or not isinstance(raw_time, (int, float))
        or not math.isfinite(raw_time)
    ):
        raise _corrupt(f"time must be an integer, got {raw_time!r}")

    data = record.get("data")
    if data == []:
        # Empty metadata written as a JSON array by older writers.
        data = {}
    if data is not None and not isinstance(data, dict):
        raise _corrupt("data must be a JSON object")

    return BucketState(drops=drops, time=int(raw_time), data=data)
