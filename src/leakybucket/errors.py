"""Error hierarchy for the leakybucket package.

Every public error class inherits from LeakyBucketError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Error codes are defined as a :class:`str` enum so that they serialise
naturally to JSON and can be matched with simple ``==`` comparisons.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the package can raise."""

    CONFIG_ERROR = "CONFIG_ERROR"
    CORRUPT_STATE = "CORRUPT_STATE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    ADAPTER_ERROR = "ADAPTER_ERROR"
    NOT_FOUND = "NOT_FOUND"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class LeakyBucketError(Exception):
    """Base exception for all leakybucket errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"

    def __reduce__(self) -> tuple[Any, ...]:
        return (_rebuild_error, (type(self), self.code, self.message, self.context, self.cause))


def _rebuild_error(
    cls: type[LeakyBucketError],
    code: str,
    message: str,
    context: dict[str, Any],
    cause: Exception | None,
) -> LeakyBucketError:
    err = cls.__new__(cls)
    LeakyBucketError.__init__(err, code=code, message=message, context=context, cause=cause)
    return err


# ---------------------------------------------------------------------------
# Bucket errors
# ---------------------------------------------------------------------------

class BucketConfigError(LeakyBucketError):
    """Bucket settings are not usable (non-integer or non-positive values).

    Context keys: ``bucket_id`` (when known), ``setting``, ``value``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CONFIG_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class BucketCorruptError(LeakyBucketError):
    """A persisted bucket record could not be turned back into bucket state.

    Context keys: ``bucket_id``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CORRUPT_STATE,
            message=message,
            context=context,
            cause=cause,
        )


class BucketCapacityError(LeakyBucketError):
    """``fill()`` was refused because the bucket lacks room for the drops.

    Context keys: ``bucket_id``, ``drops``, ``capacity``, ``used``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CAPACITY_EXCEEDED,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Storage errors
# ---------------------------------------------------------------------------

class AdapterError(LeakyBucketError):
    """A storage adapter failed to check, read, write or delete a record.

    Context keys: ``bucket_id``, ``operation``, ``adapter``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
        code: str = ErrorCode.ADAPTER_ERROR,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class BucketNotFoundError(AdapterError):
    """The adapter holds no record for the requested bucket ID.

    Raised by ``read`` and ``delete`` of a missing record.

    Context keys: ``bucket_id``, ``operation``, ``adapter``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            context=context,
            cause=cause,
            code=ErrorCode.NOT_FOUND,
        )
