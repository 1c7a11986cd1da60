"""Tests for observability/logger.py and the bucket's log output."""
import io
import json
import logging
import sys

import pytest

from leakybucket.errors import BucketCapacityError, BucketCorruptError


class TestStructuredFormatter:
    def _get_record(
        self,
        msg,
        level=logging.INFO,
        exc_info=None,
        stack_info=None,
        extra_fields=None,
    ):
        record = logging.LogRecord(
            name="test",
            level=level,
            pathname="",
            lineno=0,
            msg=msg,
            args=(),
            exc_info=exc_info,
        )
        if extra_fields is not None:
            record.extra_fields = extra_fields
        if stack_info is not None:
            record.stack_info = stack_info
        return record

    def test_basic_format(self):
        from leakybucket.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        result = json.loads(fmt.format(self._get_record("hello world")))
        assert result["message"] == "hello world"
        assert result["level"] == "INFO"
        assert result["logger"] == "test"
        assert "ts" in result

    def test_extra_fields_merged(self):
        from leakybucket.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        record = self._get_record("msg", extra_fields={"bucket_id": "abc", "drops": 2.5})
        result = json.loads(fmt.format(record))
        assert result["bucket_id"] == "abc"
        assert result["drops"] == 2.5

    def test_exception_info_included(self):
        from leakybucket.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()
        result = json.loads(fmt.format(self._get_record("error msg", exc_info=exc_info)))
        assert "ValueError" in result["exception"]

    def test_stack_info_included(self):
        from leakybucket.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        result = json.loads(fmt.format(self._get_record("msg", stack_info="Stack Trace Here")))
        assert result["stack_info"] == "Stack Trace Here"

    def test_non_serialisable_extra_uses_str(self):
        from leakybucket.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        record = self._get_record("msg", extra_fields={"obj": object()})
        result = json.loads(fmt.format(record))
        assert result["obj"].startswith("<object")

    def test_ts_is_record_creation_time(self):
        from leakybucket.observability.logger import StructuredFormatter

        record = self._get_record("msg")
        record.created = 0.0
        result = json.loads(StructuredFormatter().format(record))
        assert result["ts"] == "1970-01-01T00:00:00+00:00"

    def test_bucket_error_code_and_context(self):
        from leakybucket.observability.logger import StructuredFormatter

        try:
            raise BucketCorruptError("bad record", context={"bucket_id": "abc"})
        except BucketCorruptError:
            exc_info = sys.exc_info()
        result = json.loads(StructuredFormatter().format(self._get_record("load failed", exc_info=exc_info)))
        assert result["error_code"] == "CORRUPT_STATE"
        assert result["error_context"] == {"bucket_id": "abc"}
        assert "BucketCorruptError" in result["exception"]

    def test_plain_exception_has_no_error_code(self):
        from leakybucket.observability.logger import StructuredFormatter

        try:
            raise KeyError("k")
        except KeyError:
            exc_info = sys.exc_info()
        result = json.loads(StructuredFormatter().format(self._get_record("x", exc_info=exc_info)))
        assert "error_code" not in result


class TestGetLogger:
    def test_returns_logger_with_handler(self):
        from leakybucket.observability.logger import get_logger

        logger = get_logger("test.observability.unique1")
        assert isinstance(logger, logging.Logger)
        assert len(logger.handlers) > 0
        assert logger.propagate is False

    def test_default_level_is_warning(self):
        from leakybucket.observability.logger import get_logger

        assert get_logger("test.observability.level_default").level == logging.WARNING

    def test_string_level(self):
        from leakybucket.observability.logger import get_logger

        logger = get_logger("test.observability.unique2", level="debug")
        assert logger.level == logging.DEBUG

    def test_idempotent_no_duplicate_handlers(self):
        from leakybucket.observability.logger import get_logger

        name = "test.observability.unique3"
        handler_count = len(get_logger(name).handlers)
        assert len(get_logger(name).handlers) == handler_count

    def test_custom_stream(self):
        from leakybucket.observability.logger import get_logger

        stream = io.StringIO()
        logger = get_logger("test.observability.stream_unique", level="INFO", stream=stream)
        logger.info("test message", extra={"extra_fields": {"key": "val"}})
        line = json.loads(stream.getvalue().strip())
        assert line["message"] == "test message"
        assert line["key"] == "val"

    def test_package_children_share_package_handler(self):
        from leakybucket.observability.logger import get_logger

        child = get_logger("leakybucket.tests.child")
        package = logging.getLogger("leakybucket")
        assert child.handlers == []
        assert child.propagate is True
        assert len(package.handlers) == 1
        assert package.propagate is False

    def test_package_handler_not_duplicated(self):
        from leakybucket.observability.logger import get_logger

        get_logger("leakybucket.tests.a")
        get_logger("leakybucket.tests.b")
        get_logger()
        assert len(logging.getLogger("leakybucket").handlers) == 1

    def test_package_level_controls_children(self):
        from leakybucket.observability.logger import get_logger

        child = get_logger("leakybucket.tests.level")
        assert child.getEffectiveLevel() == logging.getLogger("leakybucket").level


class TestBucketLogging:
    def test_rejected_fill_logged(self, make_bucket):
        from leakybucket.bucket import log
        from leakybucket.observability.logger import StructuredFormatter

        stream = io.StringIO()
        handler = logging.StreamHandler(stream)

        handler.setFormatter(StructuredFormatter())
        previous = log.level
        log.addHandler(handler)
        log.setLevel(logging.INFO)
        try:
            bucket = make_bucket("noisy", capacity=1)
            bucket.fill(1)
            with pytest.raises(BucketCapacityError):
                bucket.fill(1)
        finally:
            log.removeHandler(handler)
            log.setLevel(previous)

        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["message"] == "fill rejected"
        assert entry["bucket_id"] == "noisy"
        assert entry["capacity"] == 1
