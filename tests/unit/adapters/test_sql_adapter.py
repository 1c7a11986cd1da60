"""Tests for adapters/sql.py against an in-memory SQLite database."""

from __future__ import annotations

import pytest
import sqlalchemy as sa

from leakybucket.adapters.sql import SQLAdapter, bucket_table
from leakybucket.bucket import Bucket
from leakybucket.errors import AdapterError, BucketNotFoundError


@pytest.fixture
def engine():
    engine = sa.create_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def sql(engine) -> SQLAdapter:
    return SQLAdapter(engine)


class TestBucketTable:
    def test_columns(self):
        table = bucket_table("limits")
        assert table.name == "limits"
        assert [c.name for c in table.primary_key.columns] == ["id"]
        assert table.c.id.type.length == 255
        assert table.c.contents.nullable is False


class TestSQLAdapter:
    def test_creates_table(self, engine, sql):
        assert sa.inspect(engine).has_table("buckets")

    def test_custom_table_name(self, engine):
        SQLAdapter(engine, table="rate_buckets")
        assert sa.inspect(engine).has_table("rate_buckets")

    def test_create_table_is_repeatable(self, engine, sql):
        SQLAdapter(engine)

    def test_save_read_exists(self, sql):
        assert sql.exists("a") is False
        sql.save("a", "payload")
        assert sql.exists("a") is True
        assert sql.read("a") == "payload"

    def test_save_upserts(self, engine, sql):
        sql.save("a", "one")
        sql.save("a", "two")
        assert sql.read("a") == "two"
        with engine.connect() as conn:
            count = conn.execute(sa.select(sa.func.count()).select_from(sql.table)).scalar_one()
        assert count == 1

    def test_read_missing(self, sql):
        with pytest.raises(BucketNotFoundError):
            sql.read("ghost")

    def test_delete(self, sql):
        sql.save("a", "x")
        sql.delete("a")
        assert sql.exists("a") is False

    def test_delete_missing(self, sql):
        with pytest.raises(BucketNotFoundError) as exc_info:
            sql.delete("ghost")
        assert exc_info.value.context["adapter"] == "sql"

    def test_backend_errors_wrapped(self, engine):
        adapter = SQLAdapter(engine, table="never_created", create_table=False)
        for call in (
            lambda: adapter.exists("a"),
            lambda: adapter.read("a"),
            lambda: adapter.save("a", "x"),
            lambda: adapter.delete("a"),
        ):
            with pytest.raises(AdapterError) as exc_info:
                call()
            assert isinstance(exc_info.value.cause, sa.exc.SQLAlchemyError)
            assert not isinstance(exc_info.value, BucketNotFoundError)


class TestBucketInDatabase:
    def test_round_trip(self, sql, clock):
        bucket = Bucket("db", sql, {"capacity": 10, "leak": 10}, clock=clock)
        bucket.fill(10).set_data("owner", "svc").save()

        clock.advance(30)
        reloaded = Bucket("db", sql, {"capacity": 10, "leak": 10}, clock=clock)
        reloaded.leak()
        assert reloaded.get_capacity_used() == pytest.approx(5.0)
        assert reloaded.get_data("owner") == "svc"
