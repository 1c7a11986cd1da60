"""Relational table adapter built on SQLAlchemy Core.

Records live in a two-column table::

    id        VARCHAR(255) PRIMARY KEY
    contents  TEXT NOT NULL

Any database SQLAlchemy can talk to works.  Saves are an ``UPDATE``
followed, when no row matched, by an ``INSERT`` inside one transaction,
which keeps the statement set portable across dialects.
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from leakybucket.errors import AdapterError, BucketNotFoundError
from leakybucket.observability import get_logger

log = get_logger("leakybucket.adapters.sql")


def bucket_table(name: str = "buckets", metadata: sa.MetaData | None = None) -> sa.Table:
    """Return the :class:`sqlalchemy.Table` definition for bucket records."""
    return sa.Table(
        name,
        metadata if metadata is not None else sa.MetaData(),
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("contents", sa.Text, nullable=False),
    )


class SQLAdapter:
    """Store bucket records in a database table.

    Parameters
    ----------
    engine:
        A synchronous SQLAlchemy :class:`~sqlalchemy.engine.Engine`.
    table:
        Table name.  Defaults to ``"buckets"``.
    create_table:
        Issue ``CREATE TABLE`` (only if missing) on construction.

    Raises
    ------
    AdapterError
        If the table cannot be created.
    """

    def __init__(self, engine: Engine, table: str = "buckets", *, create_table: bool = True) -> None:
        self.engine = engine
        self.table = bucket_table(table)
        if create_table:
            try:
                self.table.metadata.create_all(engine, checkfirst=True)
            except SQLAlchemyError as exc:
                raise AdapterError(
                    f"Unable to create bucket table ({table}): {exc}",
                    context={"operation": "create_table", "adapter": "sql", "table": table},
                    cause=exc,
                ) from exc

    def _fail(self, operation: str, bucket_id: str, exc: SQLAlchemyError) -> AdapterError:
        log.warning(
            "sql %s failed",
            operation,
            extra={"extra_fields": {"bucket_id": bucket_id, "table": self.table.name, "error": str(exc)}},
        )
        return AdapterError(
            f"Unable to {operation} ({bucket_id})",
            context={"bucket_id": bucket_id, "operation": operation, "adapter": "sql"},
            cause=exc,
        )

    def _select(self, bucket_id: str) -> str | None:
        stmt = sa.select(self.table.c.contents).where(self.table.c.id == bucket_id)
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one_or_none()

    def exists(self, bucket_id: str) -> bool:
        try:
            return self._select(bucket_id) is not None
        except SQLAlchemyError as exc:
            raise self._fail("check", bucket_id, exc) from exc

    def save(self, bucket_id: str, contents: str) -> None:
        update = (
            sa.update(self.table)
            .where(self.table.c.id == bucket_id)
            .values(contents=contents)
        )
        try:
            with self.engine.begin() as conn:
                if conn.execute(update).rowcount == 0:
                    conn.execute(sa.insert(self.table).values(id=bucket_id, contents=contents))
        except SQLAlchemyError as exc:
            raise self._fail("save", bucket_id, exc) from exc
        log.debug("sql save", extra={"extra_fields": {"bucket_id": bucket_id, "table": self.table.name}})

    def read(self, bucket_id: str) -> str:
        try:
            contents = self._select(bucket_id)
        except SQLAlchemyError as exc:
            raise self._fail("read", bucket_id, exc) from exc
        if contents is None:
            raise BucketNotFoundError(
                f"Unable to read ({bucket_id})",
                context={"bucket_id": bucket_id, "operation": "read", "adapter": "sql"},
            )
        return contents

    def delete(self, bucket_id: str) -> None:
        stmt = sa.delete(self.table).where(self.table.c.id == bucket_id)
        try:
            with self.engine.begin() as conn:
                deleted = conn.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise self._fail("delete", bucket_id, exc) from exc
        if not deleted:
            raise BucketNotFoundError(
                f"Unable to delete ({bucket_id})",
                context={"bucket_id": bucket_id, "operation": "delete", "adapter": "sql"},
            )
        log.debug("sql delete", extra={"extra_fields": {"bucket_id": bucket_id, "table": self.table.name}})
