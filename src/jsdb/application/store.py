"""Store - path-addressed entry point over one Environment.

The core containers are navigated one level at a time. Store wraps an
Environment and adds operations addressed by full path, observability,
and an optional readers-writer lock for multi-threaded use.

Usage:
    from jsdb.application import Store

    store: Store[str] = Store()
    store.create_database("d1")
    store.create_table("d1", "t1")
    store.put_row("d1", "t1", 1, {"name": "hello"})
    store.get_column("d1", "t1", 1, "name")  # 'hello'

    result = store.select("d1", "t1", where=Comparison("name", ComparisonOp.EQ, "hello"))

Write semantics:
    - Every write is insert-or-replace at its target level, like the core.
    - Deletes are no-ops when any part of the path is absent.
    - A write whose parent does not exist raises a NotFoundError subclass.
      The core containers have no parent lookups and never raise this.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic

from jsdb.application.query import OrderBy, Predicate, QueryExecutor, QueryResult
from jsdb.domain.entities import Database, Environment, Row, Table, ValueT
from jsdb.domain.errors import DatabaseNotFoundError, RowNotFoundError, TableNotFoundError
from jsdb.domain.services import NullLock, ReadWriteLock
from jsdb.domain.value_objects import primary_key, validate_name
from jsdb.infrastructure.logging import get_logger
from jsdb.infrastructure.metrics import MetricsRegistry, get_metrics

if TYPE_CHECKING:
    from jsdb.infrastructure.config import Config

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoreStats:
    """Container counts across the whole environment."""

    databases: int
    tables: int
    rows: int
    columns: int


class Store(Generic[ValueT]):
    """Unified entry point for one Environment.

    Thread Safety:
        With thread_safe=True every operation runs under a single
        readers-writer lock guarding the whole tree. Containers returned by
        create_*/get_* are live; touching them outside read()/write() is not
        covered by the lock.
    """

    def __init__(
        self,
        environment: Environment[ValueT] | None = None,
        *,
        thread_safe: bool = False,
        lock_timeout: float | None = None,
        metrics: MetricsRegistry | None = None,
        max_result_rows: int | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            environment: Environment to wrap. A new empty one if None.
            thread_safe: Guard all operations with a ReadWriteLock.
            lock_timeout: Max seconds to wait for the lock (None = forever).
            metrics: Metrics registry. The process-wide one if None.
            max_result_rows: Hard cap on rows returned by select().
        """
        self._environment: Environment[ValueT] = (
            environment if environment is not None else Environment.new()
        )
        self._lock: ReadWriteLock | NullLock = ReadWriteLock() if thread_safe else NullLock()
        self._thread_safe = thread_safe
        self._lock_timeout = lock_timeout
        self._metrics = metrics if metrics is not None else get_metrics()
        self._executor: QueryExecutor[ValueT] = QueryExecutor(
            self._environment,
            metrics=self._metrics,
            max_result_rows=max_result_rows,
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        environment: Environment[ValueT] | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> Store[ValueT]:
        """Build a store from the store and query sections of a Config."""
        return cls(
            environment,
            thread_safe=config.store.thread_safe,
            lock_timeout=config.store.lock_timeout_seconds,
            metrics=metrics,
            max_result_rows=config.query.max_result_rows,
        )

    @property
    def environment(self) -> Environment[ValueT]:
        """The wrapped environment."""
        return self._environment

    @property
    def thread_safe(self) -> bool:
        """True if operations are guarded by a readers-writer lock."""
        return self._thread_safe

    @contextmanager
    def read(self) -> Iterator[Environment[ValueT]]:
        """Hold the read lock and yield the environment."""
        with self._lock.read_locked(self._lock_timeout) as waited:
            self._metrics.lock_wait_seconds.labels(mode="read").observe(waited)
            yield self._environment

    @contextmanager
    def write(self) -> Iterator[Environment[ValueT]]:
        """Hold the write lock and yield the environment."""
        with self._lock.write_locked(self._lock_timeout) as waited:
            self._metrics.lock_wait_seconds.labels(mode="write").observe(waited)
            yield self._environment

    # Databases

    def create_database(self, name: str) -> Database[ValueT]:
        """Add an empty database, replacing any database with that name."""
        database: Database[ValueT] = Database.create()
        with self.write() as env:
            replaced = validate_name(name, "database name") in env
            env.add_database(name, database)
        self._mutated("database", replaced, database=name)
        return database

    def drop_database(self, name: str) -> None:
        """Remove a database and everything in it. No-op if absent."""
        with self.write() as env:
            present = validate_name(name, "database name") in env
            env.delete_database(name)
        self._deleted("database", present, database=name)

    def get_database(self, name: str) -> Database[ValueT] | None:
        with self.read() as env:
            return env.get(name)

    # Tables

    def create_table(self, database: str, name: str) -> Table[ValueT]:
        """Add an empty table, replacing any table with that name.

        Raises:
            DatabaseNotFoundError: If the database does not exist
        """
        table: Table[ValueT] = Table.create()
        with self.write() as env:
            db = self._require_database(env, database)
            replaced = validate_name(name, "table name") in db
            db.add_table(name, table)
        self._mutated("table", replaced, database=database, table=name)
        return table

    def drop_table(self, database: str, name: str) -> None:
        """Remove a table and all of its rows. No-op if absent."""
        with self.write() as env:
            db = env.get(database)
            present = db is not None and validate_name(name, "table name") in db
            if db is not None:
                db.delete_table(name)
        self._deleted("table", present, database=database, table=name)

    def get_table(self, database: str, name: str) -> Table[ValueT] | None:
        with self.read() as env:
            db = env.get(database)
            return db.get(name) if db is not None else None

    # Rows

    def put_row(
        self,
        database: str,
        table: str,
        key: int,
        columns: Mapping[str, ValueT] | None = None,
    ) -> Row[ValueT]:
        """Store a fresh row built from columns under key.

        Any row already under key is replaced whole; its columns are not
        merged into the new one.

        Raises:
            DatabaseNotFoundError: If the database does not exist
            TableNotFoundError: If the table does not exist
        """
        row: Row[ValueT] = Row.from_mapping(columns or {})
        pk = primary_key(key)
        with self.write() as env:
            tbl = self._require_table(env, database, table)
            replaced = pk in tbl
            tbl.add_row(pk, row)
        self._mutated(
            "row", replaced, database=database, table=table, primary_key=pk, columns=row.columns
        )
        return row

    def delete_row(self, database: str, table: str, key: int) -> None:
        """Remove the row under key. No-op if any part of the path is absent."""
        pk = primary_key(key)
        with self.write() as env:
            tbl = self._find_table(env, database, table)
            present = tbl is not None and pk in tbl
            if tbl is not None:
                tbl.delete_row(pk)
        self._deleted("row", present, database=database, table=table, primary_key=pk)

    def get_row(self, database: str, table: str, key: int) -> Row[ValueT] | None:
        pk = primary_key(key)
        with self.read() as env:
            tbl = self._find_table(env, database, table)
            return tbl.get(pk) if tbl is not None else None

    # Columns

    def set_column(
        self, database: str, table: str, key: int, column: str, value: ValueT
    ) -> None:
        """Insert or replace one column of an existing row.

        Raises:
            DatabaseNotFoundError: If the database does not exist
            TableNotFoundError: If the table does not exist
            RowNotFoundError: If no row is stored under key
        """
        pk = primary_key(key)
        with self.write() as env:
            tbl = self._require_table(env, database, table)
            row = tbl.get(pk)
            if row is None:
                raise RowNotFoundError(
                    f"Row {pk} does not exist in table '{table}' of database '{database}'"
                )
            replaced = validate_name(column, "column name") in row
            row.set_column(column, value)
        self._mutated(
            "column",
            replaced,
            database=database,
            table=table,
            primary_key=pk,
            column=column,
            value=value,
        )

    def delete_column(self, database: str, table: str, key: int, column: str) -> None:
        """Remove one column of a row. No-op if any part of the path is absent."""
        pk = primary_key(key)
        with self.write() as env:
            tbl = self._find_table(env, database, table)
            row = tbl.get(pk) if tbl is not None else None
            present = row is not None and validate_name(column, "column name") in row
            if row is not None:
                row.delete_column(column)
        self._deleted(
            "column", present, database=database, table=table, primary_key=pk, column=column
        )

    def get_column(
        self, database: str, table: str, key: int, column: str, default: Any = None
    ) -> ValueT | Any:
        """Value of one column, or default if any part of the path is absent."""
        pk = primary_key(key)
        with self.read() as env:
            tbl = self._find_table(env, database, table)
            row = tbl.get(pk) if tbl is not None else None
            if row is None:
                return default
            return row.get(column, default)

    # Queries

    def select(
        self,
        database: str,
        table: str,
        where: Predicate | None = None,
        columns: Sequence[str] | None = None,
        order_by: OrderBy | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> QueryResult[ValueT]:
        """Run a select under the read lock. See QueryExecutor.select."""
        with self.read():
            return self._executor.select(
                database,
                table,
                where=where,
                columns=columns,
                order_by=order_by,
                limit=limit,
                offset=offset,
            )

    def count(self, database: str, table: str, where: Predicate | None = None) -> int:
        """Count matching rows under the read lock. Zero if the table is absent."""
        with self.read():
            return self._executor.count(database, table, where)

    def stats(self) -> StoreStats:
        """Count containers at every level and refresh the container gauges."""
        with self.read() as env:
            tables = rows = columns = 0
            for db in env.values():
                tables += len(db)
                for tbl in db.values():
                    rows += len(tbl)
                    columns += sum(len(row) for row in tbl.values())
            stats = StoreStats(databases=len(env), tables=tables, rows=rows, columns=columns)

        for level, count in (
            ("database", stats.databases),
            ("table", stats.tables),
            ("row", stats.rows),
            ("column", stats.columns),
        ):
            self._metrics.containers.labels(level=level).set(count)
        return stats

    # Internals

    def _require_database(self, env: Environment[ValueT], database: str) -> Database[ValueT]:
        db = env.get(database)
        if db is None:
            raise DatabaseNotFoundError(f"Database '{database}' does not exist")
        return db

    def _require_table(
        self, env: Environment[ValueT], database: str, table: str
    ) -> Table[ValueT]:
        tbl = self._require_database(env, database).get(table)
        if tbl is None:
            raise TableNotFoundError(
                f"Table '{table}' does not exist in database '{database}'"
            )
        return tbl

    def _find_table(
        self, env: Environment[ValueT], database: str, table: str
    ) -> Table[ValueT] | None:
        db = env.get(database)
        return db.get(table) if db is not None else None

    def _mutated(self, level: str, replaced: bool, **context: Any) -> None:
        # Payloads in context are reduced by redact_payload when logging is set up
        if replaced:
            operation, event = "replace", f"{level}_replaced"
        else:
            operation, event = "insert", f"{level}_inserted"
        self._metrics.mutations_total.labels(level=level, operation=operation).inc()
        logger.debug(event, **context)

    def _deleted(self, level: str, present: bool, **path: Any) -> None:
        if present:
            operation, event = "delete", f"{level}_deleted"
        else:
            operation, event = "noop", f"{level}_delete_skipped"
        self._metrics.mutations_total.labels(level=level, operation=operation).inc()
        logger.debug(event, **path)
