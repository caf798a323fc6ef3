"""Read-only query execution over a table using the Volcano iterator model.

A query is a pipeline of operators that pull rows from their child on
demand:

    RowScanOperator -> FilterOperator -> SortOperator -> LimitOperator -> ProjectOperator

Each operator has open(), next() and close(). Operators never mutate the
containers they read: the scan takes a snapshot of the table when it is
opened, so the result is unaffected by writes made while iterating.

Rows are scanned in ascending primary-key order. The containers themselves
promise no order; the scan imposes one so query output is repeatable.

References:
    - Graefe, "Volcano - An Extensible and Parallel Query Evaluation System" (1994)
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic

from jsdb.domain.entities import Environment, Table, ValueT
from jsdb.domain.value_objects import PrimaryKey
from jsdb.infrastructure.logging import get_logger
from jsdb.infrastructure.tracing import trace_span

if TYPE_CHECKING:
    from jsdb.infrastructure.metrics import MetricsRegistry

logger = get_logger(__name__)

PK_COLUMN = "__pk__"
"""Pseudo-column name that refers to a row's primary key in predicates and sorts."""


@dataclass(frozen=True)
class ResultRow(Generic[ValueT]):
    """A snapshot of one table row as seen by the query pipeline."""

    primary_key: PrimaryKey
    columns: Mapping[str, ValueT]

    def __getitem__(self, key: str) -> ValueT | PrimaryKey:
        if key == PK_COLUMN:
            return self.primary_key
        return self.columns[key]

    def __contains__(self, key: object) -> bool:
        return key == PK_COLUMN or key in self.columns

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def __repr__(self) -> str:
        pairs = ", ".join(f"{c}={v!r}" for c, v in self.columns.items())
        return f"ResultRow({self.primary_key}: {pairs})"


Predicate = Callable[[ResultRow[Any]], bool]


class ComparisonOp(Enum):
    """Comparison operators for column predicates."""

    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EXISTS = "exists"
    MISSING = "missing"


@dataclass(frozen=True)
class Comparison:
    """Compare one column against a constant.

    A row without the column never satisfies an ordering comparison (or EQ),
    and always satisfies NE. Values that cannot be ordered against each
    other (e.g. str < int) do not match.
    """

    column: str
    op: ComparisonOp
    value: Any = None

    def __call__(self, row: ResultRow[Any]) -> bool:
        present = self.column in row
        if self.op == ComparisonOp.EXISTS:
            return present
        if self.op == ComparisonOp.MISSING:
            return not present
        if not present:
            return self.op == ComparisonOp.NE

        left = row[self.column]
        try:
            if self.op == ComparisonOp.EQ:
                return left == self.value
            elif self.op == ComparisonOp.NE:
                return left != self.value
            elif self.op == ComparisonOp.LT:
                return left < self.value
            elif self.op == ComparisonOp.LE:
                return left <= self.value
            elif self.op == ComparisonOp.GT:
                return left > self.value
            elif self.op == ComparisonOp.GE:
                return left >= self.value
        except TypeError:
            return False
        return False


@dataclass(frozen=True)
class And:
    """True when every operand is true. Empty And is true."""

    operands: tuple[Predicate, ...]

    def __init__(self, *operands: Predicate) -> None:
        object.__setattr__(self, "operands", operands)

    def __call__(self, row: ResultRow[Any]) -> bool:
        return all(p(row) for p in self.operands)


@dataclass(frozen=True)
class Or:
    """True when any operand is true. Empty Or is false."""

    operands: tuple[Predicate, ...]

    def __init__(self, *operands: Predicate) -> None:
        object.__setattr__(self, "operands", operands)

    def __call__(self, row: ResultRow[Any]) -> bool:
        return any(p(row) for p in self.operands)


@dataclass(frozen=True)
class Not:
    """Negate a predicate."""

    operand: Predicate

    def __call__(self, row: ResultRow[Any]) -> bool:
        return not self.operand(row)


class Operator(ABC):
    """Base class for query operators (Volcano model)."""

    @abstractmethod
    def open(self) -> None:
        """Initialize the operator."""

    @abstractmethod
    def next(self) -> ResultRow[Any] | None:
        """Return the next row or None if exhausted."""

    @abstractmethod
    def close(self) -> None:
        """Release state held since open()."""

    def __iter__(self) -> Iterator[ResultRow[Any]]:
        self.open()
        try:
            while True:
                row = self.next()
                if row is None:
                    break
                yield row
        finally:
            self.close()


class RowScanOperator(Operator):
    """Scan every row of a table in ascending primary-key order."""

    def __init__(self, table: Table[Any]) -> None:
        self._table = table
        self._rows: list[ResultRow[Any]] = []
        self._pos = 0

    def open(self) -> None:
        self._rows = [
            ResultRow(primary_key=pk, columns=dict(row.columns))
            for pk, row in sorted(self._table.items(), key=lambda item: item[0])
        ]
        self._pos = 0

    def next(self) -> ResultRow[Any] | None:
        if self._pos >= len(self._rows):
            return None
        row = self._rows[self._pos]
        self._pos += 1
        return row

    def close(self) -> None:
        self._rows = []
        self._pos = 0


class FilterOperator(Operator):
    """Pass through rows that satisfy a predicate."""

    def __init__(self, child: Operator, predicate: Predicate) -> None:
        self._child = child
        self._predicate = predicate

    def open(self) -> None:
        self._child.open()

    def next(self) -> ResultRow[Any] | None:
        while True:
            row = self._child.next()
            if row is None or self._predicate(row):
                return row

    def close(self) -> None:
        self._child.close()


class ProjectOperator(Operator):
    """Keep only the named columns. Columns a row lacks stay absent."""

    def __init__(self, child: Operator, columns: Sequence[str]) -> None:
        self._child = child
        self._columns = list(columns)

    def open(self) -> None:
        self._child.open()

    def next(self) -> ResultRow[Any] | None:
        row = self._child.next()
        if row is None:
            return None
        projected = {c: row.columns[c] for c in self._columns if c in row.columns}
        return ResultRow(primary_key=row.primary_key, columns=projected)

    def close(self) -> None:
        self._child.close()


class SortOperator(Operator):
    """Materialize the child's rows and order them.

    Keys are applied left to right. Rows missing a sort column go after
    rows that have it, in either direction.

    Raises:
        TypeError: From open() if a column holds values that cannot be ordered
    """

    def __init__(
        self, child: Operator, sort_keys: Sequence[str], ascending: Sequence[bool]
    ) -> None:
        if len(sort_keys) != len(ascending):
            raise ValueError("sort_keys and ascending must have the same length")
        self._child = child
        self._sort_keys = list(sort_keys)
        self._ascending = list(ascending)
        self._sorted_rows: list[ResultRow[Any]] = []
        self._pos = 0

    def open(self) -> None:
        self._child.open()
        rows: list[ResultRow[Any]] = []
        while (row := self._child.next()) is not None:
            rows.append(row)

        # Stable sort: apply the least significant key first
        for key, asc in reversed(list(zip(self._sort_keys, self._ascending))):
            present = [r for r in rows if key in r]
            missing = [r for r in rows if key not in r]
            present.sort(key=lambda r: r[key], reverse=not asc)
            rows = present + missing

        self._sorted_rows = rows
        self._pos = 0

    def next(self) -> ResultRow[Any] | None:
        if self._pos >= len(self._sorted_rows):
            return None
        row = self._sorted_rows[self._pos]
        self._pos += 1
        return row

    def close(self) -> None:
        self._child.close()
        self._sorted_rows = []
        self._pos = 0


class LimitOperator(Operator):
    """Skip offset rows, then return at most limit rows."""

    def __init__(self, child: Operator, limit: int | None, offset: int = 0) -> None:
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")
        self._child = child
        self._limit = limit
        self._offset = offset
        self._returned = 0
        self._skipped = False

    def open(self) -> None:
        self._child.open()
        self._returned = 0
        self._skipped = False

    def next(self) -> ResultRow[Any] | None:
        if not self._skipped:
            self._skipped = True
            for _ in range(self._offset):
                if self._child.next() is None:
                    return None

        if self._limit is not None and self._returned >= self._limit:
            return None
        row = self._child.next()
        if row is not None:
            self._returned += 1
        return row

    def close(self) -> None:
        self._child.close()


OrderBy = Sequence[str | tuple[str, bool]]


@dataclass
class QueryResult(Generic[ValueT]):
    """Result of a select."""

    rows: list[ResultRow[ValueT]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    message: str = ""

    @property
    def success(self) -> bool:
        return self.message == "" or self.message.startswith("OK")

    def primary_keys(self) -> list[PrimaryKey]:
        """Primary keys of the result rows, in result order."""
        return [row.primary_key for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)


class QueryExecutor(Generic[ValueT]):
    """Runs selects against the tables of an environment.

    The executor only reads. It resolves the database and table by name,
    builds an operator pipeline and drains it into a QueryResult.
    """

    def __init__(
        self,
        environment: Environment[ValueT],
        metrics: MetricsRegistry | None = None,
        max_result_rows: int | None = None,
    ) -> None:
        self._environment = environment
        self._metrics = metrics
        self._max_result_rows = max_result_rows

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
        """Select rows from database.table.

        Args:
            database: Database name
            table: Table name
            where: Row predicate (None = all rows)
            columns: Columns to keep (None = all)
            order_by: Column names, or (name, ascending) pairs. Use
                PK_COLUMN to order by primary key.
            limit: Max rows to return (None = unbounded)
            offset: Rows to skip before returning any

        Returns:
            QueryResult. A missing database or table gives an unsuccessful
            result rather than an exception.

        Raises:
            ValueError: If limit or offset is negative, whether or not the
                table exists
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")

        start = time.perf_counter()
        with trace_span("jsdb.select", {"jsdb.database": database, "jsdb.table": table}) as span:
            target = self._resolve(database, table)
            if isinstance(target, str):
                self._record("not_found", start)
                span.set_attribute("jsdb.status", "not_found")
                return QueryResult(message=target)

            operator = self._build_pipeline(target, where, columns, order_by, limit, offset)
            try:
                rows = list(operator)
            except TypeError as e:
                self._record("error", start)
                span.record_exception(e)
                return QueryResult(message=f"Error: {e}")

            self._record("success", start)
            span.set_attribute("jsdb.rows", len(rows))

        logger.debug("select_executed", database=database, table=table, rows=len(rows))
        return QueryResult(
            rows=rows,
            columns=list(columns) if columns is not None else _column_names(rows),
            message="OK",
        )

    def count(self, database: str, table: str, where: Predicate | None = None) -> int:
        """Count rows matching where.

        Follows select(): a missing database or table counts zero, and so
        does a predicate that fails with TypeError. Failures are recorded
        in metrics and the trace and logged as a warning.
        """
        start = time.perf_counter()
        with trace_span("jsdb.count", {"jsdb.database": database, "jsdb.table": table}) as span:
            target = self._resolve(database, table)
            if isinstance(target, str):
                self._record("not_found", start)
                span.set_attribute("jsdb.status", "not_found")
                return 0

            if where is None:
                matched = len(target)
            else:
                try:
                    matched = sum(1 for _ in FilterOperator(RowScanOperator(target), where))
                except TypeError as e:
                    self._record("error", start)
                    span.record_exception(e)
                    logger.warning("count_failed", database=database, table=table, error=str(e))
                    return 0

            self._record("success", start)
            span.set_attribute("jsdb.rows", matched)
        return matched

    def _resolve(self, database: str, table: str) -> Table[ValueT] | str:
        """Find the table, or describe why it cannot be found."""
        db = self._environment.get(database)
        if db is None:
            return f"Database '{database}' does not exist"
        tbl = db.get(table)
        if tbl is None:
            return f"Table '{table}' does not exist in database '{database}'"
        return tbl

    def _build_pipeline(
        self,
        table: Table[ValueT],
        where: Predicate | None,
        columns: Sequence[str] | None,
        order_by: OrderBy | None,
        limit: int | None,
        offset: int,
    ) -> Operator:
        op: Operator = RowScanOperator(table)
        if where is not None:
            op = FilterOperator(op, where)
        if order_by:
            keys, ascending = _split_order_by(order_by)
            op = SortOperator(op, keys, ascending)
        if self._max_result_rows is not None:
            limit = self._max_result_rows if limit is None else min(limit, self._max_result_rows)
        if limit is not None or offset:
            op = LimitOperator(op, limit, offset)
        # Project last so sort and filter can see every column
        if columns is not None:
            op = ProjectOperator(op, columns)
        return op

    def _record(self, status: str, start: float) -> None:
        if self._metrics is None:
            return
        self._metrics.queries_total.labels(status=status).inc()
        self._metrics.query_latency_seconds.observe(time.perf_counter() - start)


def _split_order_by(order_by: OrderBy) -> tuple[list[str], list[bool]]:
    keys: list[str] = []
    ascending: list[bool] = []
    for item in order_by:
        if isinstance(item, str):
            keys.append(item)
            ascending.append(True)
        else:
            name, asc = item
            keys.append(name)
            ascending.append(asc)
    return keys, ascending


def _column_names(rows: list[ResultRow[Any]]) -> list[str]:
    """Union of column names across rows, sorted."""
    names: set[str] = set()
    for row in rows:
        names.update(row.columns)
    return sorted(names)
