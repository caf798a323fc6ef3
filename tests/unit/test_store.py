"""Unit tests for the Store facade."""

from __future__ import annotations

import pytest
from structlog.testing import CapturingLogger

from jsdb.application import Comparison, ComparisonOp, Store, StoreStats
import jsdb.application.store as store_module
from jsdb.domain.entities import Environment
from jsdb.domain.errors import (
    DatabaseNotFoundError,
    NotFoundError,
    RowNotFoundError,
    TableNotFoundError,
)
from jsdb.domain.services import NullLock, ReadWriteLock
from jsdb.infrastructure.config import Config, QueryConfig, StoreConfig
from jsdb.infrastructure.metrics import MetricsRegistry


def _mutations(metrics: MetricsRegistry, level: str, operation: str) -> float:
    return metrics.mutations_total.labels(level=level, operation=operation)._value.get()


@pytest.mark.unit
class TestStoreConstruction:
    """Tests for building stores."""

    def test_default_store_is_empty(self, store: Store[str]) -> None:
        """A new store wraps a new, empty environment."""
        assert store.environment.is_empty()
        assert not store.thread_safe
        assert isinstance(store._lock, NullLock)

    def test_wraps_given_environment(self, environment: Environment[str]) -> None:
        """The given environment is used, not copied."""
        assert Store(environment).environment is environment

    def test_from_config(self, metrics_registry: MetricsRegistry) -> None:
        """Store and query sections drive locking and the result cap."""
        config = Config(
            store=StoreConfig(thread_safe=True, lock_timeout_seconds=1.5),
            query=QueryConfig(max_result_rows=1),
        )

        store: Store[str] = Store.from_config(config, metrics=metrics_registry)

        assert store.thread_safe
        assert isinstance(store._lock, ReadWriteLock)
        assert store._lock_timeout == 1.5
        assert store._executor._max_result_rows == 1


@pytest.mark.unit
class TestStoreWrites:
    """Tests for path-addressed writes."""

    def test_create_database_and_table(self, store: Store[str]) -> None:
        """create_* add empty containers reachable through the environment."""
        db = store.create_database("d1")
        table = store.create_table("d1", "t1")

        assert store.environment["d1"] is db
        assert db["t1"] is table
        assert table.is_empty()

    def test_create_database_replaces(
        self, populated_store: Store[str], metrics_registry: MetricsRegistry
    ) -> None:
        """Re-creating a database replaces it with an empty one."""
        populated_store.create_database("d1")

        assert populated_store.get_database("d1").is_empty()
        assert _mutations(metrics_registry, "database", "replace") == 1

    def test_create_table_requires_database(self, store: Store[str]) -> None:
        """Tables need an existing database."""
        with pytest.raises(DatabaseNotFoundError, match="Database 'nope' does not exist"):
            store.create_table("nope", "t1")

    def test_put_row_replaces_whole_row(self, populated_store: Store[str]) -> None:
        """put_row never merges with the previous row."""
        populated_store.put_row("d1", "t1", 1, {"email": "a@example.com"})

        row = populated_store.get_row("d1", "t1", 1)
        assert row is not None
        assert row.columns == {"email": "a@example.com"}
        assert len(populated_store.get_table("d1", "t1")) == 3

    def test_put_row_without_columns(self, populated_store: Store[str]) -> None:
        """A row can be stored with no columns."""
        row = populated_store.put_row("d1", "t2", 7)

        assert row.is_empty()
        assert populated_store.get_table("d1", "t2")[7] is row

    def test_put_row_requires_table(self, populated_store: Store[str]) -> None:
        """Rows need an existing database and table."""
        with pytest.raises(DatabaseNotFoundError):
            populated_store.put_row("nope", "t1", 1)
        with pytest.raises(TableNotFoundError):
            populated_store.put_row("d1", "nope", 1)

    def test_put_row_validates_key(self, populated_store: Store[str]) -> None:
        """Keys are validated before the path is resolved."""
        with pytest.raises(ValueError):
            populated_store.put_row("d1", "t1", -5)

    def test_set_column(
        self, populated_store: Store[str], metrics_registry: MetricsRegistry
    ) -> None:
        """set_column inserts new columns and replaces existing ones."""
        populated_store.set_column("d1", "t1", 3, "role", "user")
        populated_store.set_column("d1", "t1", 3, "name", "caroline")

        assert populated_store.get_row("d1", "t1", 3).columns == {
            "name": "caroline",
            "role": "user",
        }
        assert _mutations(metrics_registry, "column", "insert") == 1
        assert _mutations(metrics_registry, "column", "replace") == 1

    def test_set_column_requires_row(self, populated_store: Store[str]) -> None:
        """set_column does not create rows."""
        with pytest.raises(RowNotFoundError, match="Row 99 does not exist"):
            populated_store.set_column("d1", "t1", 99, "name", "x")

    def test_not_found_errors_are_key_errors(self, store: Store[str]) -> None:
        """Callers can catch NotFoundError or plain KeyError."""
        with pytest.raises(KeyError):
            store.create_table("nope", "t1")
        with pytest.raises(NotFoundError):
            store.put_row("nope", "t1", 1)


@pytest.mark.unit
class TestStoreDeletes:
    """Tests for path-addressed deletes, which never raise on absence."""

    def test_drop_database(self, populated_store: Store[str]) -> None:
        """Dropping a database releases its tables and rows."""
        populated_store.drop_database("d1")

        assert populated_store.get_database("d1") is None
        assert populated_store.get_row("d1", "t1", 1) is None

    def test_drop_table(self, populated_store: Store[str]) -> None:
        """Dropping a table leaves sibling tables in place."""
        populated_store.drop_table("d1", "t1")

        assert list(populated_store.get_database("d1")) == ["t2"]

    def test_delete_row_and_column(self, populated_store: Store[str]) -> None:
        """Row and column deletes remove exactly one entry."""
        populated_store.delete_column("d1", "t1", 1, "role")
        populated_store.delete_row("d1", "t1", 2)

        assert populated_store.get_row("d1", "t1", 1).columns == {"name": "alice"}
        assert populated_store.get_row("d1", "t1", 2) is None
        assert len(populated_store.get_table("d1", "t1")) == 2

    @pytest.mark.parametrize(
        "call",
        [
            lambda s: s.drop_database("nope"),
            lambda s: s.drop_table("nope", "t1"),
            lambda s: s.drop_table("d1", "nope"),
            lambda s: s.delete_row("nope", "t1", 1),
            lambda s: s.delete_row("d1", "nope", 1),
            lambda s: s.delete_row("d1", "t1", 99),
            lambda s: s.delete_column("d1", "nope", 1, "name"),
            lambda s: s.delete_column("d1", "t1", 99, "name"),
            lambda s: s.delete_column("d1", "t1", 1, "nope"),
        ],
    )
    def test_deletes_on_absent_paths_are_noops(self, populated_store: Store[str], call) -> None:
        """Any absent part of the path makes the delete a no-op."""
        before = populated_store.stats()

        call(populated_store)

        assert populated_store.stats() == before

    def test_noop_deletes_are_counted(
        self, store: Store[str], metrics_registry: MetricsRegistry
    ) -> None:
        """Skipped deletes are visible in metrics."""
        store.drop_database("nope")

        assert _mutations(metrics_registry, "database", "noop") == 1
        assert _mutations(metrics_registry, "database", "delete") == 0


@pytest.mark.unit
class TestStoreReads:
    """Tests for path reads, queries and stats."""

    def test_get_column(self, populated_store: Store[str]) -> None:
        """get_column returns the value or the default."""
        assert populated_store.get_column("d1", "t1", 1, "name") == "alice"
        assert populated_store.get_column("d1", "t1", 3, "role") is None
        assert populated_store.get_column("d1", "t1", 3, "role", "none") == "none"
        assert populated_store.get_column("nope", "t1", 1, "name", "x") == "x"

    def test_get_table_absent(self, populated_store: Store[str]) -> None:
        """Absent tables read as None."""
        assert populated_store.get_table("d1", "nope") is None
        assert populated_store.get_table("nope", "t1") is None

    def test_select_and_count(self, populated_store: Store[str]) -> None:
        """Queries run against the wrapped environment."""
        where = Comparison("role", ComparisonOp.EQ, "admin")

        result = populated_store.select("d1", "t1", where=where)

        assert result.primary_keys() == [1]
        assert populated_store.count("d1", "t1") == 3
        assert populated_store.count("d1", "t1", where) == 1

    def test_stats(
        self, populated_store: Store[str], metrics_registry: MetricsRegistry
    ) -> None:
        """stats() counts every level and updates the gauges."""
        stats = populated_store.stats()

        assert stats == StoreStats(databases=1, tables=2, rows=3, columns=5)
        assert metrics_registry.containers.labels(level="column")._value.get() == 5

    def test_read_and_write_yield_environment(self, populated_store: Store[str]) -> None:
        """The lock context managers hand out the wrapped environment."""
        with populated_store.write() as env:
            env["d1"]["t1"][1].set_column("name", "root")
        with populated_store.read() as env:
            assert env["d1"]["t1"][1]["name"] == "root"


@pytest.mark.unit
class TestStoreLogging:
    """Tests for mutation events."""

    @pytest.fixture
    def captured(self, monkeypatch: pytest.MonkeyPatch) -> CapturingLogger:
        capturing = CapturingLogger()
        monkeypatch.setattr(store_module, "logger", capturing)
        return capturing

    def test_row_event_carries_columns(
        self, populated_store: Store[str], captured: CapturingLogger
    ) -> None:
        """put_row logs the written columns for redact_payload to reduce."""
        populated_store.put_row("d1", "t1", 4, {"name": "dave"})

        call = captured.calls[-1]
        assert call.method_name == "debug"
        assert call.args == ("row_inserted",)
        assert call.kwargs["columns"] == {"name": "dave"}
        assert call.kwargs["primary_key"] == 4

    def test_column_event_carries_value(
        self, populated_store: Store[str], captured: CapturingLogger
    ) -> None:
        """set_column logs the written value."""
        populated_store.set_column("d1", "t1", 1, "name", "root")

        call = captured.calls[-1]
        assert call.args == ("column_replaced",)
        assert call.kwargs["value"] == "root"
