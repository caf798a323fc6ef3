"""Integration tests: end-to-end scenarios over the container tree and Store."""

from __future__ import annotations

import threading

import pytest

from jsdb import Database, Environment, Row, Store, Table
from jsdb.application import Comparison, ComparisonOp
from jsdb.infrastructure.metrics import MetricsRegistry


@pytest.mark.integration
class TestContainerScenarios:
    """Scenarios driven through the core containers only."""

    def test_build_lookup_and_drop_table(self) -> None:
        """Build d1.t1.row(1), read it back, then drop the table."""
        env: Environment[str] = Environment.new()
        env.add_database("d1", Database.create())
        env["d1"].add_table("t1", Table.create())
        row: Row[str] = Row.create()
        row.set_column("name", "hello")
        env["d1"]["t1"].add_row(1, row)

        assert env["d1"]["t1"][1]["name"] == "hello"

        env["d1"].delete_table("t1")

        assert len(env["d1"]) == 0
        assert env["d1"].get("t1") is None

    def test_row_replaced_not_merged(self) -> None:
        """Adding key 1 twice keeps only the second row's columns."""
        table: Table[str] = Table.create()
        table.add_row(1, Row.from_mapping({"name": "first", "role": "admin"}))
        second = Row.from_mapping({"email": "second@example.com"})

        table.add_row(1, second)

        assert len(table) == 1
        assert table[1] is second
        assert dict(table[1].items()) == {"email": "second@example.com"}

    def test_counts_follow_inserts_and_deletes(self) -> None:
        """Overwrites keep the count, deletes drop it by one, absent deletes keep it."""
        db: Database[int] = Database.create()
        db.add_table("a", Table.create())
        db.add_table("b", Table.create())
        db.add_table("a", Table.create())
        assert len(db) == 2

        db.delete_table("a")
        assert len(db) == 1

        db.delete_table("a")
        assert len(db) == 1
        assert list(db) == ["b"]

    def test_tree_independence(self) -> None:
        """Rows with the same key in different tables are unrelated."""
        env: Environment[int] = Environment.new()
        env.add_database("d1", Database.create())
        env["d1"].add_table("t1", Table.create())
        env["d1"].add_table("t2", Table.create())
        env["d1"]["t1"].add_row(1, Row.from_mapping({"n": 1}))
        env["d1"]["t2"].add_row(1, Row.from_mapping({"n": 1}))

        env["d1"]["t1"][1].set_column("n", 99)

        assert env["d1"]["t2"][1]["n"] == 1


@pytest.mark.integration
class TestStoreScenarios:
    """Scenarios driven through the Store facade."""

    def test_store_round_trip(self, store: Store[str]) -> None:
        """Path operations and queries agree with the underlying tree."""
        store.create_database("d1")
        store.create_table("d1", "t1")
        store.put_row("d1", "t1", 1, {"name": "hello"})
        store.put_row("d1", "t1", 2, {"name": "world"})

        assert store.get_column("d1", "t1", 1, "name") == "hello"
        result = store.select("d1", "t1", where=Comparison("name", ComparisonOp.EQ, "world"))
        assert result.primary_keys() == [2]

        store.drop_table("d1", "t1")

        assert store.get_row("d1", "t1", 1) is None
        assert not store.select("d1", "t1").success
        assert store.stats().tables == 0

    def test_concurrent_writers_and_readers(self, metrics_registry: MetricsRegistry) -> None:
        """A thread-safe store loses no writes under concurrent access."""
        store: Store[int] = Store(thread_safe=True, lock_timeout=5.0, metrics=metrics_registry)
        store.create_database("d1")
        store.create_table("d1", "t1")
        errors: list[BaseException] = []

        def writer(offset: int) -> None:
            try:
                for i in range(200):
                    store.put_row("d1", "t1", offset + i, {"n": i})
            except BaseException as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        def reader() -> None:
            try:
                for _ in range(200):
                    store.count("d1", "t1", Comparison("n", ComparisonOp.GE, 0))
            except BaseException as exc:  # pragma: no cover - surfaced below
                errors.append(exc)

        threads = [threading.Thread(target=writer, args=(k * 1000,)) for k in range(4)]
        threads += [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert store.count("d1", "t1") == 800
        assert metrics_registry.mutations_total.labels(
            level="row", operation="insert"
        )._value.get() == 800
