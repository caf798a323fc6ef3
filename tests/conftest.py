"""Pytest configuration and fixtures for jsdb tests."""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from jsdb.application import Store
from jsdb.domain.entities import Database, Environment, Row, Table
from jsdb.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def environment() -> Environment[str]:
    """Environment with d1.t1 holding rows 1..3 and an empty d1.t2."""
    env: Environment[str] = Environment.new()
    db: Database[str] = Database.create()
    users: Table[str] = Table.create()
    users.add_row(1, Row.from_mapping({"name": "alice", "role": "admin"}))
    users.add_row(2, Row.from_mapping({"name": "bob", "role": "user"}))
    users.add_row(3, Row.from_mapping({"name": "carol"}))
    db.add_table("t1", users)
    db.add_table("t2", Table.create())
    env.add_database("d1", db)
    return env


@pytest.fixture
def store(metrics_registry: MetricsRegistry) -> Store[str]:
    """Provide an empty single-threaded store."""
    return Store(metrics=metrics_registry)


@pytest.fixture
def populated_store(environment: Environment[str], metrics_registry: MetricsRegistry) -> Store[str]:
    """Provide a store wrapping the populated environment."""
    return Store(environment, metrics=metrics_registry)


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
