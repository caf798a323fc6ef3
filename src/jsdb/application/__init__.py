"""Application layer for jsdb.

The application layer builds on the container hierarchy to serve callers.

Exports:
    Store:
        - Store: Path-addressed entry point with optional locking
        - StoreStats: Container counts per level
        - bootstrap: Build a Store with logging, tracing and metrics wired
    Query:
        - QueryExecutor: Runs selects using the Volcano iterator model
        - QueryResult: Result of a select
        - ResultRow: A row snapshot in a result
        - Operator and its subclasses: Pipeline stages
        - Comparison, ComparisonOp, And, Or, Not: Predicates
"""

from jsdb.application.bootstrap import bootstrap
from jsdb.application.query import (
    PK_COLUMN,
    And,
    Comparison,
    ComparisonOp,
    FilterOperator,
    LimitOperator,
    Not,
    Operator,
    Or,
    ProjectOperator,
    QueryExecutor,
    QueryResult,
    ResultRow,
    RowScanOperator,
    SortOperator,
)
from jsdb.application.store import Store, StoreStats

__all__ = [
    "Store",
    "StoreStats",
    "bootstrap",
    "QueryExecutor",
    "QueryResult",
    "ResultRow",
    "PK_COLUMN",
    "Operator",
    "RowScanOperator",
    "FilterOperator",
    "ProjectOperator",
    "SortOperator",
    "LimitOperator",
    "Comparison",
    "ComparisonOp",
    "And",
    "Or",
    "Not",
]
