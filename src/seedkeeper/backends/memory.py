"""Memory backend - in-memory storage for testing without database."""

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from seedkeeper.exceptions import DuplicateKeyError


class MemoryStorage:
    """
    In-memory storage for running seeds without a database.

    Simulates database behavior:
    - Enforces single-column primary keys on tables created by create_table()
    - Snapshots state in transaction() and restores it on error
    - Creates data tables on first insert_rows()

    Use case: Fast unit tests, offline development, prototyping seed logic.
    """

    def __init__(self, transactional: bool = True):
        """
        Initialize memory storage with empty state.

        Args:
            transactional: Value reported by supports_transactional_ddl()
        """
        self.transactional = transactional
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._primary_keys: dict[str, str] = {}
        self._columns: dict[str, set[str]] = {}
        self.commits = 0

    def table_exists(self, table: str) -> bool:
        return table in self._tables

    def create_table(self, table: str, column: str) -> None:
        self._tables[table] = []
        self._primary_keys[table] = column
        self._columns[table] = {column}

    def columns_of(self, table: str) -> set[str]:
        return set(self._columns.get(table, set()))

    def select_ordered(self, table: str, column: str) -> list[str]:
        return sorted(row[column] for row in self._tables[table])

    def insert(self, table: str, column: str, value: str) -> None:
        self.insert_rows(table, [{column: value}])

    def insert_rows(self, table: str, rows: list[dict[str, Any]]) -> None:
        stored = self._tables.setdefault(table, [])
        columns = self._columns.setdefault(table, set())
        pk = self._primary_keys.get(table)

        for row in rows:
            if pk is not None and any(r.get(pk) == row.get(pk) for r in stored):
                raise DuplicateKeyError(table, pk, row.get(pk))
            stored.append(dict(row))
            columns.update(row)

    def rows(self, table: str) -> list[dict[str, Any]]:
        """
        Get in-memory rows for inspection.

        Args:
            table: Table name

        Returns:
            List of row dicts for the table
        """
        return self._tables.get(table, [])

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = copy.deepcopy((self._tables, self._primary_keys, self._columns))
        try:
            yield
        except BaseException:
            self._tables, self._primary_keys, self._columns = snapshot
            raise

    def commit(self) -> None:
        self.commits += 1

    def supports_transactional_ddl(self) -> bool:
        return self.transactional
