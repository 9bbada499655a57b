"""Storage interface consumed by the ledger and the seeder."""

from contextlib import AbstractContextManager
from typing import Any, Protocol


class Storage(Protocol):
    """Narrow view of a relational database used by seedkeeper."""

    def table_exists(self, table: str) -> bool: ...

    def create_table(self, table: str, column: str) -> None:
        """Create table with a single string primary key column."""
        ...

    def columns_of(self, table: str) -> set[str]: ...

    def select_ordered(self, table: str, column: str) -> list[str]: ...

    def insert(self, table: str, column: str, value: str) -> None: ...

    def insert_rows(self, table: str, rows: list[dict[str, Any]]) -> None: ...

    def transaction(self) -> AbstractContextManager[Any]:
        """Run the enclosed block atomically; roll back on exception."""
        ...

    def commit(self) -> None: ...

    def supports_transactional_ddl(self) -> bool: ...


def split_table(table: str) -> tuple[str | None, str]:
    """
    Split a possibly schema-qualified table name.

    Example:
        >>> split_table("seeds.schema_seeds")
        ('seeds', 'schema_seeds')
        >>> split_table("schema_seeds")
        (None, 'schema_seeds')
    """
    if "." in table:
        schema, name = table.split(".", 1)
        return schema, name
    return None, table
