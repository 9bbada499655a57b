"""PostgreSQL storage backend on psycopg 3."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from psycopg import Connection, sql

from seedkeeper.backends.base import split_table


class PostgresStorage:
    """
    Storage backed by a psycopg connection.

    The connection is expected to be in non-autocommit mode; transaction()
    wraps a block in a transaction (or savepoint when one is already open)
    and commit() persists work done outside of one.

    Seed bodies receive this object and may use ``storage.conn`` for
    arbitrary SQL.
    """

    def __init__(self, conn: Connection):
        """
        Initialize backend.

        Args:
            conn: PostgreSQL connection
        """
        self.conn = conn

    def _identifier(self, table: str) -> sql.Identifier:
        schema, name = split_table(table)
        if schema:
            return sql.Identifier(schema, name)
        return sql.Identifier(name)

    def _schema_and_name(self, table: str) -> tuple[sql.Composable, str]:
        schema, name = split_table(table)
        if schema:
            return sql.Literal(schema), name
        return sql.SQL("current_schema()"), name

    def table_exists(self, table: str) -> bool:
        schema, name = self._schema_and_name(table)
        query = sql.SQL(
            """
            SELECT EXISTS(
                SELECT 1 FROM information_schema.tables
                WHERE table_schema = {schema} AND table_name = %s
            )
            """
        ).format(schema=schema)
        with self.conn.cursor() as cur:
            cur.execute(query, (name,))
            return cur.fetchone()[0]

    def create_table(self, table: str, column: str) -> None:
        query = sql.SQL("CREATE TABLE {table} ({column} TEXT PRIMARY KEY)").format(
            table=self._identifier(table),
            column=sql.Identifier(column),
        )
        with self.conn.cursor() as cur:
            cur.execute(query)

    def columns_of(self, table: str) -> set[str]:
        schema, name = self._schema_and_name(table)
        query = sql.SQL(
            """
            SELECT column_name
            FROM information_schema.columns
            WHERE table_schema = {schema} AND table_name = %s
            ORDER BY ordinal_position
            """
        ).format(schema=schema)
        with self.conn.cursor() as cur:
            cur.execute(query, (name,))
            return {row[0] for row in cur.fetchall()}

    def select_ordered(self, table: str, column: str) -> list[str]:
        query = sql.SQL("SELECT {column} FROM {table} ORDER BY {column}").format(
            table=self._identifier(table),
            column=sql.Identifier(column),
        )
        with self.conn.cursor() as cur:
            cur.execute(query)
            return [row[0] for row in cur.fetchall()]

    def insert(self, table: str, column: str, value: str) -> None:
        query = sql.SQL("INSERT INTO {table} ({column}) VALUES (%s)").format(
            table=self._identifier(table),
            column=sql.Identifier(column),
        )
        with self.conn.cursor() as cur:
            cur.execute(query, (value,))

    def insert_rows(self, table: str, rows: list[dict[str, Any]]) -> None:
        """
        Insert rows one by one, each with its own column list.

        Args:
            table: Table name (optionally schema-qualified)
            rows: Row mappings of column name to value
        """
        with self.conn.cursor() as cur:
            for row in rows:
                columns = list(row)
                query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values})").format(
                    table=self._identifier(table),
                    columns=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
                    values=sql.SQL(", ").join([sql.Placeholder()] * len(columns)),
                )
                cur.execute(query, [row[c] for c in columns])

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self.conn.transaction():
            yield

    def commit(self) -> None:
        self.conn.commit()

    def supports_transactional_ddl(self) -> bool:
        return True
