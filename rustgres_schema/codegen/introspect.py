"""PostgreSQL schema introspection through information_schema."""

from __future__ import annotations

import logging
from typing import Iterator, Protocol

import psycopg

from ..shared import ConnectionSettings, DatabaseConnectionError, SchemaQueryError
from .models import ColumnDescriptor, TableDescriptor

logger = logging.getLogger(__name__)

TABLES_QUERY = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = %s AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

COLUMNS_QUERY = """
    SELECT column_name, data_type, is_nullable, column_default
    FROM information_schema.columns
    WHERE table_schema = %s AND table_name = %s
    ORDER BY ordinal_position
"""


class SchemaSession(Protocol):
    """What the generator needs from a database session."""

    def fetch_tables(self, schema: str) -> list[str]: ...

    def fetch_columns(self, schema: str, table: str) -> list[ColumnDescriptor]: ...


class PostgresSession:
    """A single psycopg connection used for the whole run.

    Usage:
        with PostgresSession.connect(settings) as session:
            tables = list(introspect_schema(session, "public"))
    """

    def __init__(self, connection: psycopg.Connection) -> None:
        self._conn = connection

    @classmethod
    def connect(cls, settings: ConnectionSettings) -> PostgresSession:
        """Open a session.

        Raises:
            DatabaseConnectionError: If the server is unreachable or rejects
                the credentials.
        """
        logger.debug("Connection target: %s", settings.describe())
        logger.info("Connecting to PostgreSQL database")
        try:
            connection = psycopg.connect(
                host=settings.host,
                port=settings.port,
                user=settings.username,
                password=settings.password,
                dbname=settings.database,
                autocommit=True,
            )
        except psycopg.Error as e:
            raise DatabaseConnectionError(str(e).strip(), settings.host, settings.port) from e
        logger.info("Connected to PostgreSQL database")
        return cls(connection)

    def fetch_tables(self, schema: str) -> list[str]:
        """Names of the base tables in *schema*, sorted."""
        try:
            with self._conn.cursor() as cur:
                cur.execute(TABLES_QUERY, (schema,))
                return [row[0] for row in cur.fetchall()]
        except psycopg.Error as e:
            raise SchemaQueryError(str(e).strip(), schema) from e

    def fetch_columns(self, schema: str, table: str) -> list[ColumnDescriptor]:
        """Columns of *table* in ordinal position order."""
        try:
            with self._conn.cursor() as cur:
                cur.execute(COLUMNS_QUERY, (schema, table))
                rows = cur.fetchall()
        except psycopg.Error as e:
            raise SchemaQueryError(str(e).strip(), schema, table) from e

        return [
            ColumnDescriptor(
                name=name,
                db_type=data_type,
                nullable=is_nullable == "YES",
                default_expr=default,
            )
            for name, data_type, is_nullable, default in rows
        ]

    def close(self) -> None:
        if self._conn.closed:
            return
        self._conn.close()
        logger.info("Closed PostgreSQL connection")

    def __enter__(self) -> PostgresSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def introspect_schema(session: SchemaSession, schema: str) -> Iterator[TableDescriptor]:
    """Yield every base table in *schema*, one fully fetched table at a time."""
    for table_name in session.fetch_tables(schema):
        logger.info("Generating schema for table %s", table_name)
        columns = session.fetch_columns(schema, table_name)
        yield TableDescriptor(name=table_name, columns=tuple(columns))
