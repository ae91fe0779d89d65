"""Custom exceptions for rustgres-schema."""

from __future__ import annotations


class RustgresError(Exception):
    """Base exception for every error that aborts a generation run."""

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        full_message = f"{message}" if not source else f"[{source}] {message}"
        super().__init__(full_message)


class ConfigurationError(RustgresError):
    """Raised when a required parameter is absent or malformed."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        option: str | None = None,
    ) -> None:
        self.option = option
        if option:
            message = f"Option '{option}': {message}"
        super().__init__(message, source)


class DatabaseConnectionError(RustgresError):
    """Raised when the database is unreachable or rejects the credentials."""

    def __init__(self, message: str, host: str, port: int | str) -> None:
        self.host = host
        self.port = port
        super().__init__(f"Cannot connect to {host}:{port}: {message}")


class SchemaQueryError(RustgresError):
    """Raised when an introspection query fails."""

    def __init__(self, message: str, schema: str, table: str | None = None) -> None:
        self.schema = schema
        self.table = table
        target = f"{schema}.{table}" if table else schema
        super().__init__(f"Introspection of '{target}' failed: {message}")


class OutputError(RustgresError):
    """Raised when a generated file or directory cannot be written."""

    def __init__(self, message: str, path: str) -> None:
        self.path = path
        super().__init__(message, path)
