"""Shared utilities for rustgres-schema."""

from .config_loader import (
    ConnectionSettings,
    GeneratorSettings,
    load_config,
    parse_route_pairs,
    resolve_settings,
)
from .naming import (
    to_pascal_case,
    to_snake_case,
    field_identifier,
    type_identifier,
    module_identifier,
    route_key,
    unraw,
    unique_identifier,
    RUST_KEYWORDS,
)
from .errors import (
    RustgresError,
    ConfigurationError,
    DatabaseConnectionError,
    SchemaQueryError,
    OutputError,
)

__all__ = [
    # Configuration
    "ConnectionSettings",
    "GeneratorSettings",
    "load_config",
    "parse_route_pairs",
    "resolve_settings",
    # Naming utilities
    "to_pascal_case",
    "to_snake_case",
    "field_identifier",
    "type_identifier",
    "module_identifier",
    "route_key",
    "unraw",
    "unique_identifier",
    "RUST_KEYWORDS",
    # Errors
    "RustgresError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "SchemaQueryError",
    "OutputError",
]
