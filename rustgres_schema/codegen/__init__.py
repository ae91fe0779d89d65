"""Schema Code Generator - Generates Rust structs from a PostgreSQL schema."""

from .main import (
    GenerationResult,
    build_parser,
    generate,
    main,
)
from .models import (
    ColumnDescriptor,
    TableDescriptor,
    TargetType,
    FieldDeclaration,
    GeneratedRecord,
)
from .types import POSTGRES_RUST_TYPES, map_type

__all__ = [
    "GenerationResult",
    "build_parser",
    "generate",
    "main",
    "ColumnDescriptor",
    "TableDescriptor",
    "TargetType",
    "FieldDeclaration",
    "GeneratedRecord",
    "POSTGRES_RUST_TYPES",
    "map_type",
]
