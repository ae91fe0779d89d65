"""Mapping from PostgreSQL column types to Rust types."""

from __future__ import annotations

from typing import Final

from .models import TargetType

FALLBACK_RUST_TYPE: Final[str] = "String"
UUID_RUST_TYPE: Final[str] = "uuid::Uuid"

# Keyed by information_schema.columns.data_type. Types that have no
# dedicated Rust counterpart are listed explicitly as String so the table
# documents what is known rather than relying on the fallback.
POSTGRES_RUST_TYPES: Final[dict[str, str]] = {
    # Integers
    "bigint": "i64",
    "bigserial": "i64",
    "integer": "i32",
    "serial": "i32",
    "smallint": "i16",
    "smallserial": "i16",
    "bit": "i8",
    "bit varying": "i8",
    # Floating point. numeric loses precision as f64.
    "double precision": "f64",
    "real": "f32",
    "numeric": "f64",
    # Scalars
    "boolean": "bool",
    "bytea": "Vec<u8>",
    "date": "chrono::NaiveDate",
    "json": "serde_json::Value",
    "jsonb": "serde_json::Value",
    # Text
    "character": "String",
    "character varying": "String",
    "text": "String",
    # Network, geometric and other textual representations
    "cidr": "String",
    "inet": "String",
    "macaddr": "String",
    "box": "String",
    "circle": "String",
    "line": "String",
    "lseg": "String",
    "path": "String",
    "point": "String",
    "polygon": "String",
    "interval": "String",
    "money": "String",
    "pg_lsn": "String",
    "time without time zone": "String",
    "time with time zone": "String",
    "timestamp without time zone": "String",
    "timestamp with time zone": "String",
    # uuid depends on the uuid flag, see map_type()
    "uuid": FALLBACK_RUST_TYPE,
}

FLOAT_RUST_TYPES: Final[frozenset[str]] = frozenset({"f32", "f64"})


def _normalize(db_type: str) -> str:
    return " ".join(db_type.split()).lower()


def is_fallback(db_type: str) -> bool:
    """True when *db_type* is not listed and maps to the textual fallback."""
    return _normalize(db_type) not in POSTGRES_RUST_TYPES


def map_type(db_type: str, nullable: bool, uuid_mode: bool = False) -> TargetType:
    """Resolve the Rust type for a column.

    Never raises: unknown types, including ``ARRAY`` and ``USER-DEFINED``,
    map to ``String``. Nullable columns are wrapped in ``Option`` once.

    Examples:
        >>> map_type("integer", False).render()
        'i32'
        >>> map_type("text", True).render()
        'Option<String>'
        >>> map_type("uuid", False, uuid_mode=True).render()
        'uuid::Uuid'
    """
    key = _normalize(db_type)
    if key == "uuid" and uuid_mode:
        rust_type = UUID_RUST_TYPE
    else:
        rust_type = POSTGRES_RUST_TYPES.get(key, FALLBACK_RUST_TYPE)

    target = TargetType(rust_type)
    return target.as_optional() if nullable else target
