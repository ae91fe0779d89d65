"""Generate Rust structs from a PostgreSQL schema."""

__version__ = "0.3.0"
