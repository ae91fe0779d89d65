#!/usr/bin/env python3
"""
Generate Rust structs from a PostgreSQL schema.

Usage:
    python -m rustgres_schema --database <name> [options]

Examples:
    python -m rustgres_schema --database app --uuid
    python -m rustgres_schema --database app --table-file users:users,orders:orders
    python -m rustgres_schema --env-file .env --database app -d src -o schema.rs
"""

from .codegen.main import main

if __name__ == "__main__":
    main()
