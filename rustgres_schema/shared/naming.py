"""Naming utilities for code generation.

Database identifiers are snake_case by convention but nothing stops a schema
from containing mixed case, spaces, leading digits or Rust keywords. The
``*_identifier`` helpers always return something rustc accepts.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Collection

RUST_KEYWORDS: frozenset[str] = frozenset({
    # Strict keywords
    "as",
    "async",
    "await",
    "break",
    "const",
    "continue",
    "crate",
    "dyn",
    "else",
    "enum",
    "extern",
    "false",
    "fn",
    "for",
    "if",
    "impl",
    "in",
    "let",
    "loop",
    "match",
    "mod",
    "move",
    "mut",
    "pub",
    "ref",
    "return",
    "self",
    "Self",
    "static",
    "struct",
    "super",
    "trait",
    "true",
    "type",
    "union",
    "unsafe",
    "use",
    "where",
    "while",
    # Reserved for future use
    "abstract",
    "become",
    "box",
    "do",
    "final",
    "gen",
    "macro",
    "override",
    "priv",
    "try",
    "typeof",
    "unsized",
    "virtual",
    "yield",
})

# Keywords rustc refuses even as raw identifiers.
NON_RAW_KEYWORDS: frozenset[str] = frozenset({"crate", "self", "Self", "super"})

# Prelude types generated fields refer to; a struct with one of these names
# would shadow it for the whole file.
PRELUDE_TYPE_NAMES: frozenset[str] = frozenset({"Box", "Option", "Result", "String", "Vec"})

_INVALID_CHARS = re.compile(r"[^0-9A-Za-z_]")


@lru_cache(maxsize=1024)
def to_pascal_case(value: str) -> str:
    """Convert a string to PascalCase.

    Examples:
        >>> to_pascal_case("hello_world")
        'HelloWorld'
        >>> to_pascal_case("hello-world")
        'HelloWorld'
        >>> to_pascal_case("helloWorld")
        'HelloWorld'
    """
    # Handle already camelCase/PascalCase by inserting underscores before caps
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)

    parts = [part for part in value.replace("-", "_").split("_") if part]
    return "".join(part.capitalize() for part in parts)


@lru_cache(maxsize=1024)
def to_snake_case(value: str) -> str:
    """Convert a string to snake_case.

    Examples:
        >>> to_snake_case("HelloWorld")
        'hello_world'
        >>> to_snake_case("HTTPRequest")
        'http_request'
        >>> to_snake_case("hello-world")
        'hello_world'
    """
    value = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", value)
    value = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", value)
    value = value.replace("-", "_")
    value = re.sub(r"_+", "_", value)
    return value.lower().strip("_")


def escape_keyword(ident: str) -> str:
    """Make a snake_case identifier safe to use where Rust expects a name."""
    if ident in NON_RAW_KEYWORDS:
        return f"{ident}_"
    if ident in RUST_KEYWORDS:
        return f"r#{ident}"
    return ident


def unraw(ident: str) -> str:
    """Strip the ``r#`` raw-identifier prefix."""
    return ident.removeprefix("r#")


@lru_cache(maxsize=1024)
def field_identifier(name: str) -> str:
    """Convert a column name to a valid snake_case Rust field name.

    Examples:
        >>> field_identifier("createdAt")
        'created_at'
        >>> field_identifier("type")
        'r#type'
        >>> field_identifier("2fa_enabled")
        '_2fa_enabled'
    """
    ident = to_snake_case(_INVALID_CHARS.sub("_", name))
    if not ident:
        return "unnamed"
    if ident[0].isdigit():
        return f"_{ident}"
    return escape_keyword(ident)


@lru_cache(maxsize=1024)
def type_identifier(name: str) -> str:
    """Convert a table name to a valid PascalCase Rust type name.

    Examples:
        >>> type_identifier("user_accounts")
        'UserAccounts'
        >>> type_identifier("self")
        'Self_'
        >>> type_identifier("option")
        'Option_'
    """
    ident = to_pascal_case(_INVALID_CHARS.sub("_", name))
    if not ident:
        return "Unnamed"
    if ident[0].isdigit():
        return f"_{ident}"
    if ident in RUST_KEYWORDS or ident in PRELUDE_TYPE_NAMES:
        return f"{ident}_"
    return ident


def unique_identifier(ident: str, taken: Collection[str], separator: str = "_") -> str:
    """Return *ident*, or a numbered variant of it not present in *taken*.

    Examples:
        >>> unique_identifier("user_id", {"user_id"})
        'user_id_2'
        >>> unique_identifier("r#type", {"r#type"})
        'type_2'
        >>> unique_identifier("Users", {"Users", "Users2"}, separator="")
        'Users3'
    """
    if ident not in taken:
        return ident
    base = unraw(ident)
    counter = 2
    while f"{base}{separator}{counter}" in taken:
        counter += 1
    return f"{base}{separator}{counter}"


@lru_cache(maxsize=1024)
def module_identifier(name: str) -> str:
    """Convert a route file name to the Rust module name declared for it."""
    return field_identifier(name.lower().replace("-", "_"))


@lru_cache(maxsize=1024)
def route_key(table_name: str) -> str:
    """Canonical key used to match a table against configured routes.

    Both the introspected table name and the table half of every route
    pair go through this function, so ``UserAccounts``, ``user-accounts``
    and ``user_accounts`` all select the same route.
    """
    return to_snake_case(table_name.strip())
