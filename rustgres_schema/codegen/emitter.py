"""Rendering of one table into a Rust struct."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Final, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..shared import field_identifier, type_identifier, unique_identifier
from .models import FieldDeclaration, GeneratedRecord, TableDescriptor
from .types import FLOAT_RUST_TYPES, is_fallback, map_type

logger = logging.getLogger(__name__)

TEMPLATE_DIR: Final[Path] = Path(__file__).parent / "templates"

DEFAULT_DERIVES: Final[tuple[str, ...]] = (
    "Debug",
    "Clone",
    "PartialEq",
    "Eq",
    "serde::Serialize",
    "serde::Deserialize",
)

# Traits f32/f64 do not implement.
FLOAT_INCOMPATIBLE_DERIVES: Final[frozenset[str]] = frozenset({"Eq", "Hash", "Ord"})


@dataclass
class GeneratorContext:
    """Context for code generation with pre-compiled templates."""

    template_env: Environment = field(init=False)

    def __post_init__(self) -> None:
        self.template_env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            auto_reload=False,
        )
        self.template_env.filters["rust_string"] = _quote
        self._record_template = self.template_env.get_template("record.rs.j2")
        self._index_template = self.template_env.get_template("schema.rs.j2")

    @property
    def record_template(self):
        return self._record_template

    @property
    def index_template(self):
        return self._index_template


@lru_cache(maxsize=256)
def _quote(value: str) -> str:
    """Quote a string for Rust literal embedding."""
    return json.dumps(value)


def _trait_name(derive: str) -> str:
    return derive.rsplit("::", 1)[-1]


def resolve_derives(
    fields: Sequence[FieldDeclaration],
    derives: Sequence[str] | None = None,
) -> tuple[str, ...]:
    """Derive list for a struct, minus traits its field types cannot derive."""
    requested = tuple(DEFAULT_DERIVES if derives is None else derives)
    if not any(f.type.rust_type in FLOAT_RUST_TYPES for f in fields):
        return requested
    return tuple(d for d in requested if _trait_name(d) not in FLOAT_INCOMPATIBLE_DERIVES)


def build_fields(table: TableDescriptor, uuid_mode: bool = False) -> tuple[FieldDeclaration, ...]:
    """Field declarations for every column, in column order.

    Columns whose names normalize to the same identifier (`userId` and
    `user_id`) get numbered field names; serde keeps the column mapping.
    """
    fields: list[FieldDeclaration] = []
    taken: set[str] = set()
    for column in table.columns:
        logger.debug("Generating field for column %s.%s", table.name, column.name)
        if is_fallback(column.db_type):
            logger.debug(
                "Column %s.%s has unmapped type '%s', using String",
                table.name,
                column.name,
                column.db_type,
            )
        name = unique_identifier(field_identifier(column.name), taken)
        taken.add(name)
        fields.append(
            FieldDeclaration(
                name=name,
                type=map_type(column.db_type, column.nullable, uuid_mode),
                column_name=column.name,
            )
        )
    return tuple(fields)


def emit_record(
    table: TableDescriptor,
    ctx: GeneratorContext,
    *,
    uuid_mode: bool = False,
    derives: Sequence[str] | None = None,
    taken_names: set[str] | None = None,
) -> GeneratedRecord:
    """Render *table* as a Rust struct.

    When *taken_names* is given the struct name is made unique against it
    and then added to it.
    """
    record_name = type_identifier(table.name)
    if taken_names is not None:
        record_name = unique_identifier(record_name, taken_names, separator="")
        taken_names.add(record_name)
    fields = build_fields(table, uuid_mode)
    resolved = resolve_derives(fields, derives)
    needs_serde = any(_trait_name(d) in ("Serialize", "Deserialize") for d in resolved)

    text = ctx.record_template.render(
        record_name=record_name,
        fields=fields,
        derives=resolved,
        needs_serde=needs_serde,
    )

    return GeneratedRecord(
        name=record_name,
        table_name=table.name,
        fields=fields,
        derives=resolved,
        text=text,
    )
