"""Value types shared by the code generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from ..shared import unraw


@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """A physical column as reported by introspection."""

    name: str
    db_type: str
    nullable: bool
    default_expr: str | None = None


@dataclass(frozen=True, slots=True)
class TableDescriptor:
    """A base table with its columns in ordinal order."""

    name: str
    columns: tuple[ColumnDescriptor, ...] = ()


@dataclass(frozen=True, slots=True)
class TargetType:
    """A Rust type, optionally wrapped in ``Option``."""

    rust_type: str
    optional: bool = False

    def as_optional(self) -> TargetType:
        """Return the ``Option`` form; already optional types are unchanged."""
        if self.optional:
            return self
        return TargetType(self.rust_type, optional=True)

    def render(self) -> str:
        if self.optional:
            return f"Option<{self.rust_type}>"
        return self.rust_type

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True, slots=True)
class FieldDeclaration:
    """One struct field generated from a column."""

    name: str
    type: TargetType
    column_name: str

    @property
    def serde_rename(self) -> str | None:
        """Original column name when serde would otherwise serialize a different key."""
        if unraw(self.name) == self.column_name:
            return None
        return self.column_name


@dataclass(frozen=True, slots=True)
class GeneratedRecord:
    """A rendered struct for one table."""

    name: str
    table_name: str
    fields: tuple[FieldDeclaration, ...]
    derives: tuple[str, ...]
    text: str
