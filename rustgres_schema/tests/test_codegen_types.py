import pytest

from rustgres_schema.codegen.models import TargetType
from rustgres_schema.codegen.types import (
    FALLBACK_RUST_TYPE,
    POSTGRES_RUST_TYPES,
    is_fallback,
    map_type,
)


class TestMapType:
    @pytest.mark.parametrize(
        "db_type,expected",
        [
            ("bigint", "i64"),
            ("bigserial", "i64"),
            ("integer", "i32"),
            ("serial", "i32"),
            ("smallint", "i16"),
            ("smallserial", "i16"),
            ("bit", "i8"),
            ("boolean", "bool"),
            ("bytea", "Vec<u8>"),
            ("character", "String"),
            ("character varying", "String"),
            ("text", "String"),
            ("inet", "String"),
            ("interval", "String"),
            ("money", "String"),
            ("point", "String"),
            ("date", "chrono::NaiveDate"),
            ("double precision", "f64"),
            ("real", "f32"),
            ("numeric", "f64"),
            ("json", "serde_json::Value"),
            ("jsonb", "serde_json::Value"),
            ("timestamp with time zone", "String"),
        ],
    )
    def test_known_types(self, db_type, expected):
        assert map_type(db_type, False) == TargetType(expected)

    def test_uuid_mode_on(self):
        assert map_type("uuid", False, uuid_mode=True).render() == "uuid::Uuid"

    def test_uuid_mode_off(self):
        assert map_type("uuid", False, uuid_mode=False).render() == "String"

    @pytest.mark.parametrize(
        "db_type",
        ["", "ARRAY", "USER-DEFINED", "tsvector", "xml", "no such type", "\x00", "🙂"],
    )
    def test_unknown_types_fall_back(self, db_type):
        assert map_type(db_type, False) == TargetType(FALLBACK_RUST_TYPE)
        assert is_fallback(db_type)

    def test_lookup_ignores_case_and_spacing(self):
        assert map_type("  Double   Precision ", False).render() == "f64"
        assert not is_fallback("INTEGER")

    def test_every_table_entry_maps_without_error(self):
        for db_type in POSTGRES_RUST_TYPES:
            for nullable in (True, False):
                for uuid_mode in (True, False):
                    assert isinstance(map_type(db_type, nullable, uuid_mode), TargetType)

    def test_deterministic(self):
        assert map_type("jsonb", True, True) == map_type("jsonb", True, True)


class TestNullability:
    def test_nullable_wrapped_once(self):
        target = map_type("integer", True)
        assert target.optional is True
        assert target.render() == "Option<i32>"

    def test_non_nullable_not_wrapped(self):
        assert map_type("integer", False).render() == "i32"

    def test_nullable_unknown_type(self):
        assert map_type("tsvector", True).render() == "Option<String>"

    def test_nullable_uuid(self):
        assert map_type("uuid", True, uuid_mode=True).render() == "Option<uuid::Uuid>"

    def test_as_optional_is_idempotent(self):
        target = TargetType("i64").as_optional()
        assert target.as_optional() == target
        assert target.as_optional().render() == "Option<i64>"

    @pytest.mark.parametrize("db_type", sorted(POSTGRES_RUST_TYPES))
    def test_never_double_wrapped(self, db_type):
        rendered = map_type(db_type, True).render()
        assert rendered.count("Option<") == 1
        assert rendered == f"Option<{map_type(db_type, False).render()}>"
