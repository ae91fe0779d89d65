from rustgres_schema.codegen.emitter import (
    DEFAULT_DERIVES,
    GeneratorContext,
    _quote,
    build_fields,
    emit_record,
    resolve_derives,
)
from rustgres_schema.codegen.models import ColumnDescriptor, TableDescriptor

USERS = TableDescriptor(
    name="users",
    columns=(
        ColumnDescriptor("id", "integer", False, "nextval('users_id_seq'::regclass)"),
        ColumnDescriptor("email", "text", False),
        ColumnDescriptor("bio", "text", True),
    ),
)


class TestQuote:
    def test_quote_basic_string(self):
        assert _quote("createdAt") == '"createdAt"'

    def test_quote_string_with_quotes(self):
        assert _quote('say "hi"') == '"say \\"hi\\""'


class TestBuildFields:
    def test_fields_follow_column_order(self):
        fields = build_fields(USERS)

        assert [f.name for f in fields] == ["id", "email", "bio"]
        assert [f.type.render() for f in fields] == ["i32", "String", "Option<String>"]

    def test_column_names_preserved(self):
        table = TableDescriptor("events", (ColumnDescriptor("createdAt", "date", False),))

        (field,) = build_fields(table)
        assert field.name == "created_at"
        assert field.column_name == "createdAt"
        assert field.serde_rename == "createdAt"

    def test_raw_identifier_needs_no_rename(self):
        table = TableDescriptor("items", (ColumnDescriptor("type", "text", False),))

        (field,) = build_fields(table)
        assert field.name == "r#type"
        assert field.serde_rename is None

    def test_uuid_mode(self):
        table = TableDescriptor("items", (ColumnDescriptor("id", "uuid", False),))

        assert build_fields(table, uuid_mode=True)[0].type.render() == "uuid::Uuid"
        assert build_fields(table, uuid_mode=False)[0].type.render() == "String"


class TestResolveDerives:
    def test_default_set(self):
        assert resolve_derives(build_fields(USERS)) == DEFAULT_DERIVES

    def test_floats_drop_eq(self):
        table = TableDescriptor("prices", (ColumnDescriptor("amount", "numeric", True),))

        derives = resolve_derives(build_fields(table))
        assert "Eq" not in derives
        assert "PartialEq" in derives

    def test_floats_drop_hash_by_trait_name(self):
        table = TableDescriptor("prices", (ColumnDescriptor("amount", "real", False),))

        derives = resolve_derives(build_fields(table), ["Debug", "std::hash::Hash"])
        assert derives == ("Debug",)

    def test_custom_set(self):
        assert resolve_derives(build_fields(USERS), ["Debug"]) == ("Debug",)


class TestEmitRecord:
    def test_emit_record(self):
        record = emit_record(USERS, GeneratorContext())

        assert record.name == "Users"
        assert record.table_name == "users"
        assert record.text == (
            "#[derive(Debug, Clone, PartialEq, Eq, serde::Serialize, serde::Deserialize)]\n"
            "pub struct Users {\n"
            "    pub id: i32,\n"
            "    pub email: String,\n"
            "    pub bio: Option<String>,\n"
            "}\n"
        )

    def test_emit_record_with_rename(self):
        table = TableDescriptor(
            "AuditLog",
            (
                ColumnDescriptor("eventId", "bigint", False),
                ColumnDescriptor("payload", "jsonb", True),
            ),
        )

        record = emit_record(table, GeneratorContext())

        assert record.name == "AuditLog"
        assert '    #[serde(rename = "eventId")]\n    pub event_id: i64,\n' in record.text
        assert "    pub payload: Option<serde_json::Value>,\n" in record.text

    def test_no_rename_without_serde(self):
        table = TableDescriptor("events", (ColumnDescriptor("createdAt", "date", False),))

        record = emit_record(table, GeneratorContext(), derives=["Debug", "Clone"])

        assert record.text.startswith("#[derive(Debug, Clone)]\n")
        assert "serde" not in record.text

    def test_emit_record_without_columns(self):
        record = emit_record(TableDescriptor("empty"), GeneratorContext())

        assert record.fields == ()
        assert record.text.endswith("pub struct Empty {\n}\n")

    def test_emit_record_reserved_table_name(self):
        record = emit_record(TableDescriptor("self"), GeneratorContext())

        assert record.name == "Self_"
        assert "pub struct Self_ {" in record.text


class TestFieldCollisions:
    def test_normalized_duplicates_are_numbered(self):
        table = TableDescriptor(
            "sessions",
            (
                ColumnDescriptor("userId", "integer", False),
                ColumnDescriptor("user_id", "integer", False),
                ColumnDescriptor("_id", "text", False),
                ColumnDescriptor("id", "text", False),
            ),
        )

        fields = build_fields(table)

        assert [f.name for f in fields] == ["user_id", "user_id_2", "id", "id_2"]
        assert [f.serde_rename for f in fields] == ["userId", "user_id", "_id", "id"]

    def test_rendered_struct_has_unique_fields(self):
        table = TableDescriptor(
            "sessions",
            (
                ColumnDescriptor("userId", "integer", False),
                ColumnDescriptor("user_id", "integer", False),
            ),
        )

        record = emit_record(table, GeneratorContext())

        assert record.text.count("pub user_id: i32,") == 1
        assert '    #[serde(rename = "user_id")]\n    pub user_id_2: i32,\n' in record.text


class TestRecordNameCollisions:
    def test_taken_names_are_numbered(self):
        ctx = GeneratorContext()
        taken: set[str] = set()

        first = emit_record(TableDescriptor("UserAccounts"), ctx, taken_names=taken)
        second = emit_record(TableDescriptor("user_accounts"), ctx, taken_names=taken)

        assert first.name == "UserAccounts"
        assert second.name == "UserAccounts2"
        assert "pub struct UserAccounts2 {" in second.text
        assert taken == {"UserAccounts", "UserAccounts2"}

    def test_prelude_table_name_does_not_shadow_option(self):
        table = TableDescriptor("option", (ColumnDescriptor("c", "text", True),))

        record = emit_record(table, GeneratorContext())

        assert "pub struct Option_ {\n    pub c: Option<String>,\n}\n" in record.text


class TestEmptyDerives:
    def test_no_derive_attribute(self):
        record = emit_record(TableDescriptor("users", (ColumnDescriptor("id", "integer", False),)), GeneratorContext(), derives=[])

        assert record.text == "pub struct Users {\n    pub id: i32,\n}\n"
