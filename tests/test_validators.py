"""
tests/test_validators.py
Unit tests for dbmlgen.validators.

Tests cover:
- Happy path over a full graph
- Each required field and non-empty collection
- Index column exclusivity
- Relationship type, endpoint, action and composite-key checks
- Error path wrapping and fail-fast ordering
"""

from __future__ import annotations

import pytest

from dbmlgen.builder import (
    new_column,
    new_enum,
    new_expression_index,
    new_index,
    new_project,
    new_ref,
    new_table,
    new_table_group,
)
from dbmlgen.models import (
    Column,
    Index,
    IndexColumn,
    InlineRef,
    Project,
    Ref,
    RefAction,
    RefEndpoint,
    RelType,
    TableRef,
)
from dbmlgen.validators import (
    ValidationError,
    check_project,
    validate,
    validate_column,
    validate_enum,
    validate_index,
    validate_inline_ref,
    validate_project,
    validate_ref,
    validate_ref_action,
    validate_ref_endpoint,
    validate_table,
    validate_table_group,
)


def _users_ref() -> Ref:
    return new_ref(RelType.MANY_TO_ONE).from_("public", "posts", "user_id").to("public", "users", "id")


# ===========================================================================
# ValidationError
# ===========================================================================


class TestValidationError:
    def test_str_and_field_path(self) -> None:
        err = ValidationError("Column.Type", "type is required")
        assert str(err) == "Column.Type: type is required"
        assert err.field_path == "Column.Type"

    def test_wrap_prepends_segments(self) -> None:
        err = ValidationError("Column.Type", "type is required").wrap("column 1").wrap("table public.users")
        assert err.path == ("table public.users", "column 1")
        assert str(err) == "table public.users: column 1: Column.Type: type is required"
        assert err.message == "type is required"

    def test_is_a_value_error(self) -> None:
        assert isinstance(ValidationError("X", "y"), ValueError)

    def test_to_dict(self) -> None:
        err = ValidationError("Ref.Left", "left endpoint is required").wrap("ref 0")
        assert err.to_dict() == {
            "field": "Ref.Left",
            "message": "left endpoint is required",
            "path": ["ref 0"],
        }


# ===========================================================================
# Project
# ===========================================================================


class TestValidateProject:
    def test_valid_project_passes(self, ecommerce_project: Project) -> None:
        validate_project(ecommerce_project)
        assert check_project(ecommerce_project) is None

    def test_validate_alias(self, minimal_project: Project) -> None:
        validate(minimal_project)

    def test_missing_name(self, minimal_project: Project) -> None:
        minimal_project.name = ""
        with pytest.raises(ValidationError, match="Project.Name: name is required"):
            validate_project(minimal_project)

    def test_empty_project_with_name_is_valid(self) -> None:
        validate_project(new_project("empty"))

    def test_table_error_names_its_path(self, minimal_project: Project) -> None:
        minimal_project.tables["public.users"].columns[1].type = ""
        err = check_project(minimal_project)
        assert err is not None
        assert str(err) == "table public.users: column 1: Column.Type: type is required"
        assert err.field_path == "table public.users: column 1: Column.Type"

    def test_enum_error_path(self) -> None:
        project = new_project("p").add_enum(new_enum("status"))
        with pytest.raises(ValidationError) as info:
            validate_project(project)
        assert str(info.value) == "enum public.status: Enum.Values: at least one value is required"

    def test_ref_error_path_uses_index(self) -> None:
        project = new_project("p").add_ref(_users_ref()).add_ref(new_ref(RelType.ONE_TO_ONE))
        with pytest.raises(ValidationError) as info:
            validate_project(project)
        assert str(info.value) == "ref 1: Ref.Left: left endpoint is required"

    def test_table_group_error_path(self) -> None:
        project = new_project("p").add_table_group(new_table_group("empty"))
        with pytest.raises(ValidationError) as info:
            validate_project(project)
        assert str(info.value) == "table_group 0: TableGroup.Tables: at least one table is required"

    def test_tables_checked_before_refs(self) -> None:
        project = (
            new_project("p")
            .add_ref(new_ref(RelType.ONE_TO_ONE))
            .add_table(new_table("users"))
        )
        err = check_project(project)
        assert err is not None
        assert err.path == ("table public.users",)

    def test_enums_checked_before_refs(self) -> None:
        project = new_project("p").add_ref(new_ref("")).add_enum(new_enum(""))
        err = check_project(project)
        assert err is not None
        assert err.field == "Enum.Name"

    def test_columns_checked_before_indexes(self) -> None:
        table = new_table("t").add_column(new_column("", "int")).add_index(Index())
        with pytest.raises(ValidationError) as info:
            validate_table(table)
        assert info.value.path == ("column 0",)

    def test_validation_does_not_mutate(self, ecommerce_project: Project) -> None:
        before = ecommerce_project.model_dump()
        validate_project(ecommerce_project)
        assert ecommerce_project.model_dump() == before


# ===========================================================================
# Table & column
# ===========================================================================


class TestValidateTable:
    def test_missing_name(self) -> None:
        table = new_table("").add_column(new_column("id", "int"))
        with pytest.raises(ValidationError, match="Table.Name"):
            validate_table(table)

    def test_missing_schema(self) -> None:
        table = new_table("t").with_schema("").add_column(new_column("id", "int"))
        with pytest.raises(ValidationError, match="Table.Schema: schema is required"):
            validate_table(table)

    def test_no_columns(self) -> None:
        with pytest.raises(ValidationError, match="at least one column is required"):
            validate_table(new_table("t"))

    def test_index_error_wrapped(self) -> None:
        table = new_table("t").add_column(new_column("id", "int")).add_index(Index())
        with pytest.raises(ValidationError) as info:
            validate_table(table)
        assert str(info.value) == "index 0: Index.Columns: at least one column is required"


class TestValidateColumn:
    def test_missing_name(self) -> None:
        with pytest.raises(ValidationError, match="Column.Name: name is required"):
            validate_column(new_column("", "int"))

    def test_missing_type(self) -> None:
        with pytest.raises(ValidationError, match="Column.Type: type is required"):
            validate_column(new_column("id", ""))

    def test_valid_inline_ref(self) -> None:
        validate_column(new_column("user_id", "bigint").with_ref(RelType.MANY_TO_ONE, "public", "users", "id"))

    def test_invalid_inline_ref_is_wrapped(self) -> None:
        col = new_column("user_id", "bigint").with_ref(RelType.MANY_TO_ONE, "public", "users", "")
        with pytest.raises(ValidationError) as info:
            validate_column(col)
        assert str(info.value) == "inline_ref: InlineRef.Column: column is required"

    def test_column_without_settings_is_valid(self) -> None:
        validate_column(Column(name="id", type="int", settings=None))


class TestValidateInlineRef:
    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"schema_name": "", "table": "t", "column": "c", "type": ">"}, "InlineRef.Schema"),
            ({"schema_name": "s", "table": "", "column": "c", "type": ">"}, "InlineRef.Table"),
            ({"schema_name": "s", "table": "t", "column": "", "type": ">"}, "InlineRef.Column"),
            ({"schema_name": "s", "table": "t", "column": "c", "type": ""}, "InlineRef.Type"),
        ],
    )
    def test_required_fields(self, kwargs, field) -> None:
        with pytest.raises(ValidationError) as info:
            validate_inline_ref(InlineRef(**kwargs))
        assert info.value.field == field

    def test_unknown_type(self) -> None:
        ref = InlineRef(schema_name="s", table="t", column="c", type="~")
        with pytest.raises(ValidationError, match="invalid relationship type: ~"):
            validate_inline_ref(ref)


# ===========================================================================
# Index
# ===========================================================================


class TestValidateIndex:
    def test_plain_index(self) -> None:
        validate_index(new_index("a", "b"))

    def test_single_expression_index(self) -> None:
        validate_index(new_expression_index("date(created_at)"))

    def test_no_columns(self) -> None:
        with pytest.raises(ValidationError, match="Index.Columns: at least one column is required"):
            validate_index(Index())

    def test_neither_name_nor_expression(self) -> None:
        idx = Index(columns=[IndexColumn(name="a"), IndexColumn()])
        with pytest.raises(ValidationError) as info:
            validate_index(idx)
        assert info.value.field == "Index.Columns[1]"
        assert info.value.message == "either name or expression is required"

    def test_both_name_and_expression(self) -> None:
        idx = Index(columns=[IndexColumn(name="a", expression="lower(a)")])
        with pytest.raises(ValidationError, match="cannot have both name and expression"):
            validate_index(idx)

    def test_empty_string_name_counts_as_set(self) -> None:
        validate_index(Index(columns=[IndexColumn(name="")]))


# ===========================================================================
# Ref
# ===========================================================================


class TestValidateRef:
    def test_valid_ref(self) -> None:
        validate_ref(_users_ref().with_on_delete(RefAction.CASCADE).with_on_update(RefAction.NO_ACTION))

    @pytest.mark.parametrize("rel_type", list(RelType))
    def test_every_cardinality_is_accepted(self, rel_type: RelType) -> None:
        validate_ref(new_ref(rel_type).from_("public", "a", "x").to("public", "b", "y"))

    @pytest.mark.parametrize("action", list(RefAction))
    def test_every_action_is_accepted(self, action: RefAction) -> None:
        validate_ref(_users_ref().with_on_delete(action).with_on_update(action))

    def test_missing_left(self) -> None:
        ref = new_ref(RelType.MANY_TO_ONE).to("public", "users", "id")
        with pytest.raises(ValidationError, match="Ref.Left: left endpoint is required"):
            validate_ref(ref)

    def test_missing_right(self) -> None:
        ref = new_ref(RelType.MANY_TO_ONE).from_("public", "posts", "user_id")
        with pytest.raises(ValidationError, match="Ref.Right: right endpoint is required"):
            validate_ref(ref)

    def test_missing_type(self) -> None:
        ref = _users_ref()
        ref.type = ""
        with pytest.raises(ValidationError, match="Ref.Type: relationship type is required"):
            validate_ref(ref)

    def test_invalid_type(self) -> None:
        ref = _users_ref()
        ref.type = "one-to-many"
        with pytest.raises(ValidationError, match="invalid relationship type: one-to-many"):
            validate_ref(ref)

    def test_left_endpoint_error_wrapped(self) -> None:
        ref = new_ref(RelType.MANY_TO_ONE).from_("", "posts", "user_id").to("public", "users", "id")
        with pytest.raises(ValidationError) as info:
            validate_ref(ref)
        assert str(info.value) == "left: RefEndpoint.Schema: schema is required"

    def test_right_endpoint_without_columns(self) -> None:
        ref = new_ref(RelType.MANY_TO_ONE).from_("public", "posts", "user_id").to("public", "users")
        with pytest.raises(ValidationError) as info:
            validate_ref(ref)
        assert str(info.value) == "right: RefEndpoint.Columns: at least one column is required"

    @pytest.mark.parametrize("left_count, right_count", [(1, 2), (2, 1), (3, 2)])
    def test_column_count_mismatch(self, left_count: int, right_count: int) -> None:
        left_cols = [f"l{i}" for i in range(left_count)]
        right_cols = [f"r{i}" for i in range(right_count)]
        ref = new_ref(RelType.MANY_TO_ONE).from_("public", "a", *left_cols).to("public", "b", *right_cols)
        with pytest.raises(ValidationError) as info:
            validate_ref(ref)
        assert info.value.field == "Ref.Columns"
        assert f"({left_count} != {right_count})" in info.value.message

    def test_composite_key_match(self) -> None:
        ref = (
            new_ref(RelType.MANY_TO_ONE)
            .from_("public", "posts", "tenant_id", "user_id")
            .to("public", "users", "tenant_id", "user_id")
        )
        validate_ref(ref)

    def test_invalid_on_delete(self) -> None:
        ref = _users_ref().with_on_delete("explode")
        with pytest.raises(ValidationError) as info:
            validate_ref(ref)
        assert str(info.value) == "on_delete: RefAction: invalid referential action: explode"

    def test_invalid_on_update(self) -> None:
        ref = _users_ref().with_on_update("SET NULL")
        with pytest.raises(ValidationError, match="^on_update: RefAction"):
            validate_ref(ref)


class TestValidateRefEndpoint:
    def test_missing_table(self) -> None:
        with pytest.raises(ValidationError, match="RefEndpoint.Table: table is required"):
            validate_ref_endpoint(RefEndpoint(schema_name="public", table="", columns=["id"]))

    def test_valid_endpoint(self) -> None:
        validate_ref_endpoint(RefEndpoint(schema_name="public", table="users", columns=["id"]))


class TestValidateRefAction:
    def test_spelled_values(self) -> None:
        for action in ("cascade", "restrict", "set null", "set default", "no action"):
            validate_ref_action(action)

    def test_rejects_unknown(self) -> None:
        with pytest.raises(ValidationError, match="invalid referential action: set_null"):
            validate_ref_action("set_null")


# ===========================================================================
# Enum & table group
# ===========================================================================


class TestValidateEnum:
    def test_valid(self) -> None:
        validate_enum(new_enum("status", "active"))

    def test_missing_name(self) -> None:
        with pytest.raises(ValidationError, match="Enum.Name: name is required"):
            validate_enum(new_enum("", "a"))

    def test_missing_schema(self) -> None:
        with pytest.raises(ValidationError, match="Enum.Schema: schema is required"):
            validate_enum(new_enum("status", "a").with_schema(""))

    def test_no_values(self) -> None:
        with pytest.raises(ValidationError, match="Enum.Values"):
            validate_enum(new_enum("status"))


class TestValidateTableGroup:
    def test_valid(self) -> None:
        validate_table_group(new_table_group("core").add_table("public", "users"))

    def test_missing_name(self) -> None:
        with pytest.raises(ValidationError, match="TableGroup.Name: name is required"):
            validate_table_group(new_table_group("").add_table("public", "users"))

    def test_member_without_schema(self) -> None:
        group = new_table_group("core").add_table("public", "users")
        group.tables.append(TableRef(schema_name="", name="posts"))
        with pytest.raises(ValidationError) as info:
            validate_table_group(group)
        assert info.value.field == "TableGroup.Tables[1].Schema"

    def test_member_without_name(self) -> None:
        group = new_table_group("core").add_table("public", "")
        with pytest.raises(ValidationError) as info:
            validate_table_group(group)
        assert info.value.field == "TableGroup.Tables[0].Name"
