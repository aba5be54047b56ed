"""
tests/conftest.py
Shared fixtures for the dbmlgen test suite.

Fixtures build fresh graphs per test so tests can mutate freely.  File
fixtures write into pytest's tmp_path.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Dict

import pytest
import yaml

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
from dbmlgen.models import Project, RefAction, RelType


# ---------------------------------------------------------------------------
# Graph fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def minimal_project() -> Project:
    """Smallest interesting project: one table, two columns."""
    return new_project("test").add_table(
        new_table("users")
        .add_column(new_column("id", "bigint").with_primary_key())
        .add_column(new_column("email", "varchar(255)").with_unique())
    )


@pytest.fixture()
def ecommerce_project() -> Project:
    """A fuller project touching every entity kind."""
    users = (
        new_table("users")
        .with_header_color("#3498DB")
        .with_note("User accounts")
        .add_column(new_column("id", "bigint").with_primary_key().with_increment())
        .add_column(new_column("email", "varchar(255)").with_unique())
        .add_column(new_column("created_at", "timestamp").with_default("now()"))
    )
    orders = (
        new_table("orders")
        .add_column(new_column("id", "bigint").with_primary_key().with_increment())
        .add_column(
            new_column("user_id", "bigint").with_ref(RelType.MANY_TO_ONE, "public", "users", "id")
        )
        .add_column(new_column("status", "order_status").with_default("'pending'"))
        .add_column(new_column("total", "decimal(10,2)").with_check("total >= 0"))
        .add_index(new_index("user_id", "created_at").with_name("idx_orders_user_created"))
        .add_index(new_expression_index("date(created_at)").with_type("btree"))
    )
    audit = (
        new_table("events")
        .with_schema("audit")
        .add_column(new_column("id", "bigint").with_primary_key())
        .add_column(new_column("payload", "jsonb").with_null())
    )
    order_ref = (
        new_ref(RelType.MANY_TO_ONE)
        .from_("public", "orders", "user_id")
        .to("public", "users", "id")
        .with_on_delete(RefAction.CASCADE)
    )
    group = new_table_group("core").add_table("public", "users").add_table("public", "orders")

    return (
        new_project("ecommerce")
        .with_database_type("PostgreSQL")
        .with_note("E-commerce schema")
        .add_enum(new_enum("order_status", "pending", "shipped", "on hold"))
        .add_table(users)
        .add_table(orders)
        .add_table(audit)
        .add_ref(order_ref)
        .add_table_group(group)
    )


# ---------------------------------------------------------------------------
# Raw document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_schema_dict() -> Dict[str, Any]:
    """A schema document as it would be read from JSON/YAML."""
    return {
        "name": "library",
        "database_type": "PostgreSQL",
        "tables": [
            {
                "name": "authors",
                "columns": [
                    {"name": "id", "type": "bigint", "settings": {"primary_key": True}},
                    {"name": "name", "type": "text"},
                ],
            },
            {
                "schema": "catalog",
                "name": "books",
                "settings": {"headercolor": "#2ECC71"},
                "columns": [
                    {"name": "id", "type": "bigint", "settings": {"primary_key": True}},
                    {"name": "author_id", "type": "bigint"},
                    {"name": "title", "type": "text", "note": "Book's title"},
                ],
                "indexes": [{"columns": [{"name": "title"}], "unique": True}],
            },
        ],
        "enums": [{"name": "genre", "values": ["fiction", "non fiction"]}],
        "refs": [
            {
                "type": ">",
                "left": {"schema": "catalog", "table": "books", "columns": ["author_id"]},
                "right": {"schema": "public", "table": "authors", "columns": ["id"]},
                "on_delete": "restrict",
            }
        ],
    }


@pytest.fixture()
def schema_dict(raw_schema_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_schema_dict)


@pytest.fixture()
def schema_yaml_path(schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "schema.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(schema_dict, fh, default_flow_style=False, sort_keys=False)
    return path


@pytest.fixture()
def schema_json_path(schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(schema_dict), encoding="utf-8")
    return path


@pytest.fixture()
def invalid_schema_yaml_path(schema_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Schema document whose second table has a column without a type."""
    schema_dict["tables"][1]["columns"][1]["type"] = ""
    path = tmp_path / "invalid.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(schema_dict, fh, default_flow_style=False, sort_keys=False)
    return path


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    out = tmp_path / "generated_output"
    out.mkdir(parents=True, exist_ok=True)
    return out
