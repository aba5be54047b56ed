# File: dbmlgen/builder.py
"""
dbmlgen - Fluent construction helpers
=====================================
Entry points for assembling a schema graph with chained calls::

    project = (
        new_project("ecommerce")
        .with_database_type("PostgreSQL")
        .add_enum(new_enum("order_status", "pending", "shipped"))
        .add_table(
            new_table("users")
            .add_column(new_column("id", "bigint").with_primary_key().with_increment())
        )
        .add_ref(
            new_ref(RelType.MANY_TO_ONE)
            .from_("public", "orders", "user_id")
            .to("public", "users", "id")
        )
    )

Tables and enums start in the ``public`` schema; everything else starts
empty and is filled in by the ``with_*`` / ``add_*`` methods on the models.
"""

from __future__ import annotations

from typing import List

from dbmlgen.models import (
    Column,
    EnumDefinition,
    Index,
    IndexColumn,
    Project,
    Ref,
    RelType,
    Table,
    TableGroup,
)


def new_project(name: str) -> Project:
    return Project(name=name)


def new_table(name: str) -> Table:
    return Table(name=name)


def new_column(name: str, column_type: str) -> Column:
    return Column(name=name, type=column_type)


def new_index(*columns: str) -> Index:
    """Index over plain column names, in the given order."""
    return Index(columns=[IndexColumn(name=col) for col in columns])


def new_expression_index(*expressions: str) -> Index:
    """Index over expressions such as ``date(created_at)``."""
    return Index(columns=[IndexColumn(expression=expr) for expr in expressions])


def new_ref(rel_type: RelType | str) -> Ref:
    return Ref(type=rel_type)


def new_enum(name: str, *values: str) -> EnumDefinition:
    return EnumDefinition(name=name, values=list(values))


def new_table_group(name: str) -> TableGroup:
    return TableGroup(name=name)


__all__: List[str] = [
    "new_project",
    "new_table",
    "new_column",
    "new_index",
    "new_expression_index",
    "new_ref",
    "new_enum",
    "new_table_group",
]
