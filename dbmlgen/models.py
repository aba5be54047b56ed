# File: dbmlgen/models.py
"""
dbmlgen - Schema Models
=======================
Pydantic V2 models describing a relational schema: project, tables,
columns, indexes, enums, relationships and table groups.  These models are
the single object graph shared by the validator and the DBML generator.

Models deliberately accept incomplete data.  Required fields default to
empty values and collections default to empty, because consistency is the
job of ``dbmlgen.validators`` (fail-fast, with a location path), not of
model construction.

Each model also carries chainable ``with_*`` / ``add_*`` methods so a graph
can be assembled fluently::

    users = (
        Table(name="users")
        .with_header_color("#3498DB")
        .add_column(Column(name="id", type="bigint").with_primary_key())
    )
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dbmlgen.models")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_SCHEMA: str = "public"

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RelType(str, Enum):
    """Relationship cardinality, valued by its DBML symbol."""

    ONE_TO_MANY = "<"
    MANY_TO_ONE = ">"
    ONE_TO_ONE = "-"
    MANY_TO_MANY = "<>"


class RefAction(str, Enum):
    """Referential action for ON DELETE / ON UPDATE."""

    CASCADE = "cascade"
    RESTRICT = "restrict"
    SET_NULL = "set null"
    SET_DEFAULT = "set default"
    NO_ACTION = "no action"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


def _enum_value(value: Any) -> Any:
    """Unwrap an Enum member to its raw value; leave anything else alone."""
    if isinstance(value, Enum):
        return value.value
    return value


def table_key(schema_name: str, name: str) -> str:
    """Key under which a table or enum is stored on a ``Project``."""
    return f"{schema_name}.{name}"


# ---------------------------------------------------------------------------
# Column
# ---------------------------------------------------------------------------


class ColumnSettings(BaseModel):
    """Column-level flags and expressions."""

    model_config = _SHARED_CONFIG

    primary_key: bool = Field(default=False, description="Part of the primary key?")
    nullable: bool = Field(default=False, description="Whether the column allows NULL.")
    unique: bool = Field(default=False, description="Has a UNIQUE constraint?")
    increment: bool = Field(default=False, description="Auto-increment column?")
    default: Optional[str] = Field(
        default=None, description="Default expression, rendered verbatim."
    )
    check: Optional[str] = Field(default=None, description="CHECK expression.")


class InlineRef(BaseModel):
    """A relationship declared as an attribute of a column."""

    model_config = _SHARED_CONFIG

    type: str = Field(default="", description="Cardinality symbol (see RelType).")
    schema_name: str = Field(default="", alias="schema", description="Target schema.")
    table: str = Field(default="", description="Target table.")
    column: str = Field(default="", description="Target column.")

    @field_validator("type", mode="before")
    @classmethod
    def _unwrap_type(cls, v: Any) -> Any:
        return _enum_value(v)


class Column(BaseModel):
    """
    A single table column.

    ``type`` is a free-form string (``varchar(255)``, ``order_status``, ...)
    and is never parsed.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(default="", description="Column name.")
    type: str = Field(default="", description="Column type, free-form.")
    settings: Optional[ColumnSettings] = Field(
        default_factory=ColumnSettings, description="Flags and expressions."
    )
    note: Optional[str] = Field(default=None, description="Column note.")
    inline_ref: Optional[InlineRef] = Field(
        default=None, description="Inline relationship."
    )

    def _ensure_settings(self) -> ColumnSettings:
        if self.settings is None:
            self.settings = ColumnSettings()
        return self.settings

    def with_primary_key(self) -> "Column":
        self._ensure_settings().primary_key = True
        return self

    def with_null(self) -> "Column":
        self._ensure_settings().nullable = True
        return self

    def with_unique(self) -> "Column":
        self._ensure_settings().unique = True
        return self

    def with_increment(self) -> "Column":
        self._ensure_settings().increment = True
        return self

    def with_default(self, value: str) -> "Column":
        self._ensure_settings().default = value
        return self

    def with_check(self, constraint: str) -> "Column":
        self._ensure_settings().check = constraint
        return self

    def with_note(self, note: str) -> "Column":
        self.note = note
        return self

    def with_ref(
        self,
        rel_type: RelType | str,
        schema_name: str,
        table: str,
        column: str,
    ) -> "Column":
        """Attach an inline relationship to ``schema_name.table.column``."""
        self.inline_ref = InlineRef(
            type=rel_type,
            schema_name=schema_name,
            table=table,
            column=column,
        )
        return self

    def __repr__(self) -> str:
        return f"<Column {self.name} {self.type}>"


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


class IndexColumn(BaseModel):
    """One index member: a plain column name or an expression, never both."""

    model_config = _SHARED_CONFIG

    name: Optional[str] = Field(default=None, description="Column name.")
    expression: Optional[str] = Field(
        default=None, description="Expression, e.g. 'date(created_at)'."
    )


class Index(BaseModel):
    """Single, composite or expression index."""

    model_config = _SHARED_CONFIG

    columns: List[IndexColumn] = Field(
        default_factory=list, description="Ordered index members."
    )
    type: Optional[str] = Field(default=None, description="Index method (btree, hash, ...).")
    name: Optional[str] = Field(default=None, description="Index name.")
    note: Optional[str] = Field(default=None, description="Index note.")
    unique: bool = Field(default=False, description="UNIQUE index?")
    primary_key: bool = Field(default=False, description="Composite primary key?")

    def with_type(self, index_type: str) -> "Index":
        self.type = index_type
        return self

    def with_name(self, name: str) -> "Index":
        self.name = name
        return self

    def with_unique(self) -> "Index":
        self.unique = True
        return self

    def with_primary_key(self) -> "Index":
        self.primary_key = True
        return self

    def with_note(self, note: str) -> "Index":
        self.note = note
        return self


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class Table(BaseModel):
    """
    A database table.

    ``settings`` holds free-form table settings (``headercolor`` and the
    like) and keeps insertion order, which is also the render order.
    """

    model_config = _SHARED_CONFIG

    schema_name: str = Field(
        default=DEFAULT_SCHEMA, alias="schema", description="Database schema."
    )
    name: str = Field(default="", description="Table name.")
    alias: Optional[str] = Field(default=None, description="Short alias.")
    note: Optional[str] = Field(default=None, description="Table note.")
    settings: Dict[str, str] = Field(
        default_factory=dict, description="Table settings, e.g. headercolor."
    )
    columns: List[Column] = Field(default_factory=list, description="Ordered columns.")
    indexes: List[Index] = Field(default_factory=list, description="Ordered indexes.")

    @property
    def key(self) -> str:
        return table_key(self.schema_name, self.name)

    def with_schema(self, schema_name: str) -> "Table":
        self.schema_name = schema_name
        return self

    def with_alias(self, alias: str) -> "Table":
        self.alias = alias
        return self

    def with_note(self, note: str) -> "Table":
        self.note = note
        return self

    def with_setting(self, key: str, value: str) -> "Table":
        self.settings[key] = value
        return self

    def with_header_color(self, color: str) -> "Table":
        return self.with_setting("headercolor", color)

    def add_column(self, column: Column) -> "Table":
        self.columns.append(column)
        return self

    def add_index(self, index: Index) -> "Table":
        self.indexes.append(index)
        return self

    def __repr__(self) -> str:
        return f"<Table {self.key} ({len(self.columns)} columns)>"


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------


class RefEndpoint(BaseModel):
    """One side of a standalone relationship; several columns make a composite key."""

    model_config = _SHARED_CONFIG

    schema_name: str = Field(default="", alias="schema", description="Schema.")
    table: str = Field(default="", description="Table name.")
    columns: List[str] = Field(default_factory=list, description="Ordered column names.")


class Ref(BaseModel):
    """Standalone relationship between two endpoints."""

    model_config = _SHARED_CONFIG

    type: str = Field(default="", description="Cardinality symbol (see RelType).")
    left: Optional[RefEndpoint] = Field(default=None, description="Left endpoint.")
    right: Optional[RefEndpoint] = Field(default=None, description="Right endpoint.")
    name: Optional[str] = Field(default=None, description="Relationship name.")
    on_delete: Optional[str] = Field(default=None, description="ON DELETE action.")
    on_update: Optional[str] = Field(default=None, description="ON UPDATE action.")
    color: Optional[str] = Field(default=None, description="Display color.")

    @field_validator("type", "on_delete", "on_update", mode="before")
    @classmethod
    def _unwrap_enums(cls, v: Any) -> Any:
        return _enum_value(v)

    def with_name(self, name: str) -> "Ref":
        self.name = name
        return self

    def from_(self, schema_name: str, table: str, *columns: str) -> "Ref":
        """Set the left endpoint."""
        self.left = RefEndpoint(schema_name=schema_name, table=table, columns=list(columns))
        return self

    def to(self, schema_name: str, table: str, *columns: str) -> "Ref":
        """Set the right endpoint."""
        self.right = RefEndpoint(schema_name=schema_name, table=table, columns=list(columns))
        return self

    def with_on_delete(self, action: RefAction | str) -> "Ref":
        self.on_delete = action
        return self

    def with_on_update(self, action: RefAction | str) -> "Ref":
        self.on_update = action
        return self

    def with_color(self, color: str) -> "Ref":
        self.color = color
        return self

    def __repr__(self) -> str:
        left: str = self.left.table if self.left else "?"
        right: str = self.right.table if self.right else "?"
        return f"<Ref {left} {self.type} {right}>"


# ---------------------------------------------------------------------------
# Enum & table groups
# ---------------------------------------------------------------------------


class EnumDefinition(BaseModel):
    """An enumeration type.  Value order is the declaration order."""

    model_config = _SHARED_CONFIG

    schema_name: str = Field(
        default=DEFAULT_SCHEMA, alias="schema", description="Database schema."
    )
    name: str = Field(default="", description="Enum type name.")
    values: List[str] = Field(default_factory=list, description="Ordered values.")
    note: Optional[str] = Field(default=None, description="Enum note.")

    @property
    def key(self) -> str:
        return table_key(self.schema_name, self.name)

    def with_schema(self, schema_name: str) -> "EnumDefinition":
        self.schema_name = schema_name
        return self

    def with_note(self, note: str) -> "EnumDefinition":
        self.note = note
        return self


class TableRef(BaseModel):
    """Reference to a table by schema and name."""

    model_config = _SHARED_CONFIG

    schema_name: str = Field(default="", alias="schema", description="Schema.")
    name: str = Field(default="", description="Table name.")


class TableGroup(BaseModel):
    """Logical grouping of tables."""

    model_config = _SHARED_CONFIG

    name: str = Field(default="", description="Group name.")
    tables: List[TableRef] = Field(default_factory=list, description="Member tables.")

    def add_table(self, schema_name: str, name: str) -> "TableGroup":
        self.tables.append(TableRef(schema_name=schema_name, name=name))
        return self


# ---------------------------------------------------------------------------
# Project - top-level container
# ---------------------------------------------------------------------------


class Project(BaseModel):
    """
    The root of the schema graph.

    Invariant: ``tables`` and ``enums`` are insertion-ordered and keyed by
    ``"<schema>.<name>"``; this order is the order the generator renders.
    A bare list of tables or enums on input is keyed automatically.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(default="", description="Project name.")
    database_type: Optional[str] = Field(
        default=None, description="Database label, e.g. 'PostgreSQL'."
    )
    note: Optional[str] = Field(default=None, description="Project note.")
    tables: Dict[str, Table] = Field(default_factory=dict, description="Tables by key.")
    enums: Dict[str, EnumDefinition] = Field(
        default_factory=dict, description="Enums by key."
    )
    refs: List[Ref] = Field(default_factory=list, description="Standalone relationships.")
    table_groups: List[TableGroup] = Field(
        default_factory=list, description="Table groups."
    )

    @field_validator("tables", "enums", mode="before")
    @classmethod
    def _key_bare_lists(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        keyed: Dict[str, Any] = {}
        for item in v:
            if isinstance(item, (Table, EnumDefinition)):
                keyed[table_key(item.schema_name, item.name)] = item
            elif isinstance(item, BaseModel):
                raise ValueError(f"Expected a Table or EnumDefinition, got {type(item).__name__}.")
            elif isinstance(item, dict):
                schema_name: str = item.get("schema", item.get("schema_name", DEFAULT_SCHEMA))
                keyed[table_key(schema_name, item.get("name", ""))] = item
            else:
                raise ValueError(f"Expected a mapping, got {type(item).__name__}.")
        return keyed

    def with_database_type(self, database_type: str) -> "Project":
        self.database_type = database_type
        return self

    def with_note(self, note: str) -> "Project":
        self.note = note
        return self

    def add_table(self, table: Table) -> "Project":
        self.tables[table.key] = table
        logger.debug("Added table %s to project %s.", table.key, self.name)
        return self

    def add_enum(self, enum: EnumDefinition) -> "Project":
        self.enums[enum.key] = enum
        logger.debug("Added enum %s to project %s.", enum.key, self.name)
        return self

    def add_ref(self, ref: Ref) -> "Project":
        self.refs.append(ref)
        return self

    def add_table_group(self, group: TableGroup) -> "Project":
        self.table_groups.append(group)
        return self

    def check(self) -> None:
        """Validate the whole graph; raises ``ValidationError`` on the first problem."""
        from dbmlgen.validators import validate_project

        validate_project(self)

    def generate(self) -> str:
        """Render the graph as DBML."""
        from dbmlgen.generator import generate

        return generate(self)

    def __repr__(self) -> str:
        return (
            f"<Project {self.name!r}: {len(self.tables)} tables, "
            f"{len(self.enums)} enums, {len(self.refs)} refs>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_SCHEMA",
    "RelType",
    "RefAction",
    "ColumnSettings",
    "InlineRef",
    "Column",
    "IndexColumn",
    "Index",
    "Table",
    "RefEndpoint",
    "Ref",
    "EnumDefinition",
    "TableRef",
    "TableGroup",
    "Project",
    "table_key",
]

logger.debug("dbmlgen.models loaded - %d public symbols.", len(__all__))
