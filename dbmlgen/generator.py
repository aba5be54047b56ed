# File: dbmlgen/generator.py
"""
dbmlgen - DBML Generator
========================
Renders a ``Project`` graph as DBML text.

The generator is a pure function of the graph: it never validates, never
raises on incomplete input, and produces byte-identical output for an
unmodified graph.  Block order is fixed::

    Project header -> Enums -> Tables -> Refs -> TableGroups

with every block followed by a blank line.

Formatting rules:
    - Names in the default schema (``public``) are written bare; any other
      schema is written as ``schema.name``.
    - Single-quoted literals (notes, checks, index names) escape ``'`` only.
    - Enum values containing a space are double-quoted.
    - Attribute lists keep a fixed order per entity.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from dbmlgen.models import (
    DEFAULT_SCHEMA,
    Column,
    EnumDefinition,
    Index,
    Project,
    Ref,
    RefEndpoint,
    Table,
    TableGroup,
)
from dbmlgen.utils import wrap_in_quotes

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dbmlgen.generator")

INDENT: str = "  "


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def escape_string(value: str) -> str:
    """Backslash-escape single quotes for a single-quoted DBML literal."""
    return value.replace("'", "\\'")


def qualified_name(schema_name: str, name: str, default_schema: str = DEFAULT_SCHEMA) -> str:
    """``name`` in the default schema, ``schema.name`` anywhere else."""
    if schema_name == default_schema:
        return name
    return f"{schema_name}.{name}"


def format_ref_endpoint(
    endpoint: Optional[RefEndpoint],
    default_schema: str = DEFAULT_SCHEMA,
) -> str:
    """
    ``table.column`` for a single column, ``table.(a, b)`` for a composite
    key, and an empty string for a missing endpoint.
    """
    if endpoint is None:
        return ""

    table_name: str = qualified_name(endpoint.schema_name, endpoint.table, default_schema)
    if len(endpoint.columns) == 1:
        return f"{table_name}.{endpoint.columns[0]}"
    return f"{table_name}.({', '.join(endpoint.columns)})"


def _settings_suffix(settings: List[str]) -> str:
    if not settings:
        return ""
    return f" [{', '.join(settings)}]"


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class DBMLGenerator:
    """
    Renders schema entities as DBML.

    One instance may be reused for any number of projects; it holds no
    per-call state.
    """

    def __init__(self, default_schema: str = DEFAULT_SCHEMA) -> None:
        self.default_schema: str = default_schema

    def _qualify(self, schema_name: str, name: str) -> str:
        return qualified_name(schema_name, name, self.default_schema)

    # -----------------------------------------------------------------
    # Project
    # -----------------------------------------------------------------

    def generate(self, project: Project) -> str:
        parts: List[str] = []

        if project.name:
            parts.append(f"Project {project.name} {{\n")
            if project.database_type is not None:
                parts.append(f"{INDENT}database_type: '{project.database_type}'\n")
            if project.note is not None:
                parts.append(f"{INDENT}Note: '{escape_string(project.note)}'\n")
            parts.append("}\n\n")

        for enum in project.enums.values():
            parts.append(self.generate_enum(enum))
            parts.append("\n")

        for table in project.tables.values():
            parts.append(self.generate_table(table))
            parts.append("\n")

        for ref in project.refs:
            parts.append(self.generate_ref(ref))
            parts.append("\n")

        for group in project.table_groups:
            parts.append(self.generate_table_group(group))
            parts.append("\n")

        output: str = "".join(parts)
        logger.debug(
            "Generated %d bytes of DBML for project %r.", len(output), project.name
        )
        return output

    # -----------------------------------------------------------------
    # Table
    # -----------------------------------------------------------------

    def generate_table(self, table: Table) -> str:
        header: str = self._qualify(table.schema_name, table.name)
        if table.alias is not None:
            header += f" as {table.alias}"

        lines: List[str] = []
        settings: List[str] = [f"{key}: {value}" for key, value in table.settings.items()]
        lines.append(f"Table {header}{_settings_suffix(settings)} {{\n")

        for column in table.columns:
            lines.append(f"{INDENT}{self.generate_column(column)}\n")

        if table.indexes:
            lines.append(f"\n{INDENT}indexes {{\n")
            for index in table.indexes:
                lines.append(f"{INDENT}{INDENT}{self.generate_index(index)}\n")
            lines.append(f"{INDENT}}}\n")

        if table.note is not None:
            lines.append(f"\n{INDENT}Note: '{escape_string(table.note)}'\n")

        lines.append("}\n")
        return "".join(lines)

    def generate_column(self, column: Column) -> str:
        settings: List[str] = []

        cs = column.settings
        if cs is not None:
            if cs.primary_key:
                settings.append("pk")
            if cs.unique:
                settings.append("unique")
            if not cs.nullable:
                settings.append("not null")
            if cs.increment:
                settings.append("increment")
            if cs.default is not None:
                settings.append(f"default: {cs.default}")
            if cs.check is not None:
                settings.append(f"check: '{escape_string(cs.check)}'")

        # Inline refs always carry the schema, default or not.
        ref = column.inline_ref
        if ref is not None:
            settings.append(f"ref: {ref.type} {ref.schema_name}.{ref.table}.{ref.column}")

        if column.note is not None:
            settings.append(f"note: '{escape_string(column.note)}'")

        return f"{column.name} {column.type}{_settings_suffix(settings)}"

    def generate_index(self, index: Index) -> str:
        members: List[str] = []
        for col in index.columns:
            if col.name is not None:
                members.append(col.name)
            elif col.expression is not None:
                members.append(f"`{col.expression}`")

        settings: List[str] = []
        if index.primary_key:
            settings.append("pk")
        if index.unique:
            settings.append("unique")
        if index.type is not None:
            settings.append(f"type: {index.type}")
        if index.name is not None:
            settings.append(f"name: '{escape_string(index.name)}'")
        if index.note is not None:
            settings.append(f"note: '{escape_string(index.note)}'")

        return f"({', '.join(members)}){_settings_suffix(settings)}"

    # -----------------------------------------------------------------
    # Relationships, enums, groups
    # -----------------------------------------------------------------

    def generate_ref(self, ref: Ref) -> str:
        header: str = "Ref" if ref.name is None else f"Ref {ref.name}"

        settings: List[str] = []
        if ref.on_delete is not None:
            settings.append(f"delete: {ref.on_delete}")
        if ref.on_update is not None:
            settings.append(f"update: {ref.on_update}")
        if ref.color is not None:
            settings.append(f"color: {ref.color}")

        left: str = format_ref_endpoint(ref.left, self.default_schema)
        right: str = format_ref_endpoint(ref.right, self.default_schema)

        return (
            f"{header}{_settings_suffix(settings)} {{\n"
            f"{INDENT}{left} {ref.type} {right}\n"
            "}\n"
        )

    def generate_enum(self, enum: EnumDefinition) -> str:
        lines: List[str] = [f"Enum {self._qualify(enum.schema_name, enum.name)} {{\n"]

        for value in enum.values:
            rendered: str = wrap_in_quotes(value) if " " in value else value
            lines.append(f"{INDENT}{rendered}\n")

        if enum.note is not None:
            lines.append(f"\n{INDENT}Note: '{escape_string(enum.note)}'\n")

        lines.append("}\n")
        return "".join(lines)

    def generate_table_group(self, group: TableGroup) -> str:
        lines: List[str] = [f"TableGroup {group.name} {{\n"]
        for table_ref in group.tables:
            lines.append(f"{INDENT}{self._qualify(table_ref.schema_name, table_ref.name)}\n")
        lines.append("}\n")
        return "".join(lines)


_DEFAULT_GENERATOR: DBMLGenerator = DBMLGenerator()


def generate(project: Project) -> str:
    """Render *project* as DBML with the default ``public`` schema."""
    return _DEFAULT_GENERATOR.generate(project)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "INDENT",
    "DBMLGenerator",
    "generate",
    "escape_string",
    "qualified_name",
    "format_ref_endpoint",
]
