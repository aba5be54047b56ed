# File: dbmlgen/validators.py
"""
dbmlgen - Schema Validators
===========================
Structural consistency checks over the schema graph defined in
``dbmlgen.models``.

Validation is **fail-fast**: the traversal stops at the first violation and
raises a single ``ValidationError``.  Each parent wraps a child's error with
a location segment (``table public.users``, ``column 1``, ...) so the final
message pins down a concrete place in the graph::

    table public.users: column 1: Column.Type: type is required

Traversal order: project fields, tables (dict order), each table's fields,
columns, then indexes; enums; refs; table groups.

Usage by downstream modules:
    from dbmlgen.validators import validate_project
    validate_project(project)  # raises ValidationError
"""

from __future__ import annotations

import logging
from typing import FrozenSet, List, Optional, Sequence, Tuple

from dbmlgen.models import (
    Column,
    EnumDefinition,
    Index,
    InlineRef,
    Project,
    Ref,
    RefAction,
    RefEndpoint,
    RelType,
    Table,
    TableGroup,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dbmlgen.validators")

# ---------------------------------------------------------------------------
# Recognised values
# ---------------------------------------------------------------------------

VALID_REL_TYPES: FrozenSet[str] = frozenset(t.value for t in RelType)
VALID_REF_ACTIONS: FrozenSet[str] = frozenset(a.value for a in RefAction)


# ---------------------------------------------------------------------------
# Error type
# ---------------------------------------------------------------------------


class ValidationError(ValueError):
    """
    The single validation failure type: a field, a message and the
    location path leading to it.
    """

    def __init__(
        self,
        field: str,
        message: str,
        path: Sequence[str] = (),
    ) -> None:
        self.field: str = field
        self.message: str = message
        self.path: Tuple[str, ...] = tuple(path)
        super().__init__(str(self))

    @property
    def field_path(self) -> str:
        return ": ".join(self.path + (self.field,))

    def wrap(self, segment: str) -> "ValidationError":
        """Return a copy located one level further out."""
        return ValidationError(self.field, self.message, (segment,) + self.path)

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "message": self.message,
            "path": list(self.path),
        }

    def __str__(self) -> str:
        return f"{self.field_path}: {self.message}"

    def __repr__(self) -> str:
        return f"ValidationError({self.field_path!r}, {self.message!r})"


# ---------------------------------------------------------------------------
# Leaf checks
# ---------------------------------------------------------------------------


def _require(value: Optional[str], field: str, message: str) -> None:
    if not value:
        raise ValidationError(field, message)


def _validate_rel_type(rel_type: str, field: str) -> None:
    if rel_type == "":
        raise ValidationError(field, "relationship type is required")
    if rel_type not in VALID_REL_TYPES:
        raise ValidationError(field, f"invalid relationship type: {rel_type}")


def validate_ref_action(action: str) -> None:
    if action not in VALID_REF_ACTIONS:
        raise ValidationError("RefAction", f"invalid referential action: {action}")


def validate_ref_endpoint(endpoint: RefEndpoint) -> None:
    _require(endpoint.schema_name, "RefEndpoint.Schema", "schema is required")
    _require(endpoint.table, "RefEndpoint.Table", "table is required")
    if not endpoint.columns:
        raise ValidationError("RefEndpoint.Columns", "at least one column is required")


def validate_inline_ref(ref: InlineRef) -> None:
    _require(ref.schema_name, "InlineRef.Schema", "schema is required")
    _require(ref.table, "InlineRef.Table", "table is required")
    _require(ref.column, "InlineRef.Column", "column is required")
    _validate_rel_type(ref.type, "InlineRef.Type")


# ---------------------------------------------------------------------------
# Entity checks
# ---------------------------------------------------------------------------


def validate_column(column: Column) -> None:
    _require(column.name, "Column.Name", "name is required")
    _require(column.type, "Column.Type", "type is required")

    if column.inline_ref is not None:
        try:
            validate_inline_ref(column.inline_ref)
        except ValidationError as exc:
            raise exc.wrap("inline_ref") from exc


def validate_index(index: Index) -> None:
    if not index.columns:
        raise ValidationError("Index.Columns", "at least one column is required")

    for i, col in enumerate(index.columns):
        if col.name is None and col.expression is None:
            raise ValidationError(
                f"Index.Columns[{i}]", "either name or expression is required"
            )
        if col.name is not None and col.expression is not None:
            raise ValidationError(
                f"Index.Columns[{i}]", "cannot have both name and expression"
            )


def validate_table(table: Table) -> None:
    _require(table.name, "Table.Name", "name is required")
    _require(table.schema_name, "Table.Schema", "schema is required")
    if not table.columns:
        raise ValidationError("Table.Columns", "at least one column is required")

    for i, column in enumerate(table.columns):
        try:
            validate_column(column)
        except ValidationError as exc:
            raise exc.wrap(f"column {i}") from exc

    for i, index in enumerate(table.indexes):
        try:
            validate_index(index)
        except ValidationError as exc:
            raise exc.wrap(f"index {i}") from exc


def validate_ref(ref: Ref) -> None:
    """
    Check a standalone relationship.

    Both endpoints must be present and complete, the cardinality and any
    referential actions must be recognised, and composite keys must pair
    up column for column.
    """
    if ref.left is None:
        raise ValidationError("Ref.Left", "left endpoint is required")
    if ref.right is None:
        raise ValidationError("Ref.Right", "right endpoint is required")

    _validate_rel_type(ref.type, "Ref.Type")

    try:
        validate_ref_endpoint(ref.left)
    except ValidationError as exc:
        raise exc.wrap("left") from exc
    try:
        validate_ref_endpoint(ref.right)
    except ValidationError as exc:
        raise exc.wrap("right") from exc

    left_count: int = len(ref.left.columns)
    right_count: int = len(ref.right.columns)
    if left_count != right_count:
        raise ValidationError(
            "Ref.Columns",
            f"left and right column counts must match ({left_count} != {right_count})",
        )

    if ref.on_delete is not None:
        try:
            validate_ref_action(ref.on_delete)
        except ValidationError as exc:
            raise exc.wrap("on_delete") from exc
    if ref.on_update is not None:
        try:
            validate_ref_action(ref.on_update)
        except ValidationError as exc:
            raise exc.wrap("on_update") from exc


def validate_enum(enum: EnumDefinition) -> None:
    _require(enum.name, "Enum.Name", "name is required")
    _require(enum.schema_name, "Enum.Schema", "schema is required")
    if not enum.values:
        raise ValidationError("Enum.Values", "at least one value is required")


def validate_table_group(group: TableGroup) -> None:
    _require(group.name, "TableGroup.Name", "name is required")
    if not group.tables:
        raise ValidationError("TableGroup.Tables", "at least one table is required")

    for i, table_ref in enumerate(group.tables):
        _require(table_ref.schema_name, f"TableGroup.Tables[{i}].Schema", "schema is required")
        _require(table_ref.name, f"TableGroup.Tables[{i}].Name", "name is required")


# ---------------------------------------------------------------------------
# Full graph
# ---------------------------------------------------------------------------


def validate_project(project: Project) -> None:
    """
    Validate the whole graph in traversal order.

    Raises:
        ValidationError: The first violation found, wrapped with its location.
    """
    _require(project.name, "Project.Name", "name is required")

    for key, table in project.tables.items():
        try:
            validate_table(table)
        except ValidationError as exc:
            logger.debug("Table %s failed validation: %s", key, exc)
            raise exc.wrap(f"table {key}") from exc

    for key, enum in project.enums.items():
        try:
            validate_enum(enum)
        except ValidationError as exc:
            logger.debug("Enum %s failed validation: %s", key, exc)
            raise exc.wrap(f"enum {key}") from exc

    for i, ref in enumerate(project.refs):
        try:
            validate_ref(ref)
        except ValidationError as exc:
            logger.debug("Ref %d failed validation: %s", i, exc)
            raise exc.wrap(f"ref {i}") from exc

    for i, group in enumerate(project.table_groups):
        try:
            validate_table_group(group)
        except ValidationError as exc:
            logger.debug("Table group %d failed validation: %s", i, exc)
            raise exc.wrap(f"table_group {i}") from exc

    logger.debug(
        "Project %s valid: %d tables, %d enums, %d refs, %d table groups.",
        project.name,
        len(project.tables),
        len(project.enums),
        len(project.refs),
        len(project.table_groups),
    )


validate = validate_project


def check_project(project: Project) -> Optional[ValidationError]:
    """Like ``validate_project`` but returns the error instead of raising it."""
    try:
        validate_project(project)
    except ValidationError as exc:
        return exc
    return None


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "VALID_REL_TYPES",
    "VALID_REF_ACTIONS",
    "ValidationError",
    "validate_ref_action",
    "validate_ref_endpoint",
    "validate_inline_ref",
    "validate_column",
    "validate_index",
    "validate_table",
    "validate_ref",
    "validate_enum",
    "validate_table_group",
    "validate_project",
    "validate",
    "check_project",
]
