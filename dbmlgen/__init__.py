# File: dbmlgen/__init__.py
"""
dbmlgen - Database schema to DBML
=================================

Build an in-memory description of a relational schema, check it for
structural consistency and render it as DBML.

Architecture overview::

    ┌──────────────┐     ┌───────────────┐     ┌──────────────┐
    │  CLI / Entry │────▶│  DBMLPipeline │────▶│ DBMLGenerator│
    │   (cli.py)   │     │ (pipeline.py) │     │(generator.py)│
    └──────────────┘     └───────┬───────┘     └──────────────┘
                                 │
                    ┌────────────┼────────────┐
                    ▼            ▼            ▼
             ┌──────────┐ ┌───────────┐ ┌───────────┐
             │validators│ │  models   │ │ serialize │
             │  (.py)   │ │  (.py)    │ │  (.py)    │
             └──────────┘ └───────────┘ └───────────┘

Usage::

    from dbmlgen import new_project, new_table, new_column

    project = new_project("shop").add_table(
        new_table("users").add_column(new_column("id", "bigint").with_primary_key())
    )
    project.check()
    print(project.generate())

    # From the command line
    python -m dbmlgen --schema schema.yaml --output schema.dbml
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from dbmlgen.models import (
    DEFAULT_SCHEMA,
    Column,
    ColumnSettings,
    EnumDefinition,
    Index,
    IndexColumn,
    InlineRef,
    Project,
    Ref,
    RefAction,
    RefEndpoint,
    RelType,
    Table,
    TableGroup,
    TableRef,
)
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
from dbmlgen.validators import ValidationError, check_project, validate, validate_project
from dbmlgen.generator import DBMLGenerator, generate
from dbmlgen.serialize import from_json, from_yaml, to_json, to_yaml
from dbmlgen.pipeline import DBMLPipeline, PipelineReport

__all__: list[str] = [
    "__version__",
    "__license__",
    # Models
    "DEFAULT_SCHEMA",
    "Column",
    "ColumnSettings",
    "EnumDefinition",
    "Index",
    "IndexColumn",
    "InlineRef",
    "Project",
    "Ref",
    "RefAction",
    "RefEndpoint",
    "RelType",
    "Table",
    "TableGroup",
    "TableRef",
    # Builder
    "new_column",
    "new_enum",
    "new_expression_index",
    "new_index",
    "new_project",
    "new_ref",
    "new_table",
    "new_table_group",
    # Validation
    "ValidationError",
    "check_project",
    "validate",
    "validate_project",
    # Generation
    "DBMLGenerator",
    "generate",
    # Serialization
    "from_json",
    "from_yaml",
    "to_json",
    "to_yaml",
    # Pipeline
    "DBMLPipeline",
    "PipelineReport",
]
