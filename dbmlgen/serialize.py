# File: dbmlgen/serialize.py
"""
dbmlgen - JSON / YAML marshaling
================================
Maps documents field-for-field onto the models in ``dbmlgen.models`` and
back.  Absent optional fields are omitted on output, so an explicitly
empty note (``""``) survives a round trip while an unset one stays unset.

Also hosts the schema-file loader used by the pipeline and the CLI.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pydantic
import yaml

from dbmlgen.models import Project

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dbmlgen.serialize")


# ---------------------------------------------------------------------------
# Project <-> dict / JSON / YAML
# ---------------------------------------------------------------------------


def to_dict(project: Project) -> Dict[str, Any]:
    """
    Plain, JSON-compatible dict using document field names.

    ``Column.settings`` is the one optional field kept as an explicit
    ``null``: an omitted ``settings`` loads as default settings, which
    render differently from none at all.
    """
    data: Dict[str, Any] = project.model_dump(mode="json", by_alias=True, exclude_none=True)
    for key, table in project.tables.items():
        for i, column in enumerate(table.columns):
            if column.settings is None:
                data["tables"][key]["columns"][i]["settings"] = None
    return data


def to_json(project: Project, indent: int = 2) -> str:
    return json.dumps(to_dict(project), indent=indent, ensure_ascii=False)


def from_json(data: Union[str, bytes]) -> Project:
    """
    Build a ``Project`` from JSON text.

    Raises:
        ValueError: Malformed JSON or fields that don't fit the model.
    """
    try:
        raw: Any = json.loads(data)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc
    return parse_raw_project(raw)


def to_yaml(project: Project) -> str:
    return yaml.safe_dump(
        to_dict(project),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def from_yaml(data: Union[str, bytes]) -> Project:
    """
    Build a ``Project`` from YAML text.

    Raises:
        ValueError: Malformed YAML or fields that don't fit the model.
    """
    try:
        raw: Any = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML: {exc}") from exc
    return parse_raw_project(raw)


def parse_raw_project(raw: Any) -> Project:
    """
    Parse a raw mapping (from JSON/YAML) into a ``Project``.

    Accepts either the project mapping itself or a mapping whose
    ``project`` key holds it.

    Raises:
        ValueError: If the input is not a mapping or doesn't fit the model.
    """
    if not isinstance(raw, dict):
        raise ValueError(
            f"Expected a mapping at top level, got {type(raw).__name__}."
        )

    project_data: Any = raw
    if set(raw) == {"project"}:
        project_data = raw["project"]
        if not isinstance(project_data, dict):
            raise ValueError(
                f"Expected 'project' to be a mapping, got {type(project_data).__name__}."
            )

    try:
        project: Project = Project.model_validate(project_data)
    except pydantic.ValidationError as exc:
        raise ValueError(f"Schema document does not fit the model: {exc}") from exc

    logger.debug("Parsed project %r: %r", project.name, project)
    return project


# ---------------------------------------------------------------------------
# Schema files
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        text: str = path.read_text(encoding="utf-8")
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        text: str = path.read_text(encoding="utf-8")
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_schema_file(path: Path) -> Dict[str, Any]:
    """
    Load a schema document (JSON or YAML).

    Dispatches based on file extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Schema path is not a file: {path}")

    suffix: str = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    elif suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s' - trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


__all__: List[str] = [
    "to_dict",
    "to_json",
    "from_json",
    "to_yaml",
    "from_yaml",
    "parse_raw_project",
    "load_schema_file",
]
