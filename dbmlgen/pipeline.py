# File: dbmlgen/pipeline.py
"""
dbmlgen - Generation Pipeline (Orchestrator)
============================================
Connects the phases end to end:

    Schema document -> Project graph -> Validation -> DBML -> Output file

Workflow::

    1. Load a schema document from JSON/YAML (or accept a Project).
    2. Parse it into a ``Project`` (serialize.py).
    3. Validate the graph, fail-fast (validators.py).
    4. Render DBML (generator.py).
    5. Write the result atomically when an output path is given.
    6. Return a ``PipelineReport`` with timings and status.

Error handling strategy:
    - Load/parse errors stop the run and are recorded in the report.
    - A validation error stops the run in strict mode; otherwise it is
      logged and generation continues.
    - Export errors are recorded, never raised.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dbmlgen.generator import DBMLGenerator
from dbmlgen.models import DEFAULT_SCHEMA, Project
from dbmlgen.serialize import load_schema_file, parse_raw_project
from dbmlgen.utils import Timer, count_lines, sha256_hex, write_file
from dbmlgen.validators import ValidationError, check_project

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dbmlgen.pipeline")


# ---------------------------------------------------------------------------
# Pipeline report
# ---------------------------------------------------------------------------


@dataclass
class PipelineStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass
class PipelineReport:
    """
    Report produced by ``DBMLPipeline.run()`` / ``run_from_file()``.

    ``dbml`` holds the rendered document whenever generation ran, even if
    the export step later failed.
    """

    success: bool = False
    project_name: str = ""
    output_path: Optional[str] = None
    dbml: Optional[str] = None

    # Metrics
    total_bytes: int = 0
    total_lines: int = 0
    checksum: Optional[str] = None
    total_elapsed_seconds: float = 0.0

    step_metrics: List[PipelineStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        lines.append("=" * 60)
        lines.append("  dbmlgen - Generation Report")
        lines.append("=" * 60)
        lines.append(f"  Status:      {status}")
        lines.append(f"  Project:     {self.project_name}")
        lines.append(f"  Output:      {self.output_path or '<stdout>'}")
        lines.append(f"  Lines:       {self.total_lines:,}")
        lines.append(f"  Bytes:       {self.total_bytes:,}")
        lines.append(f"  Total time:  {self.total_elapsed_seconds:.3f}s")
        lines.append("-" * 60)

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "+" if step.success else "x"
                lines.append(
                    f"    {icon} {step.step_name:<20s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        for title, errors in (
            ("Input Errors", self.input_errors),
            ("Validation Errors", self.validation_errors),
            ("Generation Errors", self.generation_errors),
            ("Export Errors", self.export_errors),
        ):
            if errors:
                lines.append("-" * 60)
                lines.append(f"  {title} ({len(errors)}):")
                for err in errors:
                    lines.append(f"    x {err}")

        lines.append("=" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class DBMLPipeline:
    """
    Load, validate, generate and export in one call.

    Usage::

        pipeline = DBMLPipeline()
        report = pipeline.run_from_file(Path("schema.yaml"), Path("schema.dbml"))
        print(report.summary())

    The pipeline is reusable - create once, run many times.
    """

    def __init__(
        self,
        *,
        strict_validation: bool = True,
        default_schema: str = DEFAULT_SCHEMA,
    ) -> None:
        """
        Args:
            strict_validation: If True, a validation error aborts the run
                before generation.
            default_schema: Schema name elided from qualified names.
        """
        self._strict_validation: bool = strict_validation
        self._generator: DBMLGenerator = DBMLGenerator(default_schema=default_schema)

        logger.debug(
            "DBMLPipeline initialised: strict=%s, default_schema=%s.",
            strict_validation,
            default_schema,
        )

    # -----------------------------------------------------------------
    # Public: run from file
    # -----------------------------------------------------------------

    def run_from_file(
        self,
        schema_path: Path,
        output_path: Optional[Path] = None,
    ) -> PipelineReport:
        """Full pipeline: load file -> parse -> validate -> generate -> export."""
        report: PipelineReport = PipelineReport()
        started: float = time.perf_counter()

        with Timer("load_schema") as t_load:
            try:
                raw_data: Dict[str, Any] = load_schema_file(schema_path)
            except (FileNotFoundError, ValueError) as exc:
                raw_data = {}
                report.input_errors.append(str(exc))
                logger.error("Failed to load schema: %s", exc)

        report.step_metrics.append(PipelineStepMetric(
            step_name="Load Schema File",
            success=not report.input_errors,
            elapsed_seconds=t_load.elapsed,
            detail=report.input_errors[-1] if report.input_errors else f"from {schema_path.name}",
        ))
        if report.input_errors:
            return self._finalise_report(report, time.perf_counter() - started)

        with Timer("parse_schema") as t_parse:
            try:
                project: Project = parse_raw_project(raw_data)
            except ValueError as exc:
                report.input_errors.append(str(exc))
                logger.error("Failed to parse schema: %s", exc)

        report.step_metrics.append(PipelineStepMetric(
            step_name="Parse Schema",
            success=not report.input_errors,
            elapsed_seconds=t_parse.elapsed,
            detail=(
                report.input_errors[-1]
                if report.input_errors
                else f"{len(project.tables)} tables parsed"
            ),
        ))
        if report.input_errors:
            return self._finalise_report(report, time.perf_counter() - started)

        return self._run_pipeline(project, output_path, report, started)

    # -----------------------------------------------------------------
    # Public: run from an in-memory project
    # -----------------------------------------------------------------

    def run(
        self,
        project: Project,
        output_path: Optional[Path] = None,
    ) -> PipelineReport:
        """Validate, generate and (optionally) export an in-memory project."""
        return self._run_pipeline(project, output_path, PipelineReport(), time.perf_counter())

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        project: Project,
        output_path: Optional[Path],
        report: PipelineReport,
        started: float,
    ) -> PipelineReport:
        report.project_name = project.name

        validation_ok: bool = self._step_validate(project, report)
        if not validation_ok and self._strict_validation:
            return self._finalise_report(report, time.perf_counter() - started)

        dbml: Optional[str] = self._step_generate(project, report)

        if dbml is not None and output_path is not None:
            self._step_export(dbml, output_path, report)

        return self._finalise_report(report, time.perf_counter() - started)

    def _step_validate(self, project: Project, report: PipelineReport) -> bool:
        with Timer("validation") as t:
            error: Optional[ValidationError] = check_project(project)

        if error is not None:
            report.validation_errors.append(str(error))
            logger.error("Validation failed: %s", error)
            if not self._strict_validation:
                logger.warning("Non-strict mode: generating despite validation errors.")
        else:
            logger.info(
                "Validation passed: %d tables, %d refs in %.3fs.",
                len(project.tables),
                len(project.refs),
                t.elapsed,
            )

        report.step_metrics.append(PipelineStepMetric(
            step_name="Validate Schema",
            success=error is None,
            elapsed_seconds=t.elapsed,
            detail=str(error) if error is not None else "all checks passed",
        ))
        return error is None

    def _step_generate(self, project: Project, report: PipelineReport) -> Optional[str]:
        dbml: Optional[str] = None
        with Timer("generation") as t:
            try:
                dbml = self._generator.generate(project)
            except Exception as exc:
                error_msg: str = f"Fatal generation error: {type(exc).__name__}: {exc}"
                report.generation_errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        if dbml is not None:
            report.dbml = dbml
            report.total_lines = count_lines(dbml)
            report.total_bytes = len(dbml.encode("utf-8"))
            report.checksum = sha256_hex(dbml)
            logger.info(
                "Generated %d lines (%d bytes) in %.3fs.",
                report.total_lines,
                report.total_bytes,
                t.elapsed,
            )

        report.step_metrics.append(PipelineStepMetric(
            step_name="Generate DBML",
            success=dbml is not None,
            elapsed_seconds=t.elapsed,
            detail=f"{report.total_lines:,} lines" if dbml is not None else "failed",
        ))
        return dbml

    def _step_export(self, dbml: str, output_path: Path, report: PipelineReport) -> None:
        report.output_path = str(output_path.resolve())
        with Timer("export") as t:
            try:
                written: int = write_file(output_path, dbml, atomic=True)
            except OSError as exc:
                written = 0
                report.export_errors.append(f"Failed to write {output_path}: {exc}")
                logger.error("Export failed: %s", exc)

        if not report.export_errors:
            logger.info("Wrote %d bytes to %s in %.3fs.", written, output_path, t.elapsed)

        report.step_metrics.append(PipelineStepMetric(
            step_name="Export",
            success=not report.export_errors,
            elapsed_seconds=t.elapsed,
            detail=f"{written:,} bytes" if not report.export_errors else "failed",
        ))

    def _finalise_report(self, report: PipelineReport, total_elapsed: float) -> PipelineReport:
        """Set final status and timing on the report."""
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.input_errors
            or report.generation_errors
            or report.export_errors
            or (report.validation_errors and self._strict_validation)
        )
        return report


__all__: List[str] = [
    "DBMLPipeline",
    "PipelineReport",
    "PipelineStepMetric",
]

logger.debug("dbmlgen.pipeline loaded.")
