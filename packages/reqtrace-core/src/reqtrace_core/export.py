"""Report exporters.

Pure serializers for a completed run: JSON for the full result set and
CSV for the traceability matrix. Writing the output anywhere is left to
the caller (see ``reqtrace_core.report_store``).

A failed export raises ``ExportError`` and leaves the run untouched.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable
from typing import Any

import structlog
from pydantic_core import PydanticSerializationError

from reqtrace_core.errors import ExportError
from reqtrace_core.models import SuiteRun, TraceabilityMatrix

logger = structlog.get_logger(__name__)

CSV_HEADER = ("Requirement ID", "Description", "Status", "Covered", "Passing", "Test Modules")

EXPORT_FORMATS = ("json", "csv")


def export_json(
    run: SuiteRun,
    matrix: TraceabilityMatrix | None = None,
    *,
    pretty: bool = True,
) -> str:
    """Serialize a run (and its traceability matrix) as JSON.

    Key order is fixed: summary, moduleResults, requirementCoverage, gaps,
    recommendations, traceabilityMatrix, then run metadata.

    Args:
        run: Completed run.
        matrix: Traceability matrix for the run; omitted from the report if None.
        pretty: Indent the output.

    Returns:
        JSON document.

    Raises:
        ExportError: If module details attached to the run are not serializable.
    """
    try:
        data = _run_to_dict(run, matrix)
        if pretty:
            return json.dumps(data, indent=2, ensure_ascii=False)
        return json.dumps(data, ensure_ascii=False)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise ExportError(
            "json",
            "Run results could not be serialized as JSON",
            internal_details=f"{type(e).__name__}: {e}",
        ) from e


def export_csv(matrix: TraceabilityMatrix) -> str:
    """Serialize the traceability matrix as CSV.

    One header row, then one row per catalog requirement in catalog order.
    Every cell is double-quoted and embedded quotes are doubled.

    Args:
        matrix: Traceability matrix.

    Returns:
        CSV document with ``\\n`` line endings.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in matrix.records:
        writer.writerow(
            (
                record.req_id,
                record.description,
                record.status.value,
                "Yes" if record.covered else "No",
                "Yes" if record.passing else "No",
                "; ".join(record.contributing_modules),
            )
        )
    return buffer.getvalue()


def export_results(
    run: SuiteRun,
    matrix: TraceabilityMatrix,
    formats: Iterable[str],
    *,
    include_matrix_in_json: bool = True,
) -> dict[str, str]:
    """Export a run in each requested format.

    Args:
        run: Completed run.
        matrix: Traceability matrix for the run.
        formats: Any of "json", "csv". Duplicates are exported once.
        include_matrix_in_json: Embed the matrix in the JSON report.

    Returns:
        Format -> serialized document, in request order.

    Raises:
        ExportError: On an unsupported format or a serialization failure.
    """
    exports: dict[str, str] = {}
    for fmt in dict.fromkeys(f.lower() for f in formats):
        if fmt == "json":
            exports[fmt] = export_json(run, matrix if include_matrix_in_json else None)
        elif fmt == "csv":
            exports[fmt] = export_csv(matrix)
        else:
            raise ExportError(fmt, f"Unsupported export format '{fmt}'")
        logger.debug("report_exported", format=fmt, size=len(exports[fmt]))
    return exports


def _run_to_dict(run: SuiteRun, matrix: TraceabilityMatrix | None) -> dict[str, Any]:
    dumped = run.model_dump(mode="json", by_alias=True)
    data: dict[str, Any] = {
        "summary": dumped["summary"],
        "moduleResults": dumped["moduleResults"],
        "requirementCoverage": dumped["requirementCoverage"],
        "gaps": dumped["gaps"],
        "recommendations": dumped["recommendations"],
    }
    if matrix is not None:
        data["traceabilityMatrix"] = matrix.model_dump(mode="json", by_alias=True)
    data["startedAt"] = dumped["startedAt"]
    data["finishedAt"] = dumped["finishedAt"]
    data["cancelled"] = dumped["cancelled"]
    data["environment"] = dumped["environment"]
    return data
