"""
Result exporter: CSV, Excel-compatible CSV, JSON and PDF.

Every format is built from the same payload:
    {metadata, input, results, recommendations}
Nested results are flattened to dotted keys for the tabular formats.
"""

import csv
import io
import json
import logging
from datetime import datetime

from .calculators.base import BaseCalculator
from .config import settings

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "excel", "json", "pdf")

MEDIA_TYPES = {
    "csv": "text/csv",
    "excel": "text/csv",
    "json": "application/json",
    "pdf": "application/pdf",
}
EXTENSIONS = {"csv": "csv", "excel": "csv", "json": "json", "pdf": "pdf"}


def build_export_payload(calculator: BaseCalculator, inputs: dict, results: dict, fmt: str = "json") -> dict:
    """Wrap inputs and results with export metadata."""
    return {
        "metadata": {
            "calculator_id": calculator.calculator_id,
            "calculator_name": calculator.name,
            "calculator_version": settings.CALCULATOR_VERSION,
            "generated_at": datetime.utcnow().isoformat() + "Z",
            "format": fmt,
            "title": f"{calculator.name} Results",
        },
        "input": inputs,
        "results": results,
        "recommendations": collect_recommendations(results),
    }


def collect_recommendations(results: dict) -> list[str]:
    """Pull every 'recommendations' list out of a results tree as plain strings."""
    found = []

    def walk(node):
        if isinstance(node, dict):
            for key, value in node.items():
                if key == "recommendations" and isinstance(value, list):
                    for item in value:
                        if isinstance(item, dict):
                            found.append(str(item.get("suggestion") or item.get("description") or item))
                        else:
                            found.append(str(item))
                else:
                    walk(value)
        elif isinstance(node, list):
            for item in node:
                walk(item)

    walk(results)
    return found


def flatten(value, prefix: str = "") -> list[tuple[str, object]]:
    """
    Flatten nested dicts/lists to (dotted.key, scalar) pairs, in order.
    Lists of scalars become one "; "-joined value. Lists of dicts are indexed: key[0].field
    """
    rows = []
    if isinstance(value, dict):
        if not value and prefix:
            rows.append((prefix, ""))
        for key, item in value.items():
            rows.extend(flatten(item, f"{prefix}.{key}" if prefix else str(key)))
    elif isinstance(value, list):
        if all(not isinstance(item, (dict, list)) for item in value):
            rows.append((prefix, "; ".join(_cell(item) for item in value)))
        else:
            for idx, item in enumerate(value):
                rows.extend(flatten(item, f"{prefix}[{idx}]"))
    else:
        rows.append((prefix, value))
    return rows


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _rows(payload: dict) -> list[list[str]]:
    rows = [["Section", "Field", "Value"]]
    for section in ("metadata", "input", "results"):
        for key, value in flatten(payload[section]):
            rows.append([section, key, _cell(value)])
    for idx, rec in enumerate(payload["recommendations"]):
        rows.append(["recommendations", str(idx + 1), rec])
    return rows


def export_json(payload: dict) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def export_csv(payload: dict, line_terminator: str = "\n") -> str:
    """RFC 4180 quoting: cells with commas, quotes or newlines are quoted, quotes doubled."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator=line_terminator)
    writer.writerows(_rows(payload))
    return buf.getvalue()


def export_excel_csv(payload: dict) -> str:
    """Same rows as export_csv, with a UTF-8 BOM and CRLF line endings so Excel opens it cleanly."""
    return "\ufeff" + export_csv(payload, line_terminator="\r\n")


def export_filename(calculator_id: str, fmt: str, when: datetime = None) -> str:
    stamp = (when or datetime.utcnow()).strftime("%Y%m%d-%H%M%S")
    return f"{calculator_id}-{stamp}.{EXTENSIONS[fmt]}"


def export_results(fmt: str, calculator: BaseCalculator, inputs: dict, results: dict):
    """
    Build an export in the requested format.

    Returns (content, media_type, filename). content is str for text
    formats and bytes for PDF. Raises ValueError for an unknown format.
    """
    fmt = (fmt or "").lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}. Available: {list(EXPORT_FORMATS)}")

    payload = build_export_payload(calculator, inputs, results, fmt)
    if fmt == "json":
        content = export_json(payload)
    elif fmt == "csv":
        content = export_csv(payload)
    elif fmt == "excel":
        content = export_excel_csv(payload)
    else:
        from .pdf_generator import generate_results_pdf
        content = generate_results_pdf(payload)

    logger.info(f"Exported {calculator.calculator_id} results as {fmt}")
    return content, MEDIA_TYPES[fmt], export_filename(calculator.calculator_id, fmt)
