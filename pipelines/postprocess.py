"""
pipelines/postprocess.py

Tolerant parsing of backend payloads into VitalTrack models.

The report description arrives either as a structured object or as text that
may or may not contain a JSON object (LLM-generated on the server side).
Description and comparison parsing never raise; a malformed report record
does, because a report without an identifier cannot be shown or deleted.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from services.errors import ServerError
from stores.models import ComparisonResult, Report, ReportDescription, SECTION_TITLES

logger = logging.getLogger(__name__)

_SECTION_FIELDS = [field for field, _ in SECTION_TITLES]

# Alternative keys seen in backend payloads
_FIELD_ALIASES = {
    "precautions": "precautionary_measures",
    "precaution": "precautionary_measures",
    "medication": "medications",
    "vital_signs": "vitals",
}


def _extract_first_json_object(text: str) -> Optional[str]:
    """
    Extract the first {...} JSON object from free text using a brace-matching scan.
    Returns the JSON string or None.
    """
    if not text:
        return None

    text = re.sub(r"```(?:json)?", "", text, flags=re.IGNORECASE).replace("```", "")

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    for i in range(start, len(text)):
        c = text[i]
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None


def _section_fields(data: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in data.items():
        field = _FIELD_ALIASES.get(key, key)
        if field in _SECTION_FIELDS and value is not None:
            out[field] = value
    return out


def parse_report_description(raw: Any) -> ReportDescription:
    """
    Parse a report description into ``ReportDescription``.
    - dict: mapped field by field (unknown keys ignored)
    - str: first embedded JSON object if any, else the whole text as summary
    Never raises.
    """
    if raw is None:
        return ReportDescription()
    if isinstance(raw, ReportDescription):
        return raw
    if isinstance(raw, dict):
        return ReportDescription(**_section_fields(raw))

    text = str(raw)
    json_str = _extract_first_json_object(text)
    if json_str is not None:
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict) and _section_fields(data):
            return ReportDescription(**_section_fields(data))

    return ReportDescription(summary=text.strip())


def parse_report(raw: dict[str, Any]) -> Report:
    """
    Build a ``Report`` from one backend record.

    Raises:
        ServerError: If the record has no usable identifier.
    """
    if not isinstance(raw, dict):
        raise ServerError("Malformed report in server response")

    data = dict(raw)
    if "report_id" not in data and "id" in data:
        data["report_id"] = str(data.pop("id"))
    description = data.pop("report_description", None)
    if description is None:
        description = data.get("description")
    data["description"] = parse_report_description(description)
    if not data.get("title"):
        data.pop("title", None)

    try:
        return Report(**data)
    except PydanticValidationError as e:
        raise ServerError(f"Malformed report in server response: {e.error_count()} invalid field(s)") from e


def parse_report_list(data: Any) -> list[Report]:
    """
    Parse the list endpoint payload (``{"reports": [...]}`` or a bare list).
    Malformed records are skipped and logged.
    """
    if isinstance(data, dict):
        items: Iterable[Any] = data.get("reports") or []
    elif isinstance(data, list):
        items = data
    else:
        items = []

    reports = []
    for item in items:
        try:
            reports.append(parse_report(item))
        except ServerError as e:
            logger.warning("Skipping report record: %s", e)
    return reports


def parse_comparison(data: Any, report_ids: tuple[str, str]) -> ComparisonResult:
    """
    Parse a comparison payload. Fields may sit at the top level or under
    ``comparison_result``; top-level values win when both are present.
    Never raises; an unusable payload yields an all-empty result.
    """
    fields: dict[str, Any] = {}
    if isinstance(data, dict):
        nested = data.get("comparison_result")
        if isinstance(nested, dict):
            fields.update(_section_fields(nested))
        elif isinstance(nested, str) and nested.strip():
            fields.setdefault("comparison_summary", nested)
        for key, value in _section_fields(data).items():
            if str(value).strip():
                fields[key] = value
    elif isinstance(data, str) and data.strip():
        fields["comparison_summary"] = data
    else:
        logger.warning("Comparison payload had unexpected type %s", type(data).__name__)

    return ComparisonResult(report_ids=report_ids, **fields)
