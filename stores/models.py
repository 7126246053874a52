"""
stores/models.py

Pydantic v2 data models for VitalTrack.

These models describe the data flowing between the backend wrappers
(services/), the in-memory stores and the Streamlit pages. Nothing here is
persisted locally; the backend owns every record.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Document types accepted by the file picker
# ---------------------------------------------------------------------------

PDF_MIME = "application/pdf"
DOC_MIME = "application/msword"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ALLOWED_DOCUMENT_TYPES: dict[str, str] = {
    PDF_MIME: "pdf",
    DOC_MIME: "doc",
    DOCX_MIME: "docx",
}

# (field, heading) in display order
SECTION_TITLES: list[tuple[str, str]] = [
    ("summary", "Summary"),
    ("symptoms", "Symptoms"),
    ("precautionary_measures", "Precautionary Measures"),
    ("medications", "Medications"),
    ("vitals", "Vitals"),
    ("comparison_summary", "Comparison Summary"),
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class SectionedText(BaseModel):
    """The six free-text sections the backend extracts from a report."""

    summary: str = ""
    symptoms: str = ""
    precautionary_measures: str = ""
    medications: str = ""
    vitals: str = ""
    comparison_summary: str = ""

    @field_validator(
        "summary",
        "symptoms",
        "precautionary_measures",
        "medications",
        "vitals",
        "comparison_summary",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, (list, tuple)):
            return "\n".join(str(i) for i in v if str(i).strip())
        return str(v)

    def sections(self) -> list[tuple[str, str]]:
        """(heading, text) pairs for every non-blank section, in display order."""
        out = []
        for field, heading in SECTION_TITLES:
            text = getattr(self, field)
            if text.strip():
                out.append((heading, text.strip()))
        return out


class ReportDescription(SectionedText):
    """Structured description of one ingested report."""


class Report(BaseModel):
    """An ingested medical document as returned by the backend."""

    report_id: str = Field(min_length=1)
    title: str = "Untitled report"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    report_url: Optional[str] = None
    description: ReportDescription = Field(default_factory=ReportDescription)

    class Config:
        frozen = True


class ComparisonResult(SectionedText):
    """Server-computed comparison of exactly two reports."""

    report_ids: tuple[str, str]

    class Config:
        frozen = True


# ---------------------------------------------------------------------------
# Locally staged inputs
# ---------------------------------------------------------------------------


class CapturedImage(BaseModel):
    """A camera photo staged on disk, pending a batch upload."""

    uri: str
    captured_at: datetime = Field(default_factory=_utcnow)

    class Config:
        frozen = True


class PickedDocument(BaseModel):
    """A user-chosen PDF/DOC/DOCX file."""

    uri: str
    mime_type: str
    name: str

    class Config:
        frozen = True

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME

    @property
    def is_supported(self) -> bool:
        return self.mime_type in ALLOWED_DOCUMENT_TYPES


# ---------------------------------------------------------------------------
# Trackers
# ---------------------------------------------------------------------------


class MedicalCondition(BaseModel):
    id: str
    name: str
    description: str = ""
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TrackingFactor(BaseModel):
    """One measurable quantity of a condition, e.g. systolic pressure."""

    id: str
    name: str
    description: str = ""
    unit: str = ""
    normal_range: str = ""
    is_required: bool = False
    medical_condition_id: Optional[str] = None

    @field_validator("unit", "normal_range", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class ConditionCatalogEntry(BaseModel):
    medical_condition: MedicalCondition
    tracking_factors: list[TrackingFactor] = Field(default_factory=list)


class TrackingValue(BaseModel):
    tracking_factor_id: str
    value: float
    name: str = ""
    unit: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CombinedTracking(BaseModel):
    """One submission grouping several factor values recorded together."""

    combined_tracking_id: str
    values: list[TrackingValue] = Field(default_factory=list)

    @property
    def recorded_at(self) -> Optional[datetime]:
        return self.values[0].created_at if self.values else None


class UserConditionTrack(BaseModel):
    medical_condition_id: str
    medical_condition_name: str
    medical_condition_description: str = ""
    condition_values: list[CombinedTracking] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# User profile
# ---------------------------------------------------------------------------


class UserInfo(BaseModel):
    id: Optional[str] = None
    name: str = ""
    age: Optional[int] = None
    gender: str = ""
    height: Optional[float] = Field(default=None, description="Centimetres.")
    weight: Optional[float] = Field(default=None, description="Kilograms.")


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class ApiLogEntry(BaseModel):
    """One row of the API client's request journal."""

    timestamp: datetime
    method: str
    url: str
    request_body: Any = None
    response_status: Optional[int] = None
    error: Optional[str] = None
