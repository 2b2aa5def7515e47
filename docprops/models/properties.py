"""Extraction-related Pydantic models."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class ExtractionState(str, Enum):
    """Lifecycle of a single extraction request."""

    IDLE = "idle"
    OPENING = "opening"
    ENUMERATING = "enumerating"
    STREAMING_ENTRY = "streaming_entry"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


class CustomValueKind(str, Enum):
    """Runtime kind of a custom property, resolved from its value element."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OTHER = "other"


# docPropsVTypes local names grouped by kind
_KIND_BY_TAG = {
    "lpwstr": CustomValueKind.TEXT,
    "lpstr": CustomValueKind.TEXT,
    "bstr": CustomValueKind.TEXT,
    "i1": CustomValueKind.NUMBER,
    "i2": CustomValueKind.NUMBER,
    "i4": CustomValueKind.NUMBER,
    "i8": CustomValueKind.NUMBER,
    "int": CustomValueKind.NUMBER,
    "ui1": CustomValueKind.NUMBER,
    "ui2": CustomValueKind.NUMBER,
    "ui4": CustomValueKind.NUMBER,
    "ui8": CustomValueKind.NUMBER,
    "uint": CustomValueKind.NUMBER,
    "r4": CustomValueKind.NUMBER,
    "r8": CustomValueKind.NUMBER,
    "decimal": CustomValueKind.NUMBER,
    "bool": CustomValueKind.BOOLEAN,
    "filetime": CustomValueKind.DATE,
    "date": CustomValueKind.DATE,
}


def kind_for_tag(value_type: str) -> CustomValueKind:
    """Resolve a value element tag such as ``vt:lpwstr`` to its kind."""
    local = value_type.rsplit(":", 1)[-1].lower()
    return _KIND_BY_TAG.get(local, CustomValueKind.OTHER)


class CustomProperty(BaseModel):
    """A user-defined property discovered in docProps/custom.xml."""

    name: str = Field(..., description="Declared property name")
    key: str = Field(..., description="Normalized output key")
    kind: CustomValueKind = Field(..., description="Runtime value kind")
    value_type: str = Field(..., description="Value element tag, e.g. vt:lpwstr")
    value: Any = Field(default=None, description="Raw value as decoded")

    model_config = {"frozen": True}


class ExtractionRun(BaseModel):
    """Per-request bookkeeping owned by the orchestrator."""

    run_id: str = Field(default_factory=lambda: str(uuid4()))
    source: str = Field(..., description="'buffer' or the file path")
    state: ExtractionState = Field(default=ExtractionState.IDLE)
    entries_read: List[str] = Field(default_factory=list)
    entries_skipped: int = Field(default=0)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = Field(default=None)
    error: Optional[str] = Field(default=None)


class PathExtractionRequest(BaseModel):
    """Request to extract properties from a server-side file."""

    path: str = Field(..., description="Filesystem path of the Office document")


class PropertiesResponse(BaseModel):
    """Response from a property extraction."""

    properties: Dict[str, Any] = Field(default_factory=dict, description="Result mapping")
    source: str = Field(..., description="Uploaded file name or path")
    entries_read: List[str] = Field(default_factory=list)
    processing_time_ms: int = Field(default=0)


class CustomPropertiesResponse(BaseModel):
    """Typed view of the custom properties of a document."""

    properties: List[CustomProperty] = Field(default_factory=list)
    total: int = Field(default=0)
    source: str = Field(..., description="Uploaded file name")
