"""Pydantic models package."""

from docprops.models.properties import (
    CustomPropertiesResponse,
    CustomProperty,
    CustomValueKind,
    ExtractionRun,
    ExtractionState,
    PathExtractionRequest,
    PropertiesResponse,
    kind_for_tag,
)
from docprops.models.schema import (
    PropertySchemaEntry,
    PropertyType,
    SchemaTable,
    SchemaTableListResponse,
)
from docprops.models.tree import ATTRIBUTES_KEY, MISSING, TEXT_KEY, XmlNode

__all__ = [
    # Schema table models
    "PropertySchemaEntry",
    "PropertyType",
    "SchemaTable",
    "SchemaTableListResponse",
    # Extraction models
    "CustomProperty",
    "CustomValueKind",
    "ExtractionRun",
    "ExtractionState",
    "kind_for_tag",
    "PathExtractionRequest",
    "PropertiesResponse",
    "CustomPropertiesResponse",
    # XML tree
    "XmlNode",
    "MISSING",
    "ATTRIBUTES_KEY",
    "TEXT_KEY",
]
