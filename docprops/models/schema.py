"""Property schema table models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PropertyType(str, Enum):
    """Value type a fixed-schema property is coerced to."""

    STRING = "string"
    NUMBER = "number"


class PropertySchemaEntry(BaseModel):
    """One fixed property: where it lives in the XML tree and where it goes."""

    name: str = Field(..., description="Output key, dotted for nested placement")
    path: str = Field(..., description="Source path into the decoded XML tree")
    type: PropertyType = Field(default=PropertyType.STRING, description="Value type")

    model_config = {"frozen": True}


class SchemaTable(BaseModel):
    """Property schema table for one recognized archive entry."""

    entry: str = Field(..., description="Archive member path, e.g. docProps/core.xml")
    description: Optional[str] = Field(default=None, description="Table description")
    properties: List[PropertySchemaEntry] = Field(
        default_factory=list, description="Ordered property schema entries"
    )

    model_config = {"frozen": True}

    @property
    def file_name(self) -> str:
        """Entry file name without the docProps/ folder."""
        return self.entry.rsplit("/", 1)[-1]


class SchemaTableListResponse(BaseModel):
    """Response for listing schema tables."""

    tables: List[SchemaTable] = Field(default_factory=list)
    total: int = Field(default=0)
    loaded_at: Optional[datetime] = Field(default=None)
    source_path: Optional[str] = Field(default=None)
