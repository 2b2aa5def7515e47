"""Schema table API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from docprops.core.security import ApiKeyDep
from docprops.models.schema import SchemaTable, SchemaTableListResponse
from docprops.services.schema_registry import SchemaRegistry, get_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schemas", tags=["schemas"])


@router.get("", response_model=SchemaTableListResponse)
async def list_schema_tables(
    _api_key: ApiKeyDep,
    registry: Annotated[SchemaRegistry, Depends(get_registry)],
) -> SchemaTableListResponse:
    """List the property schema tables."""
    tables = registry.list_tables()

    return SchemaTableListResponse(
        tables=tables,
        total=len(tables),
        loaded_at=registry.loaded_at,
        source_path=str(registry.source_path) if registry.source_path else None,
    )


@router.get("/{entry}", response_model=SchemaTable)
async def get_schema_table(
    entry: str,
    _api_key: ApiKeyDep,
    registry: Annotated[SchemaRegistry, Depends(get_registry)],
) -> SchemaTable:
    """Get the schema table for one entry, e.g. ``core.xml``."""
    return registry.get_table_or_raise(entry)
