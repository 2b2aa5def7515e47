"""Admin API routes for system management."""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from docprops.core.config import Settings, get_settings
from docprops.core.security import ApiKeyDep
from docprops.services.schema_registry import SchemaRegistry, get_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    tables_loaded: bool
    tables_count: int


@router.get("/health", response_model=HealthResponse)
async def health_check(
    registry: Annotated[SchemaRegistry, Depends(get_registry)],
) -> HealthResponse:
    """Check service health and schema table status."""
    return HealthResponse(
        status="healthy",
        tables_loaded=registry.tables_count > 0,
        tables_count=registry.tables_count,
    )


@router.get("/config")
async def get_config(
    _api_key: ApiKeyDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> Dict[str, Any]:
    """Get current configuration (non-sensitive values only)."""
    return {
        "app_name": settings.app_name,
        "debug": settings.debug,
        "log_level": settings.log_level,
        "require_api_key": settings.require_api_key,
        "schema_path": settings.schema_path or "(bundled)",
        "max_upload_bytes": settings.max_upload_bytes,
        "extraction_timeout_seconds": settings.extraction_timeout_seconds,
        "allow_path_extraction": settings.allow_path_extraction,
    }
