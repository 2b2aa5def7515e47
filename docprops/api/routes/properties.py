"""Property extraction API routes."""

import asyncio
import logging
import math
import time
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from docprops.core.config import Settings, get_settings
from docprops.core.security import ApiKeyDep
from docprops.models.properties import (
    CustomPropertiesResponse,
    ExtractionRun,
    PathExtractionRequest,
    PropertiesResponse,
)
from docprops.services.extractor import PropertyExtractor, get_extractor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/properties", tags=["properties"])


def to_json_safe(value: Any) -> Any:
    """Replace NaN and infinities with None so the mapping serializes as JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: to_json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_json_safe(v) for v in value]
    return value


async def _read_upload(file: UploadFile, settings: Settings) -> bytes:
    content = await file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Upload exceeds {settings.max_upload_bytes} bytes",
        )
    return content


async def _with_timeout(coro: Any, settings: Settings) -> Any:
    try:
        return await asyncio.wait_for(coro, timeout=settings.extraction_timeout_seconds)
    except asyncio.TimeoutError:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=f"Extraction timed out after {settings.extraction_timeout_seconds}s",
        )


@router.post("", response_model=PropertiesResponse)
async def extract_properties(
    file: Annotated[UploadFile, File(description="Office Open XML document")],
    _api_key: ApiKeyDep,
    settings: Annotated[Settings, Depends(get_settings)],
    extractor: Annotated[PropertyExtractor, Depends(get_extractor)],
) -> PropertiesResponse:
    """Extract document properties from an uploaded .docx/.xlsx/.pptx file."""
    start_time = time.time()
    content = await _read_upload(file, settings)

    logger.info(f"Extracting properties from upload '{file.filename}' ({len(content)} bytes)")

    run = ExtractionRun(source=file.filename or "upload")
    properties = await _with_timeout(extractor.from_buffer(content, run), settings)

    return PropertiesResponse(
        properties=to_json_safe(properties),
        source=run.source,
        entries_read=run.entries_read,
        processing_time_ms=int((time.time() - start_time) * 1000),
    )


@router.post("/path", response_model=PropertiesResponse)
async def extract_properties_from_path(
    request: PathExtractionRequest,
    _api_key: ApiKeyDep,
    settings: Annotated[Settings, Depends(get_settings)],
    extractor: Annotated[PropertyExtractor, Depends(get_extractor)],
) -> PropertiesResponse:
    """Extract document properties from a file on the server's filesystem."""
    if not settings.allow_path_extraction:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Path extraction is disabled",
        )

    start_time = time.time()
    logger.info(f"Extracting properties from path '{request.path}'")

    run = ExtractionRun(source=request.path)
    properties = await _with_timeout(extractor.from_file_path(request.path, run), settings)

    return PropertiesResponse(
        properties=to_json_safe(properties),
        source=run.source,
        entries_read=run.entries_read,
        processing_time_ms=int((time.time() - start_time) * 1000),
    )


@router.post("/custom", response_model=CustomPropertiesResponse)
async def list_custom_properties(
    file: Annotated[UploadFile, File(description="Office Open XML document")],
    _api_key: ApiKeyDep,
    settings: Annotated[Settings, Depends(get_settings)],
    extractor: Annotated[PropertyExtractor, Depends(get_extractor)],
) -> CustomPropertiesResponse:
    """List custom properties with their runtime kinds."""
    content = await _read_upload(file, settings)
    properties = await _with_timeout(extractor.custom_properties_from_buffer(content), settings)

    return CustomPropertiesResponse(
        properties=properties,
        total=len(properties),
        source=file.filename or "upload",
    )
