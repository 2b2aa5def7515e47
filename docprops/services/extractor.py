"""Property Extractor - orchestrates archive scanning, decoding and mapping."""

import asyncio
import logging
import os
import zipfile
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from docprops.core.exceptions import DocPropsError, ParameterError
from docprops.models.properties import CustomProperty, ExtractionRun, ExtractionState
from docprops.services.archive import ArchiveHandle, ArchiveSource, open_archive
from docprops.services.custom_mapper import map_custom_properties, read_custom_properties
from docprops.services.schema_mapper import map_schema_properties
from docprops.services.schema_registry import (
    APP_ENTRY,
    CORE_ENTRY,
    SchemaRegistry,
    get_registry,
)
from docprops.services.xml_decoder import decode_xml

logger = logging.getLogger(__name__)

CUSTOM_ENTRY = "docProps/custom.xml"
RECOGNIZED_ENTRIES = frozenset({APP_ENTRY, CORE_ENTRY, CUSTOM_ENTRY})

BUFFER_TYPES = (bytes, bytearray, memoryview)

ExtractionCallback = Callable[[Optional[Exception], Optional[Dict[str, Any]]], Any]


def sort_by_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` with keys in lexicographic order at every level."""
    return {
        key: sort_by_keys(value) if isinstance(value, dict) else value
        for key, value in sorted(data.items())
    }


def _is_path(value: Any) -> bool:
    return isinstance(value, (str, os.PathLike)) and not isinstance(value, BUFFER_TYPES)


class PropertyExtractor:
    """Extracts document properties from Office Open XML packages.

    One archive entry is read, decoded and mapped at a time; the next entry
    is requested only after the current one is merged.
    """

    def __init__(self, registry: Optional[SchemaRegistry] = None):
        self.registry = registry or get_registry()

    async def from_buffer(
        self,
        buffer: Any,
        run: Optional[ExtractionRun] = None,
    ) -> Dict[str, Any]:
        """Extract properties from an in-memory archive.

        Args:
            buffer: Archive bytes.
            run: Optional bookkeeping object to record the request's progress.

        Returns:
            Key-sorted result mapping.

        Raises:
            ParameterError: ``buffer`` is not a bytes-like object.
            ArchiveOpenError, EntryStreamError, XmlDecodeError: Extraction failed.
        """
        if not isinstance(buffer, BUFFER_TYPES):
            raise ParameterError()
        return await self._extract(buffer, run or ExtractionRun(source="buffer"))

    async def from_file_path(
        self,
        path: Any,
        run: Optional[ExtractionRun] = None,
    ) -> Dict[str, Any]:
        """Extract properties from an archive on disk.

        Args:
            path: Filesystem path as ``str`` or ``os.PathLike``.
            run: Optional bookkeeping object to record the request's progress.

        Returns:
            Key-sorted result mapping.

        Raises:
            ParameterError: ``path`` is not a textual path.
            ArchiveOpenError, EntryStreamError, XmlDecodeError: Extraction failed.
        """
        if not _is_path(path):
            raise ParameterError()
        return await self._extract(path, run or ExtractionRun(source=os.fspath(path)))

    async def custom_properties_from_buffer(self, buffer: Any) -> List[CustomProperty]:
        """Typed view of the custom properties in an in-memory archive."""
        if not isinstance(buffer, BUFFER_TYPES):
            raise ParameterError()

        self.registry.ensure_loaded()
        properties: List[CustomProperty] = []

        async with await open_archive(buffer) as handle:
            while True:
                info = await handle.next_entry()
                if info is None:
                    break
                if info.filename != CUSTOM_ENTRY:
                    continue
                data = await handle.read_entry(info)
                tree = await asyncio.to_thread(decode_xml, data, info.filename)
                properties = read_custom_properties(tree)

        return properties

    def _transition(self, run: ExtractionRun, state: ExtractionState) -> None:
        logger.debug(f"Extraction {run.run_id[:8]}: {run.state.value} -> {state.value}")
        run.state = state

    def _fail(self, run: ExtractionRun, error: Exception) -> None:
        run.error = str(error)
        run.completed_at = datetime.utcnow()
        self._transition(run, ExtractionState.FAILED)
        logger.warning(f"Extraction from {run.source} failed: {error}")

    async def _extract(self, source: ArchiveSource, run: ExtractionRun) -> Dict[str, Any]:
        self.registry.ensure_loaded()

        self._transition(run, ExtractionState.OPENING)
        try:
            handle = await open_archive(source)
        except DocPropsError as e:
            self._fail(run, e)
            raise
        except Exception as e:
            logger.exception(f"Unexpected failure opening {run.source}: {e}")
            self._fail(run, e)
            raise

        self._transition(run, ExtractionState.ENUMERATING)
        accumulator: Dict[str, Any] = {}

        async with handle:
            while True:
                info = await handle.next_entry()
                if info is None:
                    break
                if info.filename not in RECOGNIZED_ENTRIES:
                    run.entries_skipped += 1
                    continue

                self._transition(run, ExtractionState.STREAMING_ENTRY)
                try:
                    partial = await self._process_entry(handle, info)
                except DocPropsError as e:
                    self._fail(run, e)
                    raise
                except Exception as e:
                    logger.exception(f"Unexpected failure reading {info.filename}: {e}")
                    self._fail(run, e)
                    raise

                accumulator.update(partial)
                run.entries_read.append(info.filename)
                self._transition(run, ExtractionState.ENUMERATING)

        self._transition(run, ExtractionState.FINALIZING)
        result = sort_by_keys(accumulator)
        run.completed_at = datetime.utcnow()
        self._transition(run, ExtractionState.DONE)

        logger.info(
            f"Extracted {len(result)} properties from {run.source} "
            f"(read: {run.entries_read}, skipped {run.entries_skipped} entries)"
        )
        return result

    async def _process_entry(
        self,
        handle: ArchiveHandle,
        info: zipfile.ZipInfo,
    ) -> Dict[str, Any]:
        """Read, decode and map one recognized entry."""
        data = await handle.read_entry(info)
        tree = await asyncio.to_thread(decode_xml, data, info.filename)

        if info.filename == CUSTOM_ENTRY:
            return map_custom_properties(tree)

        table = self.registry.get_table_or_raise(info.filename)
        return map_schema_properties(tree, table.properties)


# Convenience function
def get_extractor() -> PropertyExtractor:
    """Get extractor instance."""
    return PropertyExtractor()


async def _run_with_callback(
    extract: Callable[[Any], Awaitable[Dict[str, Any]]],
    source: Any,
    callback: Any,
) -> None:
    if not callable(callback):
        logger.error("Incorrect parameters.")
        return

    error: Optional[Exception] = None
    result: Optional[Dict[str, Any]] = None
    try:
        result = await extract(source)
    except DocPropsError as e:
        error = e
    except Exception as e:
        logger.exception(f"Unexpected extraction failure: {e}")
        error = e

    callback(error, result)


async def extract_from_buffer(buffer: Any, callback: ExtractionCallback) -> None:
    """Extract from an in-memory archive and report through ``callback(error, result)``.

    The callback is invoked exactly once. Without a callable callback the
    request is rejected through the error log and the archive is never opened.
    """
    await _run_with_callback(get_extractor().from_buffer, buffer, callback)


async def extract_from_path(path: Any, callback: ExtractionCallback) -> None:
    """Extract from an archive on disk and report through ``callback(error, result)``."""
    await _run_with_callback(get_extractor().from_file_path, path, callback)
