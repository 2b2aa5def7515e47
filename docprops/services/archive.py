"""Archive entry source - pull-based, one-entry-at-a-time access to ZIP members."""

import asyncio
import io
import logging
import os
import zipfile
import zlib
from typing import Iterator, Optional, Union

from docprops.core.exceptions import ArchiveOpenError, EntryStreamError

logger = logging.getLogger(__name__)

ArchiveSource = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]"]


class ArchiveHandle:
    """Open ZIP archive with sequential entry enumeration.

    Entries are handed out one at a time on request; nothing is prefetched.
    The underlying file is released when enumeration is exhausted, when
    ``close()`` is called, or when the handle leaves an ``async with`` block.
    """

    def __init__(self, zip_file: zipfile.ZipFile, source: str):
        self._zip_file = zip_file
        self._members: Iterator[zipfile.ZipInfo] = iter(zip_file.infolist())
        self._closed = False
        self.source = source

    @property
    def closed(self) -> bool:
        """Whether the archive has been released."""
        return self._closed

    async def next_entry(self) -> Optional[zipfile.ZipInfo]:
        """Advance to the next member.

        Returns:
            The member's ZipInfo, or None once enumeration is exhausted.
        """
        if self._closed:
            return None

        info = next(self._members, None)
        if info is None:
            logger.debug(f"Enumeration of {self.source} exhausted")
            self.close()
        return info

    async def read_entry(self, info: zipfile.ZipInfo) -> bytes:
        """Read one member's decompressed content in full.

        Raises:
            EntryStreamError: The member cannot be opened or decompressed.
        """
        if self._closed:
            raise EntryStreamError(info.filename, "archive is closed")
        return await asyncio.to_thread(self._read_member, info)

    def _read_member(self, info: zipfile.ZipInfo) -> bytes:
        try:
            with self._zip_file.open(info) as stream:
                return stream.read()
        except (
            zipfile.BadZipFile,
            zlib.error,
            EOFError,
            OSError,
            RuntimeError,
            NotImplementedError,
        ) as e:
            # EOFError: truncated member; RuntimeError: encrypted member;
            # NotImplementedError: unknown compression
            raise EntryStreamError(info.filename, str(e)) from e

    def close(self) -> None:
        """Release the archive."""
        if not self._closed:
            self._zip_file.close()
            self._closed = True

    async def __aenter__(self) -> "ArchiveHandle":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _open_zip(source: ArchiveSource) -> zipfile.ZipFile:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return zipfile.ZipFile(io.BytesIO(bytes(source)), "r")
    return zipfile.ZipFile(source, "r")


async def open_archive(source: ArchiveSource) -> ArchiveHandle:
    """Open an archive from an in-memory buffer or a filesystem path.

    Args:
        source: Archive bytes, or a path to an archive file.

    Returns:
        Handle positioned before the first entry.

    Raises:
        ArchiveOpenError: Corrupt archive, missing file or permission problem.
    """
    label = "buffer" if isinstance(source, (bytes, bytearray, memoryview)) else os.fspath(source)

    try:
        zip_file = await asyncio.to_thread(_open_zip, source)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError, EOFError) as e:
        raise ArchiveOpenError(str(e)) from e

    logger.debug(f"Opened archive {label} ({len(zip_file.infolist())} members)")
    return ArchiveHandle(zip_file, label)
