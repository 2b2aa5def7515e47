"""Custom exceptions and exception handlers."""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class DocPropsError(Exception):
    """Base exception for DocProps."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ParameterError(DocPropsError):
    """Extraction called with the wrong kind of input."""

    def __init__(self, message: str = "Incorrect parameters."):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class ArchiveOpenError(DocPropsError):
    """Archive could not be opened (corrupt, missing, unreadable)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class EntryStreamError(DocPropsError):
    """A recognized archive entry could not be read."""

    def __init__(self, entry_name: str, reason: str):
        self.entry_name = entry_name
        super().__init__(
            f"Failed to read '{entry_name}': {reason}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )


class XmlDecodeError(DocPropsError):
    """A recognized archive entry holds malformed XML."""

    def __init__(self, message: str, entry_name: str | None = None):
        self.entry_name = entry_name
        if entry_name:
            message = f"Malformed XML in '{entry_name}': {message}"
        super().__init__(message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


class SchemaTableError(DocPropsError):
    """Property schema tables are missing or invalid."""

    def __init__(self, message: str):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class SchemaTableNotFoundError(DocPropsError):
    """Schema table not found."""

    def __init__(self, entry: str):
        super().__init__(
            f"Schema table '{entry}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
        )


async def docprops_exception_handler(request: Request, exc: DocPropsError) -> JSONResponse:
    """Handle DocPropsError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "type": type(exc).__name__},
    )
