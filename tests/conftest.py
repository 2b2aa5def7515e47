"""Pytest configuration and fixtures."""

import io
import os
import zipfile
from typing import Callable, Dict, Generator, List, Optional, Sequence, Tuple, Union

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["REQUIRE_API_KEY"] = "false"
os.environ["SCHEMA_PATH"] = ""
os.environ["ALLOW_PATH_EXTRACTION"] = "false"

CORE_NAMESPACES = (
    'xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:dcterms="http://purl.org/dc/terms/" '
    'xmlns:dcmitype="http://purl.org/dc/dcmitype/" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
)
APP_NAMESPACES = (
    'xmlns="http://schemas.openxmlformats.org/officeDocument/2006/extended-properties" '
    'xmlns:vt="http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes"'
)
CUSTOM_NAMESPACES = (
    'xmlns="http://schemas.openxmlformats.org/officeDocument/2006/custom-properties" '
    'xmlns:vt="http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes"'
)
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
FMTID = "{D5CDD505-2E9C-101B-9397-08002B2CF9AE}"

PackageEntry = Tuple[str, Union[str, bytes]]


@pytest.fixture(autouse=True)
def reset_state() -> Generator[None, None, None]:
    """Give every test a fresh schema registry and settings cache."""
    from docprops.core.config import get_settings
    from docprops.services.schema_registry import SchemaRegistry

    SchemaRegistry.reset()
    get_settings.cache_clear()
    yield
    SchemaRegistry.reset()
    get_settings.cache_clear()


@pytest.fixture
def core_xml() -> Callable[..., str]:
    """Build a docProps/core.xml document from ``{"dc:title": "..."}`` style elements."""

    def build(elements: Optional[Dict[str, str]] = None) -> str:
        body = ""
        for tag, text in (elements or {}).items():
            if tag.startswith("dcterms:"):
                body += f'<{tag} xsi:type="dcterms:W3CDTF">{text}</{tag}>'
            else:
                body += f"<{tag}>{text}</{tag}>"
        return f"{XML_DECLARATION}<cp:coreProperties {CORE_NAMESPACES}>{body}</cp:coreProperties>"

    return build


@pytest.fixture
def app_xml() -> Callable[..., str]:
    """Build a docProps/app.xml document from ``{"Pages": "42"}`` style elements."""

    def build(elements: Optional[Dict[str, str]] = None) -> str:
        body = "".join(f"<{tag}>{text}</{tag}>" for tag, text in (elements or {}).items())
        return f"{XML_DECLARATION}<Properties {APP_NAMESPACES}>{body}</Properties>"

    return build


@pytest.fixture
def custom_xml() -> Callable[..., str]:
    """Build a docProps/custom.xml document from ``(name, vt tag, value)`` triples."""

    def build(properties: Sequence[Tuple[str, str, str]] = ()) -> str:
        body = ""
        for pid, (name, tag, value) in enumerate(properties, start=2):
            body += (
                f'<property fmtid="{FMTID}" pid="{pid}" name="{name}">'
                f"<vt:{tag}>{value}</vt:{tag}></property>"
            )
        return f"{XML_DECLARATION}<Properties {CUSTOM_NAMESPACES}>{body}</Properties>"

    return build


@pytest.fixture
def make_package() -> Callable[[List[PackageEntry]], bytes]:
    """Zip ``(member name, content)`` pairs, in the given order, into package bytes."""

    def build(entries: List[PackageEntry]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, content in entries:
                zf.writestr(name, content)
        return buffer.getvalue()

    return build


@pytest.fixture
def sample_entries(core_xml, app_xml, custom_xml) -> List[PackageEntry]:
    """Members of a typical word processing package."""
    return [
        ("[Content_Types].xml", '<?xml version="1.0"?><Types/>'),
        ("_rels/.rels", '<?xml version="1.0"?><Relationships/>'),
        ("word/document.xml", '<?xml version="1.0"?><document/>'),
        (
            "docProps/core.xml",
            core_xml(
                {
                    "dc:title": "Quarterly Report",
                    "dc:subject": "",
                    "dc:creator": "Jane Doe",
                    "cp:revision": "3",
                    "dcterms:created": "2024-01-15T10:00:00Z",
                }
            ),
        ),
        (
            "docProps/app.xml",
            app_xml(
                {
                    "Template": "Normal.dotm",
                    "TotalTime": "12",
                    "Pages": "42",
                    "Words": "1200",
                    "Application": "Microsoft Office Word",
                    "Company": "",
                }
            ),
        ),
        (
            "docProps/custom.xml",
            custom_xml(
                [
                    ("Project Code", "lpwstr", "PX-12"),
                    ("invoice_ID", "i4", "1001"),
                    ("Approved", "bool", "true"),
                ]
            ),
        ),
    ]


@pytest.fixture
def sample_docx(make_package, sample_entries) -> bytes:
    """A complete package with core, app and custom properties."""
    return make_package(sample_entries)


@pytest.fixture
def app_client() -> Generator[TestClient, None, None]:
    """Create test client with the schema registry initialized."""
    from docprops.main import app

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
