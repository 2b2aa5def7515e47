"""Schema Registry - process-wide, read-only property schema tables."""

import json
import logging
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from docprops.core.config import Settings, get_settings
from docprops.core.exceptions import SchemaTableError, SchemaTableNotFoundError
from docprops.models.schema import SchemaTable

logger = logging.getLogger(__name__)

BUNDLED_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas"

APP_ENTRY = "docProps/app.xml"
CORE_ENTRY = "docProps/core.xml"
REQUIRED_TABLES = (APP_ENTRY, CORE_ENTRY)


class SchemaRegistry:
    """In-memory registry of the fixed property schema tables.

    Tables are loaded once and never mutated afterwards, so concurrent
    extractions read them without locking.
    """

    _instance: Optional["SchemaRegistry"] = None
    _lock = Lock()

    def __new__(cls, *args: Any, **kwargs: Any) -> "SchemaRegistry":
        """Singleton pattern for registry."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, settings: Optional[Settings] = None):
        if self._initialized:
            return

        self.settings = settings or get_settings()
        self._tables: Dict[str, SchemaTable] = {}
        self._loaded_at: Optional[datetime] = None
        self._source_path: Optional[Path] = None
        self._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Reset singleton instance (useful for testing)."""
        with cls._lock:
            cls._instance = None

    def _resolve_path(self) -> Path:
        if self.settings.schema_path:
            return Path(self.settings.schema_path)
        return BUNDLED_SCHEMA_PATH

    def _load_table(self, table_file: Path) -> SchemaTable:
        try:
            with open(table_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            return SchemaTable(**data)
        except json.JSONDecodeError as e:
            raise SchemaTableError(f"Invalid JSON in {table_file}: {e}") from e
        except (ValidationError, TypeError) as e:
            raise SchemaTableError(f"Invalid schema table {table_file}: {e}") from e

    def initialize(self) -> int:
        """Load every ``*.json`` schema table from the configured directory.

        Returns:
            Number of tables loaded.

        Raises:
            SchemaTableError: Directory missing, a table invalid, or the app
                or core table absent.
        """
        base = self._resolve_path()
        if not base.is_dir():
            raise SchemaTableError(f"Schema table directory not found: {base}")

        tables: Dict[str, SchemaTable] = {}
        for table_file in sorted(base.glob("*.json")):
            table = self._load_table(table_file)
            tables[table.entry] = table
            logger.info(f"Loaded schema table '{table.entry}' with {len(table.properties)} properties")

        missing = [entry for entry in REQUIRED_TABLES if entry not in tables]
        if missing:
            raise SchemaTableError(f"Missing schema tables in {base}: {missing}")

        with self._lock:
            self._tables = tables
            self._source_path = base
            self._loaded_at = datetime.utcnow()

        return len(tables)

    def ensure_loaded(self) -> None:
        """Load tables on first use."""
        if not self._tables:
            self.initialize()

    # Query methods

    def get_table(self, entry: str) -> Optional[SchemaTable]:
        """Get a table by member path (``docProps/app.xml``) or file name (``app.xml``)."""
        self.ensure_loaded()
        if entry in self._tables:
            return self._tables[entry]
        return self._tables.get(f"docProps/{entry}")

    def get_table_or_raise(self, entry: str) -> SchemaTable:
        """Get table or raise error if not found."""
        table = self.get_table(entry)
        if not table:
            raise SchemaTableNotFoundError(entry)
        return table

    def list_tables(self) -> List[SchemaTable]:
        """List all loaded tables."""
        self.ensure_loaded()
        return list(self._tables.values())

    @property
    def tables_count(self) -> int:
        """Get number of loaded tables."""
        return len(self._tables)

    @property
    def loaded_at(self) -> Optional[datetime]:
        """When the tables were loaded."""
        return self._loaded_at

    @property
    def source_path(self) -> Optional[Path]:
        """Directory the tables were loaded from."""
        return self._source_path


# Convenience function for dependency injection
def get_registry() -> SchemaRegistry:
    """Get the singleton registry instance."""
    return SchemaRegistry()
