"""
Persistence Manager for ArchCanvas.

Async save/load/list/delete of named architectures over pluggable storage
backends, and JSON export/import of graph snapshots.
"""

from .export import export_filename, export_to_file, import_document, import_from_file
from .manager import PersistenceManager
from .models import (
    EXPORT_FORMAT_VERSION,
    Architecture,
    ArchitectureSummary,
    ExportDocument,
    SaveOutcome,
)
from .storage import (
    ArchitectureStore,
    InMemoryArchitectureStore,
    JsonFileArchitectureStore,
    create_store,
)

__all__ = [
    "PersistenceManager",
    "EXPORT_FORMAT_VERSION",
    "Architecture",
    "ArchitectureSummary",
    "ExportDocument",
    "SaveOutcome",
    "ArchitectureStore",
    "InMemoryArchitectureStore",
    "JsonFileArchitectureStore",
    "create_store",
    "export_filename",
    "export_to_file",
    "import_document",
    "import_from_file",
]
