"""
Shared components for ArchCanvas.

Contains common models, utilities, and infrastructure used across all services:

- Common data models and validation
- Centralized configuration management
- Shared exception hierarchy
- Infrastructure services (logging, metrics)
"""

from .models import *
from .config import *
from .exceptions import *
from .infrastructure import *

__all__ = [
    # From models
    "BaseModel", "TimestampMixin", "next_timestamp", "utc_now",
    "ConnectionKind", "Edge", "GraphSnapshot", "Node", "Position",

    # From config
    "Settings", "get_settings",

    # From exceptions
    "ArchCanvasError", "ConfigurationError",
    "EditorError", "UnknownResourceType", "NodeNotFound", "DuplicateEdge",
    "SelfLoopNotAllowed", "InvalidConnection", "SnapshotIntegrityError",
    "PersistenceError", "ArchitectureNotFound", "ValidationError",
    "PersistenceFailure", "MalformedImport", "StorageError",

    # From infrastructure
    "get_logger", "setup_logging", "MetricsCollector", "get_metrics", "timed_operation",
]
