"""
Common exceptions for ArchCanvas.

Every error carries a user-facing message so the editor can turn it into a
dismissible notice without further formatting.
"""


class ArchCanvasError(Exception):
    """Base exception for all ArchCanvas errors."""

    code = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.code


class ConfigurationError(ArchCanvasError):
    """Raised when there are configuration issues."""
    code = "configuration_error"


# === Editor / graph model errors ===

class EditorError(ArchCanvasError):
    """Base class for recoverable graph editing errors."""
    code = "editor_error"


class UnknownResourceType(EditorError):
    """Raised when a (provider, resource type) pair is not in the taxonomy."""
    code = "unknown_resource_type"

    def __init__(self, provider: str, resource_type: str):
        super().__init__(f"Unknown resource type '{resource_type}' for provider '{provider}'")
        self.provider = provider
        self.resource_type = resource_type


class NodeNotFound(EditorError):
    """Raised when a node id does not resolve in the graph."""
    code = "node_not_found"

    def __init__(self, node_id: str):
        super().__init__(f"Node '{node_id}' does not exist")
        self.node_id = node_id


class DuplicateEdge(EditorError):
    """Raised when an edge with the same ordered pair already exists."""
    code = "duplicate_edge"

    def __init__(self, source_id: str, target_id: str):
        super().__init__(f"'{source_id}' is already connected to '{target_id}'")
        self.source_id = source_id
        self.target_id = target_id


class SelfLoopNotAllowed(EditorError):
    """Raised when an edge would connect a node to itself."""
    code = "self_loop_not_allowed"

    def __init__(self, node_id: str):
        super().__init__(f"Node '{node_id}' cannot be connected to itself")
        self.node_id = node_id


class InvalidConnection(EditorError):
    """Raised when the connection policy rejects a category pair."""
    code = "invalid_connection"

    def __init__(self, source_category: str, target_category: str, reason: str):
        super().__init__(reason)
        self.source_category = source_category
        self.target_category = target_category
        self.reason = reason


class SnapshotIntegrityError(EditorError):
    """Raised when a snapshot violates graph invariants and cannot be installed."""
    code = "snapshot_integrity_error"


# === Persistence errors ===

class PersistenceError(ArchCanvasError):
    """Base class for save/load/import failures."""
    code = "persistence_error"


class ArchitectureNotFound(PersistenceError):
    """Raised when an architecture id is not in the store."""
    code = "architecture_not_found"

    def __init__(self, architecture_id: str):
        super().__init__(f"Architecture '{architecture_id}' was not found")
        self.architecture_id = architecture_id


class ValidationError(PersistenceError):
    """Raised when data validation fails before saving."""
    code = "validation_error"


class PersistenceFailure(PersistenceError):
    """Raised when the persistence store fails."""
    code = "persistence_failure"


class MalformedImport(PersistenceError):
    """Raised when an import file is corrupt or incompatible."""
    code = "malformed_import"


class StorageError(ArchCanvasError):
    """Raised when storage backend operations fail."""
    code = "storage_error"
