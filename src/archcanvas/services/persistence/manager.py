"""
Persistence Manager.

Async save, load, list and delete of named architectures on top of a
pluggable ``ArchitectureStore``, plus file export and import.

Loads are tagged with an increasing token: when the user opens A and then B
before A arrives, A's late response is dropped instead of overwriting B.
Saves of the same architecture are serialized so the last save issued is
the last one written.
"""

import asyncio
import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional, TypeVar

from ...shared import (
    get_logger, get_metrics, get_settings, next_timestamp, utc_now,
    GraphSnapshot, Settings,
    ArchCanvasError, ArchitectureNotFound, PersistenceFailure, StorageError, ValidationError,
)
from ..graph_model import find_snapshot_problems
from ..taxonomy import ResourceTaxonomy, get_taxonomy
from . import export
from .export import ImportSource
from .models import Architecture, ArchitectureSummary, ExportDocument, SaveOutcome
from .storage import ArchitectureStore, create_store

T = TypeVar("T")

SaveCallback = Callable[[SaveOutcome], None]


class PersistenceManager:
    """
    Saves and loads architectures for the editor.

    Store failures are reported as ``PersistenceFailure``; the caller turns
    them into notices. Nothing here touches the graph except
    ``open_architecture``, which installs through the controller.
    """

    def __init__(self,
                 store: Optional[ArchitectureStore] = None,
                 settings: Optional[Settings] = None,
                 taxonomy: Optional[ResourceTaxonomy] = None):
        """
        Initialize the manager.

        Args:
            store: Storage backend; built from settings when omitted
            settings: Settings override
            taxonomy: Taxonomy used to check snapshots and imports
        """
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.settings = settings or get_settings()
        self.taxonomy = taxonomy or get_taxonomy()
        self.store = store or create_store(self.settings)

        self._load_token = 0
        self._save_locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

        self.logger.info(f"PersistenceManager initialized with {type(self.store).__name__}")

    # ========== Listing & loading ==========

    async def list_architectures(self,
                                 owner_id: Optional[str] = None,
                                 search: Optional[str] = None) -> List[ArchitectureSummary]:
        """
        Summaries of an owner's architectures, most recently updated first.

        Args:
            owner_id: Owner to list for; the configured default owner when omitted
            search: Case-insensitive name filter
        """
        owner_id = owner_id or self.settings.default_owner_id
        architectures = await self._call("list", self.store.list_for_owner(owner_id))

        if search and search.strip():
            needle = search.strip().lower()
            architectures = [a for a in architectures if needle in a.name.lower()]

        architectures.sort(key=lambda a: a.updated_at, reverse=True)
        return [architecture.summary() for architecture in architectures]

    async def load_architecture(self, architecture_id: str) -> Architecture:
        """
        Fetch one architecture.

        Raises:
            ArchitectureNotFound: if no record has this id
            PersistenceFailure: if the store fails
        """
        architecture = await self._call("get", self.store.get(architecture_id))
        if architecture is None:
            raise ArchitectureNotFound(architecture_id)
        return architecture

    async def open_architecture(self, architecture_id: str, controller) -> Optional[Architecture]:
        """
        Load an architecture and install it in ``controller``.

        Returns None when a later ``open_architecture`` call started before
        this one finished; the stale result, success or failure, is
        discarded and the graph is not touched.

        Raises:
            ArchitectureNotFound: if no record has this id
            PersistenceFailure: if the store fails or the record cannot be installed
        """
        self._load_token += 1
        token = self._load_token

        try:
            architecture = await self.load_architecture(architecture_id)
        except ArchCanvasError as e:
            if token != self._load_token:
                self.logger.debug(f"Discarded stale failed load of {architecture_id}: {e.message}")
                return None
            raise

        if token != self._load_token:
            self.logger.debug(f"Discarded stale load of {architecture_id}")
            return None

        result = controller.install_snapshot(architecture.snapshot())
        if not result.accepted:
            detail = result.notice.message if result.notice else "install rejected"
            raise PersistenceFailure(f"Architecture '{architecture.name}' could not be opened: {detail}")

        self.logger.info(f"Opened architecture {architecture_id} ({architecture.name})")
        return architecture

    # ========== Saving ==========

    async def save_architecture(self,
                                name: str,
                                snapshot: GraphSnapshot,
                                architecture_id: Optional[str] = None,
                                owner_id: Optional[str] = None) -> Architecture:
        """
        Save the whole graph under ``name``.

        The first save (no ``architecture_id``) creates a record with a new
        id; later saves overwrite it wholesale, keeping ``created_at`` and
        moving ``updated_at`` strictly forward.

        Raises:
            ValidationError: if the name is blank or the snapshot is inconsistent
            ArchitectureNotFound: if ``architecture_id`` names no record
            PersistenceFailure: if the store fails
        """
        if not name or not name.strip():
            raise ValidationError("Architecture name cannot be empty")
        problems = find_snapshot_problems(snapshot, self.taxonomy)
        if problems:
            raise ValidationError("Architecture cannot be saved: " + "; ".join(problems))

        is_new = architecture_id is None
        architecture_id = architecture_id or uuid.uuid4().hex

        async with self._serialized(architecture_id):
            now = utc_now()
            if is_new:
                created_at = updated_at = now
                owner_id = owner_id or self.settings.default_owner_id
            else:
                existing = await self._call("get", self.store.get(architecture_id))
                if existing is None:
                    raise ArchitectureNotFound(architecture_id)
                created_at = existing.created_at
                updated_at = next_timestamp(existing.updated_at)
                owner_id = owner_id or existing.owner_id

            architecture = Architecture(
                id=architecture_id,
                name=name,
                owner_id=owner_id,
                nodes=[node.model_copy(deep=True) for node in snapshot.nodes],
                edges=[edge.model_copy(deep=True) for edge in snapshot.edges],
                created_at=created_at,
                updated_at=updated_at,
            )
            await self._call("put", self.store.put(architecture))

        self.logger.info(
            f"Saved architecture {architecture.id} ({architecture.name}): "
            f"{architecture.node_count} nodes, {architecture.edge_count} edges"
        )
        return architecture

    def save_in_background(self,
                           name: str,
                           snapshot: GraphSnapshot,
                           architecture_id: Optional[str] = None,
                           owner_id: Optional[str] = None,
                           on_complete: Optional[SaveCallback] = None) -> "asyncio.Task[SaveOutcome]":
        """
        Fire-and-forget save; must be called from a running event loop.

        The returned task never raises: failures are reported through the
        ``SaveOutcome`` handed to ``on_complete`` and returned by the task.
        """
        async def run() -> SaveOutcome:
            try:
                architecture = await self.save_architecture(name, snapshot, architecture_id, owner_id)
                outcome = SaveOutcome(success=True, architecture=architecture)
            except ArchCanvasError as e:
                self.logger.warning(f"Background save of '{name}' failed: {e.message}")
                outcome = SaveOutcome(success=False, error_code=e.code, error_message=e.message)

            if on_complete is not None:
                on_complete(outcome)
            return outcome

        return asyncio.create_task(run())

    # ========== Deletion ==========

    async def delete_architecture(self, architecture_id: str) -> None:
        """Delete an architecture; deleting a missing id is not an error."""
        deleted = await self._call("delete", self.store.delete(architecture_id))
        if deleted:
            self.logger.info(f"Deleted architecture {architecture_id}")
        else:
            self.logger.debug(f"Delete of unknown architecture {architecture_id} ignored")

    # ========== Export & import ==========

    def export_to_file(self, snapshot: GraphSnapshot, name: str) -> bytes:
        return export.export_to_file(snapshot, name, indent=self.settings.export_indent)

    def import_document(self, source: ImportSource) -> ExportDocument:
        return export.import_document(source, self.taxonomy)

    def import_from_file(self, source: ImportSource) -> GraphSnapshot:
        """
        Parse an export file into a snapshot.

        Raises:
            MalformedImport: if the file is corrupt or incompatible
        """
        return export.import_from_file(source, self.taxonomy)

    @staticmethod
    def export_filename(name: str) -> str:
        return export.export_filename(name)

    # ========== Internals ==========

    @asynccontextmanager
    async def _serialized(self, architecture_id: str) -> AsyncIterator[None]:
        """Hold the save lock for one id; the lock is dropped once nobody waits on it."""
        lock = self._save_locks.get(architecture_id)
        if lock is None:
            lock = self._save_locks[architecture_id] = asyncio.Lock()
        self._lock_users[architecture_id] = self._lock_users.get(architecture_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[architecture_id] -= 1
            if not self._lock_users[architecture_id]:
                del self._lock_users[architecture_id]
                del self._save_locks[architecture_id]

    async def _call(self, operation: str, call: Awaitable[T]) -> T:
        """Await a store call, timing it and wrapping backend errors."""
        start_time = time.time()
        try:
            result = await call
        except StorageError as e:
            self.metrics.record_store_call(operation, time.time() - start_time, success=False)
            self.logger.warning(f"Store {operation} failed: {e.message}")
            raise PersistenceFailure(f"Architecture store {operation} failed: {e.message}")
        except Exception as e:
            self.metrics.record_store_call(operation, time.time() - start_time, success=False)
            self.logger.error(f"Unexpected store error during {operation}: {e}")
            raise PersistenceFailure(f"Architecture store {operation} failed: {e}")

        self.metrics.record_store_call(operation, time.time() - start_time)
        return result
