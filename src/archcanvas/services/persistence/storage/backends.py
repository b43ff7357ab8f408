"""
Pluggable storage backends for the Persistence Manager.

Provides different storage options for saved architectures depending on
deployment needs and persistence requirements.
"""

import asyncio
import json
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ....shared import get_logger, get_settings, Settings, StorageError
from ..models import Architecture


class ArchitectureStore(ABC):
    """Abstract base class for architecture storage backends."""

    @abstractmethod
    async def put(self, architecture: Architecture) -> None:
        """Store an architecture, replacing any record with the same id."""
        pass

    @abstractmethod
    async def get(self, architecture_id: str) -> Optional[Architecture]:
        """Retrieve an architecture by ID."""
        pass

    @abstractmethod
    async def list_for_owner(self, owner_id: str) -> List[Architecture]:
        """Get every architecture belonging to an owner."""
        pass

    @abstractmethod
    async def delete(self, architecture_id: str) -> bool:
        """Delete an architecture; returns False when it did not exist."""
        pass


class InMemoryArchitectureStore(ArchitectureStore):
    """
    In-memory storage backend for development and testing.

    Provides fast, ephemeral storage that doesn't persist between restarts.
    Records are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self):
        """Initialize in-memory storage."""
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()

        self._architectures: Dict[str, Architecture] = {}

        self.logger.info("Initialized InMemoryArchitectureStore backend")

    async def put(self, architecture: Architecture) -> None:
        with self._lock:
            self._architectures[architecture.id] = architecture.model_copy(deep=True)
            self.logger.debug(f"Stored architecture: {architecture.id}")

    async def get(self, architecture_id: str) -> Optional[Architecture]:
        with self._lock:
            architecture = self._architectures.get(architecture_id)
            return architecture.model_copy(deep=True) if architecture else None

    async def list_for_owner(self, owner_id: str) -> List[Architecture]:
        with self._lock:
            return [
                architecture.model_copy(deep=True)
                for architecture in self._architectures.values()
                if architecture.owner_id == owner_id
            ]

    async def delete(self, architecture_id: str) -> bool:
        with self._lock:
            if architecture_id not in self._architectures:
                return False
            del self._architectures[architecture_id]
            self.logger.debug(f"Deleted architecture: {architecture_id}")
            return True


class JsonFileArchitectureStore(ArchitectureStore):
    """
    File storage backend: one JSON document per architecture.

    Writes go to a temporary file first and are moved into place, so a
    crash mid-write never leaves a truncated record. Blocking file IO runs
    in a worker thread.
    """

    def __init__(self, data_dir: Path):
        self.logger = get_logger(__name__)
        self.data_dir = Path(data_dir)

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.data_dir}: {e}")

        self.logger.info(f"Initialized JsonFileArchitectureStore at {self.data_dir}")

    async def put(self, architecture: Architecture) -> None:
        await asyncio.to_thread(self._write, architecture)

    async def get(self, architecture_id: str) -> Optional[Architecture]:
        path = self._path_for(architecture_id)
        if path is None:
            return None
        return await asyncio.to_thread(self._read, path)

    async def list_for_owner(self, owner_id: str) -> List[Architecture]:
        return await asyncio.to_thread(self._scan, owner_id)

    async def delete(self, architecture_id: str) -> bool:
        path = self._path_for(architecture_id)
        if path is None:
            return False
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete architecture {architecture_id}: {e}")

        self.logger.debug(f"Deleted architecture file: {path.name}")
        return True

    def _path_for(self, architecture_id: str) -> Optional[Path]:
        """File for an id, or None when the id cannot name a file in ``data_dir``."""
        if not architecture_id or architecture_id.startswith('.'):
            return None
        if any(sep in architecture_id for sep in ('/', '\\', os.sep)):
            return None
        return self.data_dir / f"{architecture_id}.json"

    def _write(self, architecture: Architecture) -> None:
        path = self._path_for(architecture.id)
        if path is None:
            raise StorageError(f"Invalid architecture id: {architecture.id!r}")
        tmp_path = path.with_suffix('.json.tmp')
        try:
            tmp_path.write_text(architecture.model_dump_json(), encoding='utf-8')
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Failed to write architecture {architecture.id}: {e}")

        self.logger.debug(f"Wrote architecture file: {path.name}")

    def _read(self, path: Path) -> Optional[Architecture]:
        try:
            raw = path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path.name}: {e}")

        try:
            return Architecture.model_validate(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            raise StorageError(f"Corrupt architecture record {path.name}: {e}")

    def _scan(self, owner_id: str) -> List[Architecture]:
        architectures = []
        for path in sorted(self.data_dir.glob('*.json')):
            try:
                architecture = self._read(path)
            except StorageError as e:
                self.logger.warning(f"Skipping unreadable record: {e.message}")
                continue
            if architecture is not None and architecture.owner_id == owner_id:
                architectures.append(architecture)
        return architectures


def create_store(settings: Optional[Settings] = None) -> ArchitectureStore:
    """Build the backend named by ``settings.storage_backend``."""
    settings = settings or get_settings()
    if settings.storage_backend == 'file':
        return JsonFileArchitectureStore(settings.data_dir)
    return InMemoryArchitectureStore()
