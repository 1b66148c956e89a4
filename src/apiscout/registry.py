"""
Handle registry - maps opaque project handles to materialized directories.

The in-memory map is mirrored to a durable backend after every change so a
restarted process can still resolve handles it issued earlier. On a lookup
miss the backend copy is reloaded and treated as the source of truth.
"""

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from .schemas import ProjectHandle


class RegistryBackend:
    """Persistence interface for the handle registry"""

    def load(self) -> Dict[str, ProjectHandle]:
        raise NotImplementedError

    def save(self, handles: Dict[str, ProjectHandle]) -> None:
        raise NotImplementedError


class InMemoryBackend(RegistryBackend):
    """Keeps the mirror in process memory; used in tests and ephemeral setups"""

    def __init__(self):
        self._data: Dict[str, dict] = {}

    def load(self) -> Dict[str, ProjectHandle]:
        return {k: ProjectHandle.model_validate(v) for k, v in self._data.items()}

    def save(self, handles: Dict[str, ProjectHandle]) -> None:
        self._data = {k: h.model_dump(mode="json") for k, h in handles.items()}


class JsonFileBackend(RegistryBackend):
    """Mirrors the registry to a JSON file keyed by handle id"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.logger = logging.getLogger("JsonFileBackend")

    def load(self) -> Dict[str, ProjectHandle]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self.logger.warning(f"Failed to load metadata from {self.path}: {e}")
            return {}
        if not isinstance(raw, dict):
            self.logger.warning(f"Ignoring metadata in {self.path}: expected an object, got {type(raw).__name__}")
            return {}

        handles: Dict[str, ProjectHandle] = {}
        for handle_id, record in raw.items():
            try:
                handles[handle_id] = ProjectHandle.model_validate(record)
            except ValidationError as e:
                self.logger.warning(f"Dropping malformed metadata entry {handle_id}: {e.error_count()} error(s)")
        return handles

    def save(self, handles: Dict[str, ProjectHandle]) -> None:
        payload = {k: h.model_dump(mode="json") for k, h in handles.items()}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a crash never leaves a truncated mirror
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".metadata-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


class HandleRegistry:
    """
    Process-wide handle -> path store with a durable mirror.

    Every read-modify-write of the map and its mirror runs under one lock so
    concurrent registrations never lose updates.
    """

    def __init__(self, backend: Optional[RegistryBackend] = None):
        self.backend = backend or InMemoryBackend()
        self.logger = logging.getLogger("HandleRegistry")
        self._lock = asyncio.Lock()
        self._handles: Dict[str, ProjectHandle] = self.backend.load()
        if self._handles:
            self.logger.info(f"Loaded {len(self._handles)} upload(s) from metadata")

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, handle_id: str) -> bool:
        return handle_id in self._handles

    def _flush(self) -> None:
        try:
            self.backend.save(self._handles)
        except OSError as e:
            # The in-memory copy stays authoritative for this process
            self.logger.warning(f"Failed to save metadata: {e}")

    async def register(self, handle: ProjectHandle) -> ProjectHandle:
        async with self._lock:
            self._handles[handle.handle_id] = handle
            self._flush()
        self.logger.info(f"Registered {handle.handle_id} at {handle.root_path}, total active uploads: {len(self._handles)}")
        return handle

    async def get(self, handle_id: str) -> Optional[ProjectHandle]:
        """Look up a handle and record the access; None when unknown everywhere"""
        async with self._lock:
            handle = self._handles.get(handle_id)
            if handle is None:
                persisted = self.backend.load()
                handle = persisted.get(handle_id)
                if handle is None:
                    self.logger.warning(f"Upload {handle_id} not found in metadata, total uploads: {len(self._handles)}")
                    return None
                self._handles[handle_id] = handle
            handle = handle.model_copy(update={"last_accessed": datetime.now(timezone.utc)})
            self._handles[handle_id] = handle
            self._flush()
        return handle

    async def remove(self, handle_id: str) -> Optional[ProjectHandle]:
        async with self._lock:
            handle = self._handles.pop(handle_id, None)
            if handle is None:
                handle = self.backend.load().get(handle_id)
            self._flush()
        return handle


__all__ = ['RegistryBackend', 'InMemoryBackend', 'JsonFileBackend', 'HandleRegistry']
