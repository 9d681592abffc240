"""Persistence collaborators for the project collection.

The whole collection is stored as one JSON array (camelCase fields) in a
single named slot. ``load`` never raises: a missing or unreadable slot loads
as an empty collection. ``save`` is best-effort and logs failures.
"""
import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError
from pydantic_core import from_json, to_json

from agile_canvas.models.project import Project


logger = logging.getLogger(__name__)

_projects_adapter = TypeAdapter(list[Project])


def serialize_projects(projects: list[Project]) -> list[dict[str, Any]]:
    """Convert projects to JSON-compatible dicts with camelCase keys."""
    return _projects_adapter.dump_python(projects, mode="json", by_alias=True)


def deserialize_projects(value: Any) -> list[Project]:
    """
    Build projects from a stored slot value.

    Anything that is not a list loads as an empty collection. Entries that
    fail validation are skipped so one bad record does not discard the rest.

    Args:
        value: Parsed slot value (or a JSON string/bytes)

    Returns:
        List of projects
    """
    if isinstance(value, (str, bytes)):
        try:
            value = from_json(value)
        except ValueError as e:
            logger.warning("Stored projects are not valid JSON, starting empty: %s", e)
            return []

    if not isinstance(value, list):
        if value is not None:
            logger.warning("Stored projects are not a list, starting empty")
        return []

    projects = []
    for position, entry in enumerate(value):
        try:
            projects.append(Project.model_validate(entry))
        except ValidationError as e:
            logger.warning("Skipping malformed project at position %d: %s", position, e)
    return projects


class ProjectStorage:
    """Storage contract required by the project store."""

    def load(self) -> list[Project]:
        """Return the stored collection, or an empty list."""
        raise NotImplementedError

    def save(self, projects: list[Project]) -> None:
        """Replace the stored collection."""
        raise NotImplementedError


class MemoryStorage(ProjectStorage):
    """Process-local slot. Holds the serialized form like the other backends."""

    def __init__(self, value: Any = None):
        self.value = value
        self.save_count = 0

    def load(self) -> list[Project]:
        return deserialize_projects(self.value)

    def save(self, projects: list[Project]) -> None:
        self.value = serialize_projects(projects)
        self.save_count += 1


class JsonFileStorage(ProjectStorage):
    """
    Key-value JSON file on local disk.

    The file holds a JSON object mapping slot names to values, so several
    slots can share one file. Writes go to a temporary file that replaces the
    original, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: Path | str, key: str):
        self.path = Path(path)
        self.key = key

    def _read_slots(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            slots = from_json(self.path.read_bytes())
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", self.path, e)
            return {}
        if not isinstance(slots, dict):
            logger.warning("Ignoring %s: expected a JSON object", self.path)
            return {}
        return slots

    def load(self) -> list[Project]:
        return deserialize_projects(self._read_slots().get(self.key))

    def save(self, projects: list[Project]) -> None:
        slots = self._read_slots()
        slots[self.key] = serialize_projects(projects)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        except OSError as e:
            logger.error("Failed to save projects to %s: %s", self.path, e)
            return

        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(to_json(slots, indent=2))
            os.replace(tmp_name, self.path)
        except OSError as e:
            # Clean up temp file on error
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            logger.error("Failed to save projects to %s: %s", self.path, e)


class MongoStorage(ProjectStorage):
    """
    Single document slot in a MongoDB collection (Motor).

    The slot is read once by ``prime()`` at startup. ``save()`` schedules the
    upsert on the running event loop and returns immediately; ``flush()``
    waits for writes still in flight. Writes run one at a time and always
    send the latest snapshot, so an older collection never lands after a
    newer one.
    """

    def __init__(self, collection, key: str):
        """
        Initialize storage.

        Args:
            collection: Motor collection holding slot documents
            key: Slot name, used as the document ``_id``
        """
        self.collection = collection
        self.key = key
        self._snapshot: Any = None
        self._pending: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()
        self._written: Any = None

    async def prime(self) -> None:
        """Read the slot document into memory."""
        try:
            doc = await self.collection.find_one({"_id": self.key})
        except Exception as e:
            logger.warning("Could not read slot '%s' from MongoDB: %s", self.key, e)
            doc = None
        self._snapshot = doc.get("value") if doc else None

    def load(self) -> list[Project]:
        return deserialize_projects(self._snapshot)

    def save(self, projects: list[Project]) -> None:
        value = serialize_projects(projects)
        self._snapshot = value

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("No running event loop, slot '%s' not written", self.key)
            return

        task = loop.create_task(self._write())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write(self) -> None:
        async with self._write_lock:
            value = self._snapshot
            if value is self._written:
                return
            try:
                await self.collection.replace_one(
                    {"_id": self.key},
                    {"_id": self.key, "value": value},
                    upsert=True,
                )
            except Exception as e:
                logger.error("Failed to save slot '%s' to MongoDB: %s", self.key, e)
                return
            self._written = value

    async def flush(self) -> None:
        """Wait for all scheduled writes to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending))


def build_storage(backend: str, path: Optional[str] = None, key: str = "projects", collection=None) -> ProjectStorage:
    """
    Create the storage backend named in settings.

    Raises:
        ValueError: If the backend is unknown or misconfigured
    """
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        if not path:
            raise ValueError("storage_path is required for the file backend")
        return JsonFileStorage(path, key)
    if backend == "mongodb":
        if collection is None:
            raise ValueError("A MongoDB collection is required for the mongodb backend")
        return MongoStorage(collection, key)
    raise ValueError(f"Unknown storage backend: {backend}")
