import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path

from conciergerie.errors import StorageError

logger = logging.getLogger(__name__)

TASKS_FILE = "taches.json"
HOUSES_FILE = "maisons.json"
ORDER_FILE = "ordre-tache.json"


class Document:
    """
    One JSON document of one tenant, held fully in memory.
    save() rewrites the whole file from `data`.
    """

    def __init__(self, path: Path, data: dict):
        self.path = path
        self.data = data

    def save(self):
        # Write next to the target then swap, so readers never see half a file
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Could not write {self.path.name}: {e}") from e


class DocumentStore:
    """
    Loads and persists per-tenant JSON documents.

    Plain load()/save() is last-write-wins. edit() holds a lock per
    (tenant, document) across load -> mutate -> save so writers in this
    process never interleave.
    """

    def __init__(self):
        self._locks: dict[Path, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, path: Path) -> threading.Lock:
        key = path.resolve()
        with self._registry_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def load(self, tenant_path: Path, name: str) -> Document:
        """
        Ensures the file exists, then parses it.
        Empty or whitespace-only files load as an empty object.
        """
        path = Path(tenant_path) / name

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch(exist_ok=True)
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not read {name}: {e}") from e

        if not text.strip():
            return Document(path, {})

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"{name} is not valid JSON: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise StorageError(f"{name} must contain a JSON object")

        return Document(path, data)

    @contextmanager
    def edit(self, tenant_path: Path, name: str):
        """
        Yields the loaded document and saves it when the block exits
        without an exception.
        """
        path = Path(tenant_path) / name
        with self._lock_for(path):
            doc = self.load(tenant_path, name)
            yield doc
            doc.save()
            logger.debug("Saved %s", path)

    def replace(self, tenant_path: Path, name: str, data: dict):
        """
        Overwrites a document without reading its previous content.
        """
        path = Path(tenant_path) / name
        with self._lock_for(path):
            path.parent.mkdir(parents=True, exist_ok=True)
            Document(path, data).save()
            logger.debug("Replaced %s", path)
