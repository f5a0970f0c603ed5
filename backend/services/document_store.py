"""
Local JSON document store.

Mirrors the small part of the Firestore client surface the routers rely on
(`collection(...).document(...).get()/set()/delete()`), backed by one JSON
file per document. Every write replaces the whole file atomically.
"""
import copy
import json
import os
import tempfile
import threading
from pathlib import Path


class StorageError(Exception):
    """Raised when a document cannot be read from or written to disk."""


class CorruptDocumentError(StorageError):
    """Raised when a document exists but does not contain valid JSON."""


def _check_id(doc_id: str) -> str:
    if not doc_id or "/" in doc_id or "\\" in doc_id or doc_id in (".", ".."):
        raise ValueError(f"Invalid document id: {doc_id!r}")
    return doc_id


class DocumentSnapshot:
    def __init__(self, doc_id: str, data=None, update_time=None):
        self.id = doc_id
        self._data = data
        self.update_time = update_time

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        if self._data is None:
            return None
        return copy.deepcopy(self._data)


class DocumentReference:
    def __init__(self, path: Path, doc_id: str):
        self.path = path
        self.id = doc_id

    def get(self) -> DocumentSnapshot:
        try:
            if not self.path.exists():
                return DocumentSnapshot(self.id)
            raw = self.path.read_text(encoding="utf-8")
            update_time = self.path.stat().st_mtime_ns
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDocumentError(f"Corrupt document {self.path}: {e}") from e
        return DocumentSnapshot(self.id, data, update_time)

    def set(self, data) -> None:
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.id}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def delete(self) -> None:
        try:
            if self.path.exists():
                self.path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete {self.path}: {e}") from e


class CollectionReference:
    def __init__(self, path: Path, name: str):
        self.path = path
        self.id = name

    def document(self, doc_id: str) -> DocumentReference:
        _check_id(doc_id)
        return DocumentReference(self.path / f"{doc_id}.json", doc_id)

    def list_document_ids(self):
        try:
            if not self.path.exists():
                return []
            names = [p.stem for p in self.path.iterdir() if p.suffix == ".json" and not p.name.startswith(".")]
        except OSError as e:
            raise StorageError(f"Failed to list {self.path}: {e}") from e
        return sorted(names)


class DocumentStore:
    """Root of the data directory. One instance per process (see database.get_db)."""

    def __init__(self, root):
        self.root = Path(root)
        # Serialises read-modify-write cycles inside this process.
        self.lock = threading.RLock()

    def document(self, name: str) -> DocumentReference:
        _check_id(name)
        return DocumentReference(self.root / f"{name}.json", name)

    def collection(self, name: str) -> CollectionReference:
        _check_id(name)
        return CollectionReference(self.root / name, name)
