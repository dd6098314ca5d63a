"""
Document Store Gateway

Key-addressed document read/write/delete against the hosted document
database. Report and connection data lives here; nothing is kept in a
local database.

Path conventions:
- agents/{identity}                      - roster stats for one agent
- agents/{identity}/reports/current      - the agent's working report
- viewerAgentConnections/{connection_id} - one viewer-agent mapping

Two backends:
- MemoryDocumentStore: in-process dict, used in development and tests
- FirestoreDocumentStore: Firebase Admin SDK (blocking client, run in threads)

Writes are wholesale overwrites. There is no optimistic concurrency
check, concurrent writers for the same path are last-write-wins.
"""

import asyncio
import copy
import logging
from typing import Any, Protocol

from src.config import Settings, get_settings
from src.core.exceptions import DocumentStoreError

logger = logging.getLogger(__name__)

Document = dict[str, Any]


def document_path(*segments: str) -> str:
    """
    Join path segments into a document/collection path.

    Args:
        *segments: Path segments, e.g. ("agents", "LOVELY", "reports", "current")

    Returns:
        Slash-joined path

    Raises:
        ValueError: If a segment is empty or contains a slash
    """
    if not segments:
        raise ValueError("Path needs at least one segment")
    for segment in segments:
        if not segment or "/" in segment:
            raise ValueError(f"Invalid path segment: {segment!r}")
    return "/".join(segments)


class DocumentStore(Protocol):
    """Async document store interface used by repositories."""

    async def get(self, path: str) -> Document | None:
        """Read a document, None when it does not exist."""
        ...

    async def set(self, path: str, data: Document) -> None:
        """Overwrite a document with data."""
        ...

    async def delete(self, path: str) -> None:
        """Delete a document (no error if missing)."""
        ...

    async def list(self, collection_path: str) -> list[tuple[str, Document]]:
        """List (document_id, data) pairs directly under a collection."""
        ...


class MemoryDocumentStore:
    """
    In-process document store.

    Data is deep-copied on the way in and out so callers can never mutate
    stored state through a returned reference.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}

    async def get(self, path: str) -> Document | None:
        data = self._documents.get(path)
        return copy.deepcopy(data) if data is not None else None

    async def set(self, path: str, data: Document) -> None:
        self._documents[path] = copy.deepcopy(data)

    async def delete(self, path: str) -> None:
        self._documents.pop(path, None)

    async def list(self, collection_path: str) -> list[tuple[str, Document]]:
        prefix = f"{collection_path}/"
        results = []
        for path, data in self._documents.items():
            if not path.startswith(prefix):
                continue
            doc_id = path[len(prefix):]
            # Only direct children, not documents in nested subcollections
            if "/" in doc_id:
                continue
            results.append((doc_id, copy.deepcopy(data)))
        return results


class FirestoreDocumentStore:
    """
    Firestore-backed document store using the Firebase Admin SDK.

    The Admin SDK client is synchronous, so every call runs in a worker
    thread to keep the event loop free. Requests have no timeout; a hung
    call hangs the awaiting request.
    """

    def __init__(self, client: Any):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirestoreDocumentStore":
        """
        Initialize the Firebase app (once per process) and build a store.

        Args:
            settings: Application settings

        Returns:
            FirestoreDocumentStore bound to the default Firebase app
        """
        from firebase_admin import firestore

        from src.core.firebase import get_firebase_app

        return cls(firestore.client(get_firebase_app(settings)))

    async def get(self, path: str) -> Document | None:
        def _get() -> Document | None:
            snapshot = self._client.document(path).get()
            return snapshot.to_dict() if snapshot.exists else None

        return await self._run(_get, path, "read")

    async def set(self, path: str, data: Document) -> None:
        await self._run(lambda: self._client.document(path).set(data), path, "write")

    async def delete(self, path: str) -> None:
        await self._run(lambda: self._client.document(path).delete(), path, "delete")

    async def list(self, collection_path: str) -> list[tuple[str, Document]]:
        def _list() -> list[tuple[str, Document]]:
            return [
                (snapshot.id, snapshot.to_dict() or {})
                for snapshot in self._client.collection(collection_path).stream()
            ]

        return await self._run(_list, collection_path, "list")

    async def _run(self, func: Any, path: str, operation: str) -> Any:
        try:
            return await asyncio.to_thread(func)
        except Exception as e:
            logger.error(f"Firestore {operation} failed for {path}: {e}")
            raise DocumentStoreError(f"Firestore {operation} failed: {e}", path=path) from e


def create_document_store(settings: Settings | None = None) -> DocumentStore:
    """
    Build the configured document store backend.

    Args:
        settings: Application settings (defaults to get_settings())

    Returns:
        DocumentStore implementation
    """
    settings = settings or get_settings()
    if settings.document_store == "firestore":
        return FirestoreDocumentStore.from_settings(settings)
    logger.info("Using in-memory document store")
    return MemoryDocumentStore()
