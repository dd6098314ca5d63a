"""
Viewer-Agent Connection Repository

One document per connection at viewerAgentConnections/{connection_id}.
"""

from src.core.document_store import DocumentStore, document_path
from src.models.contracts.connections import ViewerAgentConnection

CONNECTIONS_COLLECTION = "viewerAgentConnections"


class ConnectionRepository:
    """CRUD for viewer-agent connections."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def list_connections(self) -> list[ViewerAgentConnection]:
        """List every stored connection (document id wins over a stored id)."""
        documents = await self.store.list(CONNECTIONS_COLLECTION)
        return [
            ViewerAgentConnection.model_validate({**data, "id": doc_id})
            for doc_id, data in documents
        ]

    async def save_connection(self, connection: ViewerAgentConnection) -> None:
        await self.store.set(
            document_path(CONNECTIONS_COLLECTION, connection.id),
            connection.model_dump(by_alias=True),
        )

    async def delete_connection(self, connection_id: str) -> None:
        await self.store.delete(document_path(CONNECTIONS_COLLECTION, connection_id))
