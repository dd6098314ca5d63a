"""
Roster Repository

Read-only access to per-agent roster numbers stored at agents/{identity}.
"""

from src.core.document_store import DocumentStore, document_path
from src.models.contracts.reports import AgentStats
from src.repositories.reports import AGENTS_COLLECTION


class RosterRepository:
    """Agent roster lookups."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_agent(self, identity: str) -> AgentStats | None:
        """
        Get roster stats for an agent.

        Returns:
            AgentStats or None if the agent has no roster document
        """
        data = await self.store.get(document_path(AGENTS_COLLECTION, identity))
        if data is None:
            return None
        cleaned = {key: value for key, value in data.items() if value is not None}
        cleaned.setdefault("name", identity)
        return AgentStats.model_validate(cleaned)

    async def list_agents(self) -> list[AgentStats]:
        """List every agent on the roster, sorted by name."""
        documents = await self.store.list(AGENTS_COLLECTION)
        agents = []
        for doc_id, data in documents:
            cleaned = {key: value for key, value in data.items() if value is not None}
            cleaned.setdefault("name", doc_id)
            agents.append(AgentStats.model_validate(cleaned))
        return sorted(agents, key=lambda agent: agent.name)
