"""
Report Repository

Reads and writes the per-agent working report document:
agents/{identity}/reports/current
"""

import logging

from src.core.document_store import DocumentStore, document_path
from src.models.contracts.reports import ReportSnapshot

logger = logging.getLogger(__name__)

AGENTS_COLLECTION = "agents"
REPORTS_SUBCOLLECTION = "reports"
CURRENT_REPORT_KEY = "current"


def report_path(identity: str) -> str:
    """Document path of an agent's current report."""
    return document_path(AGENTS_COLLECTION, identity, REPORTS_SUBCOLLECTION, CURRENT_REPORT_KEY)


class ReportRepository:
    """
    Report snapshot storage.

    Snapshots are written wholesale; there are no partial updates.
    DocumentStoreError from the store propagates to the caller.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_report(self, identity: str) -> ReportSnapshot | None:
        """
        Load the current report for an agent.

        Args:
            identity: Agent identity

        Returns:
            ReportSnapshot, or None if the agent has never saved one
        """
        data = await self.store.get(report_path(identity))
        if data is None:
            return None

        # Documents written by older dashboard builds may hold nulls
        cleaned = {key: value for key, value in data.items() if value is not None}
        if isinstance(cleaned.get("clients"), list):
            cleaned["clients"] = [client for client in cleaned["clients"] if client is not None]
        return ReportSnapshot.model_validate(cleaned)

    async def save_report(self, identity: str, snapshot: ReportSnapshot) -> None:
        """Overwrite the agent's current report."""
        await self.store.set(
            report_path(identity),
            snapshot.model_dump(by_alias=True, mode="json"),
        )
        logger.info(f"Report saved for agent {identity} ({len(snapshot.clients)} clients)")
