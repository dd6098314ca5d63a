# Data access layer - document store repositories
from src.repositories.connections import ConnectionRepository
from src.repositories.reports import ReportRepository
from src.repositories.roster import RosterRepository

__all__ = [
    "ConnectionRepository",
    "ReportRepository",
    "RosterRepository",
]
