# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package: re-exports the three stores."""
from devtrack.repositories.project_repository import ProjectRepository
from devtrack.repositories.ticket_repository import TicketRepository
from devtrack.repositories.user_repository import UserRepository

__all__ = ["ProjectRepository", "TicketRepository", "UserRepository"]
