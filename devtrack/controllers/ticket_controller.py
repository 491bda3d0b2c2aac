# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Ticket CRUD, assignment and comments."""
from typing import List

from fastapi import APIRouter, Depends

from devtrack.core.dependencies import get_current_actor, get_ticket_service
from devtrack.schemas import MessageResponse
from devtrack.schemas.ticket import (
    AssignRequest, CommentCreate, CommentOut, TicketCreate, TicketOut, TicketUpdate,
)
from devtrack.services.ticket_service import TicketService

router = APIRouter(prefix="/api/tickets", tags=["Tickets"])


@router.post("", status_code=201, response_model=TicketOut)
async def create_ticket(
    body: TicketCreate,
    actor: str = Depends(get_current_actor),
    service: TicketService = Depends(get_ticket_service),
):
    return await service.create_ticket(actor, body)


@router.get("", response_model=List[TicketOut])
async def list_tickets(
    actor: str = Depends(get_current_actor),
    service: TicketService = Depends(get_ticket_service),
):
    return await service.list_tickets(actor)


@router.get("/project/{project_id}", response_model=List[TicketOut])
async def list_project_tickets(
    project_id: str,
    actor: str = Depends(get_current_actor),
    service: TicketService = Depends(get_ticket_service),
):
    return await service.list_project_tickets(actor, project_id)


@router.get("/{ticket_id}", response_model=TicketOut)
async def get_ticket(
    ticket_id: str,
    actor: str = Depends(get_current_actor),
    service: TicketService = Depends(get_ticket_service),
):
    return await service.get_ticket(actor, ticket_id)


@router.put("/{ticket_id}", response_model=TicketOut)
async def update_ticket(
    ticket_id: str,
    body: TicketUpdate,
    actor: str = Depends(get_current_actor),
    service: TicketService = Depends(get_ticket_service),
):
    return await service.update_ticket(actor, ticket_id, body)


@router.put("/{ticket_id}/assign", response_model=TicketOut)
async def assign_ticket(
    ticket_id: str,
    body: AssignRequest,
    actor: str = Depends(get_current_actor),
    service: TicketService = Depends(get_ticket_service),
):
    return await service.assign_ticket(actor, ticket_id, body.assignee_id)


@router.delete("/{ticket_id}", response_model=MessageResponse)
async def delete_ticket(
    ticket_id: str,
    actor: str = Depends(get_current_actor),
    service: TicketService = Depends(get_ticket_service),
):
    return await service.delete_ticket(actor, ticket_id)


@router.post("/{ticket_id}/comments", status_code=201, response_model=CommentOut)
async def add_comment(
    ticket_id: str,
    body: CommentCreate,
    actor: str = Depends(get_current_actor),
    service: TicketService = Depends(get_ticket_service),
):
    return await service.add_comment(actor, ticket_id, body)
