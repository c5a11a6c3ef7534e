from __future__ import annotations

import logging
import os

import anyio
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from ..core.current_user import get_current_actor
from ..core.roles import Actor
from ..core.settings import settings
from ..deps import get_ticket_service
from ..schemas.event import EventOut
from ..schemas.ticket import (
    AssignIn,
    EvidenceOut,
    PriorityUpdateIn,
    StatusUpdateIn,
    TicketCreateIn,
    TicketOut,
    TicketPageOut,
)
from ..services.ticket_service import TicketService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["tickets"])

CHUNK_BYTES = 1024 * 1024
DENY_EXT = {".exe", ".bat", ".cmd", ".ps1", ".sh", ".js", ".msi", ".com", ".scr"}


@router.post("", response_model=TicketOut, status_code=201)
def create_ticket(
    payload: TicketCreateIn,
    service: TicketService = Depends(get_ticket_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.create_ticket(
        actor,
        payload.title,
        payload.description,
        priority=payload.priority,
        category_id=payload.category_id,
    )


@router.get("", response_model=TicketPageOut)
def list_tickets(
    status: str | None = Query(default=None),
    priority: str | None = Query(default=None),
    category_id: int | None = Query(default=None),
    reporter_id: str | None = Query(default=None),
    assignee_id: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    service: TicketService = Depends(get_ticket_service),
    actor: Actor = Depends(get_current_actor),
):
    page = service.list_tickets(
        actor,
        status=status,
        priority=priority,
        category_id=category_id,
        reporter_id=reporter_id,
        assignee_id=assignee_id,
        limit=limit,
        offset=offset,
    )
    return {"items": page.items, "total": page.total, "limit": page.limit, "offset": page.offset}


@router.get("/{ticket_id}", response_model=TicketOut)
def get_ticket(
    ticket_id: int,
    service: TicketService = Depends(get_ticket_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.get_ticket(actor, ticket_id)


@router.patch("/{ticket_id}/assign", response_model=TicketOut)
def assign_ticket(
    ticket_id: int,
    payload: AssignIn,
    service: TicketService = Depends(get_ticket_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.assign_ticket(actor, ticket_id, payload.assignee_id, payload.expected_version)


@router.patch("/{ticket_id}/status", response_model=TicketOut)
def update_status(
    ticket_id: int,
    payload: StatusUpdateIn,
    service: TicketService = Depends(get_ticket_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.update_status(actor, ticket_id, payload.status, payload.expected_version)


@router.patch("/{ticket_id}/priority", response_model=TicketOut)
def update_priority(
    ticket_id: int,
    payload: PriorityUpdateIn,
    service: TicketService = Depends(get_ticket_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.update_priority(actor, ticket_id, payload.priority, payload.expected_version)


@router.get("/{ticket_id}/events", response_model=list[EventOut])
def list_events(
    ticket_id: int,
    service: TicketService = Depends(get_ticket_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.ticket_events(actor, ticket_id)


@router.post("/{ticket_id}/evidence", response_model=EvidenceOut)
async def upload_evidence(
    ticket_id: int,
    file: UploadFile = File(...),
    expected_version: int | None = Query(default=None),
    service: TicketService = Depends(get_ticket_service),
    actor: Actor = Depends(get_current_actor),
):
    """Multipart upload of a single evidence file; replaces the ticket's attachment."""
    await anyio.to_thread.run_sync(lambda: service.evidence_target(actor, ticket_id, expected_version))

    filename = file.filename or "upload.bin"
    _, ext = os.path.splitext(filename.lower())
    if ext in DENY_EXT:
        logger.info("rejected evidence %s for ticket %s from %s", filename, ticket_id, actor.id)
        raise HTTPException(status_code=400, detail="File type not allowed")

    buf = bytearray()
    while True:
        chunk = await file.read(CHUNK_BYTES)
        if not chunk:
            break
        if len(buf) + len(chunk) > settings.MAX_EVIDENCE_BYTES:
            logger.info("evidence for ticket %s exceeds %s bytes", ticket_id, settings.MAX_EVIDENCE_BYTES)
            raise HTTPException(status_code=413, detail="File too large")
        buf.extend(chunk)
    data = bytes(buf)

    content_type = file.content_type or "application/octet-stream"
    url = await anyio.to_thread.run_sync(
        lambda: service.attach_evidence(
            actor,
            ticket_id,
            data,
            filename=filename,
            content_type=content_type,
            expected_version=expected_version,
        )
    )
    return {"url": url}


@router.delete("/{ticket_id}", status_code=204)
def delete_ticket(
    ticket_id: int,
    service: TicketService = Depends(get_ticket_service),
    actor: Actor = Depends(get_current_actor),
):
    service.delete_ticket(actor, ticket_id)
