from fastapi import APIRouter, Depends

from ..core.current_user import get_current_actor
from ..core.roles import Actor
from ..deps import get_comment_service
from ..schemas.comment import CommentCreateIn, CommentOut
from ..services.comment_service import CommentService

router = APIRouter(tags=["comments"])

@router.get("/tickets/{ticket_id}/comments", response_model=list[CommentOut])
def list_comments(
    ticket_id: int,
    service: CommentService = Depends(get_comment_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.list_comments(actor, ticket_id)

@router.post("/tickets/{ticket_id}/comments", response_model=CommentOut, status_code=201)
def create_comment(
    ticket_id: int,
    payload: CommentCreateIn,
    service: CommentService = Depends(get_comment_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.add_comment(actor, ticket_id, payload.content, payload.is_internal)
