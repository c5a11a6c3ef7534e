from fastapi import Depends
from sqlalchemy.orm import Session

from .db import get_session
from .services.blob_store import BlobStore, get_blob_store
from .services.category_service import CategoryService
from .services.comment_service import CommentService
from .services.profile_service import ProfileService
from .services.repository import TicketRepository
from .services.ticket_service import TicketService


def get_repository(session: Session = Depends(get_session)) -> TicketRepository:
    return TicketRepository(session)


def get_ticket_service(
    repo: TicketRepository = Depends(get_repository),
    blobs: BlobStore = Depends(get_blob_store),
) -> TicketService:
    return TicketService(repo, blobs)


def get_comment_service(repo: TicketRepository = Depends(get_repository)) -> CommentService:
    return CommentService(repo)


def get_profile_service(repo: TicketRepository = Depends(get_repository)) -> ProfileService:
    return ProfileService(repo)


def get_category_service(repo: TicketRepository = Depends(get_repository)) -> CategoryService:
    return CategoryService(repo)
