from pydantic import BaseModel
from datetime import datetime
from .user import UserSummaryOut

class CommentCreateIn(BaseModel):
    content: str
    is_internal: bool = False

class CommentOut(BaseModel):
    id: int
    ticket_id: int
    user_id: str
    author: UserSummaryOut | None = None
    content: str
    is_internal: bool
    created_at: datetime

    class Config:
        from_attributes = True
