from pydantic import BaseModel, Field
from datetime import datetime
from .user import UserSummaryOut
from .category import CategoryOut

class TicketCreateIn(BaseModel):
    title: str = Field(max_length=200)
    description: str
    priority: str | None = None
    category_id: int | None = None


class AssignIn(BaseModel):
    assignee_id: str
    expected_version: int | None = None


class StatusUpdateIn(BaseModel):
    status: str
    expected_version: int | None = None


class PriorityUpdateIn(BaseModel):
    priority: str
    expected_version: int | None = None


class TicketOut(BaseModel):
    id: int
    title: str
    description: str
    status: str
    priority: str
    category_id: int | None = None
    reporter_id: str
    assignee_id: str | None = None
    attachment_url: str | None = None
    reporter: UserSummaryOut | None = None
    assignee: UserSummaryOut | None = None
    category: CategoryOut | None = None
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None = None
    version: int

    class Config:
        from_attributes = True


class TicketPageOut(BaseModel):
    items: list[TicketOut]
    total: int
    limit: int
    offset: int

    class Config:
        from_attributes = True


class EvidenceOut(BaseModel):
    url: str
