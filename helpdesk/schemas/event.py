from pydantic import BaseModel
from datetime import datetime

class EventOut(BaseModel):
    id: int
    ticket_id: int
    actor_id: str
    type: str
    from_value: str | None
    to_value: str | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
