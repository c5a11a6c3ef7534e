from pydantic import BaseModel, Field
from datetime import datetime

class CategoryCreateIn(BaseModel):
    name: str = Field(max_length=100)
    description: str | None = None
    color: str | None = None

class CategoryOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    color: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True
