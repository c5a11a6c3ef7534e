from pydantic import BaseModel, Field
from datetime import datetime

class UserSummaryOut(BaseModel):
    id: str
    full_name: str
    email: str
    role: str

    class Config:
        from_attributes = True

class ProfileOut(UserSummaryOut):
    department: str | None = None
    phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

class ProfileUpdateIn(BaseModel):
    full_name: str | None = Field(default=None, max_length=200)
    department: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=32)

class RoleUpdateIn(BaseModel):
    role: str

class ProfileCreateIn(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    email: str = Field(max_length=255)
    full_name: str = Field(min_length=1, max_length=200)
    role: str
    department: str | None = Field(default=None, max_length=100)
