"""User schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from lunchbell.domain.entities import ROLE_USER


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: str = Field(default=ROLE_USER, pattern="^(user|admin|superuser)$")


class UserRead(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    is_active: bool
    created_at: datetime | None
    last_login: datetime | None

    model_config = ConfigDict(from_attributes=True)
