from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional

from cookbook.models.user import Role


class UserCreate(BaseModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)


class UserRead(BaseModel):
    id: int
    email: EmailStr
    username: str
    role: Role
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefresh(BaseModel):
    refresh_token: str
