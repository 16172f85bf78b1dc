from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from db.models.user import UserRole
from schemas.common import UserMini


class LoginIn(BaseModel):
    username: str = Field(min_length=1, max_length=80)
    password: str = Field(min_length=1)


class UserOut(UserMini):
    email: Optional[str] = None
    role: UserRole
    is_active: bool
