from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field


class UserUpdateRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=80)
    last_name: str = Field(min_length=1, max_length=80)
    email: EmailStr
