from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

Role = Literal["admin", "pharmacist", "accountant"]


class UserCreate(BaseModel):
    username: str
    password: str
    name: str
    role: Role = "pharmacist"

    @field_validator("username", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: int
    username: str
    name: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
