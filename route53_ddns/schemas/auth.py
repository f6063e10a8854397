"""Pydantic schemas for operator login."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Operator credentials."""

    username: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., min_length=1, max_length=1024, repr=False)


class LoginResponse(BaseModel):
    """Successful login; the session itself travels in a cookie."""

    status: str = Field(default="ok")
    username: str
    expires_at: int = Field(..., description="Unix time the session expires")
