"""Operator session model for DynamoDB."""

from pydantic import BaseModel, Field


class Session(BaseModel):
    """
    Management session created by a successful operator login.

    Attributes:
        session_id: Random session identifier (cookie value)
        username: Operator username
        created_at: ISO 8601 creation timestamp
        expires_at: Unix timestamp after which the session is invalid
    """

    session_id: str = Field(..., description="Session identifier")
    username: str = Field(..., description="Operator username")
    created_at: str = Field(..., description="ISO 8601 creation timestamp")
    expires_at: int = Field(..., description="Unix expiry timestamp")
