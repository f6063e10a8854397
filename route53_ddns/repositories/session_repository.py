"""Operator session repository for DynamoDB operations."""

from typing import Optional

from route53_ddns.models.session import Session
from route53_ddns.repositories.base import BaseRepository

SESSION_PARTITION_KEY = "SESSION"


class SessionRepository(BaseRepository):
    """Repository for management sessions, expired by DynamoDB TTL."""

    @staticmethod
    def _key(session_id: str) -> dict[str, str]:
        return {"PK": SESSION_PARTITION_KEY, "SK": session_id}

    async def create(self, session: Session) -> Session:
        """Store a new session."""
        item = session.model_dump()
        item.update(self._key(session.session_id))
        await self.put_item(item)
        return session

    async def get(self, session_id: str) -> Optional[Session]:
        """Get a session by ID, regardless of expiry."""
        item = await self.get_item(self._key(session_id))
        if not item:
            return None
        data = {k: v for k, v in item.items() if k not in ("PK", "SK")}
        return Session(**data)

    async def delete(self, session_id: str) -> None:
        """Delete a session."""
        await self.delete_item(self._key(session_id))
