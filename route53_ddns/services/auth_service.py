"""Operator login, sessions and login lockout."""

import secrets
import time
from collections.abc import Callable
from typing import Optional

from route53_ddns.config import settings
from route53_ddns.exceptions import RateLimitError, UnauthorizedError
from route53_ddns.logging.config import get_logger
from route53_ddns.models.session import Session
from route53_ddns.repositories.session_repository import SessionRepository
from route53_ddns.services.rate_limiter import AbuseLimiter
from route53_ddns.utils.timestamps import isoformat_utc

logger = get_logger(__name__)


def login_lockout_key(client_ip: str) -> str:
    """Lockout key for operator logins from one address."""
    return f"login:{client_ip}"


def login_user_lockout_key(username: str) -> str:
    """Lockout key for operator logins naming one username."""
    return f"login-user:{username.strip().lower()}"


class AuthService:
    """
    Single-operator authentication for the administrative API.

    The operator credential comes from settings. Failed logins count
    toward lockouts per client address and per submitted username through
    the shared AbuseLimiter.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        limiter: AbuseLimiter,
        username: Optional[str] = None,
        password: Optional[str] = None,
        session_ttl_hours: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize AuthService.

        Args:
            sessions: Session repository
            limiter: Lockout tracker for failed logins
            username: Operator username (defaults to settings)
            password: Operator password (defaults to settings)
            session_ttl_hours: Session lifetime (defaults to settings)
            clock: Unix time source
        """
        self.sessions = sessions
        self.limiter = limiter
        self.username = username or settings.admin_username
        self.password = password if password is not None else settings.admin_password
        self.session_ttl_hours = session_ttl_hours or settings.session_ttl_hours
        self._clock = clock

    def _credentials_match(self, username: str, password: str) -> bool:
        if not self.password:
            # No operator password configured: logins are disabled
            return False
        username_ok = secrets.compare_digest(
            username.encode("utf-8"), self.username.encode("utf-8")
        )
        password_ok = secrets.compare_digest(
            password.encode("utf-8"), self.password.encode("utf-8")
        )
        return username_ok and password_ok

    async def login(self, username: str, password: str, client_ip: str) -> Session:
        """
        Authenticate the operator and open a session.

        Args:
            username: Submitted username
            password: Submitted password
            client_ip: Address the login came from

        Returns:
            The new Session

        Raises:
            RateLimitError: If the client address or the username is locked out
            UnauthorizedError: If the credentials are wrong
        """
        keys = (login_lockout_key(client_ip), login_user_lockout_key(username))
        locked_until = max([await self.limiter.locked_until(key) for key in keys])
        if locked_until:
            logger.warning(
                "Login refused during lockout",
                extra={"context": {"client_ip": client_ip}},
            )
            raise RateLimitError(
                message="Too many failed login attempts, try again later",
                retry_after=max(1, locked_until - int(self._clock())),
            )

        if not self._credentials_match(username, password):
            now_locked = False
            for key in keys:
                locked, _ = await self.limiter.record_auth_failure(key)
                now_locked = now_locked or locked
            logger.warning(
                "Login failed",
                extra={"context": {"client_ip": client_ip, "locked": now_locked}},
            )
            raise UnauthorizedError(message="Invalid username or password")

        for key in keys:
            await self.limiter.record_auth_success(key)

        now = self._clock()
        session = Session(
            session_id=secrets.token_urlsafe(32),
            username=self.username,
            created_at=isoformat_utc(now),
            expires_at=int(now) + self.session_ttl_hours * 3600,
        )
        await self.sessions.create(session)
        logger.info("Operator logged in", extra={"context": {"client_ip": client_ip}})
        return session

    async def validate(self, session_id: Optional[str]) -> Session:
        """
        Resolve a session cookie to a live session.

        Raises:
            UnauthorizedError: If the session is missing, unknown or expired
        """
        if not session_id:
            raise UnauthorizedError()
        session = await self.sessions.get(session_id)
        if session is None:
            raise UnauthorizedError()
        if session.expires_at <= int(self._clock()):
            await self.sessions.delete(session_id)
            raise UnauthorizedError(message="Unauthorized: Session expired")
        return session

    async def logout(self, session_id: Optional[str]) -> None:
        """Destroy a session; unknown sessions are ignored."""
        if session_id:
            await self.sessions.delete(session_id)
