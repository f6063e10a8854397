"""FastAPI dependencies resolving the collaborators built in create_app."""

from fastapi import Depends, Request

from route53_ddns.config import settings
from route53_ddns.models.session import Session
from route53_ddns.services.auth_service import AuthService
from route53_ddns.services.record_service import RecordService
from route53_ddns.services.update_service import UpdateService


def get_update_service(request: Request) -> UpdateService:
    """Update pipeline attached to the application."""
    return request.app.state.update_service


def get_record_service(request: Request) -> RecordService:
    """Record lifecycle service attached to the application."""
    return request.app.state.record_service


def get_auth_service(request: Request) -> AuthService:
    """Operator authentication service attached to the application."""
    return request.app.state.auth_service


async def require_session(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> Session:
    """
    Require a valid operator session cookie.

    Raises:
        UnauthorizedError: If the cookie is missing, unknown or expired
    """
    session_id = request.cookies.get(settings.session_cookie_name)
    session = await auth_service.validate(session_id)
    request.state.operator = session.username
    return session
