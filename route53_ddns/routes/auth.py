"""Operator login and logout."""

from fastapi import APIRouter, Depends, Request, Response, status

from route53_ddns.config import settings
from route53_ddns.dependencies import get_auth_service
from route53_ddns.schemas.auth import LoginRequest, LoginResponse
from route53_ddns.services.auth_service import AuthService
from route53_ddns.utils.client_ip import get_client_ip

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Invalid username or password"},
        429: {"description": "Too many failed attempts from this address or for this username"},
    },
)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Log the operator in and set the session cookie.

    Five failed attempts from one address lock that address out for
    fifteen minutes.
    """
    session = await auth_service.login(
        body.username, body.password, get_client_ip(request)
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.session_id,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="strict",
        path="/",
    )
    return LoginResponse(username=session.username, expires_at=session.expires_at)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> Response:
    """Destroy the current session and clear the cookie."""
    await auth_service.logout(request.cookies.get(settings.session_cookie_name))
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response
