"""DynDNS2 update endpoint and source address echo."""

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import PlainTextResponse

from route53_ddns.auth.basic import parse_basic_auth
from route53_ddns.config import settings
from route53_ddns.dependencies import get_update_service
from route53_ddns.schemas.update import UpdateOutcome, UpdateRequest, UpdateResult
from route53_ddns.services.update_service import UpdateService
from route53_ddns.utils.client_ip import get_client_ip

router = APIRouter(tags=["DynDNS"])

BASIC_REALM = 'Basic realm="DynDNS"'


def _respond(result: UpdateResult) -> PlainTextResponse:
    headers = result.headers()
    if result.outcome is UpdateOutcome.BADAUTH:
        headers["WWW-Authenticate"] = BASIC_REALM
    return PlainTextResponse(
        result.render(), status_code=result.status_code, headers=headers
    )


@router.get(
    settings.update_path,
    response_class=PlainTextResponse,
    summary="DynDNS2 update",
    responses={
        200: {"description": "good <ip>, nochg <ip>, nohost or 911"},
        401: {"description": "badauth"},
        429: {"description": "abuse"},
    },
)
async def update_address(
    request: Request,
    hostname: str = Query("", description="Hostname to update"),
    myip: str = Query("", description="Requested address (defaults to source)"),
    authorization: str | None = Header(None),
    user_agent: str | None = Header(None),
    service: UpdateService = Depends(get_update_service),
) -> PlainTextResponse:
    """
    Bind a hostname to the caller's address.

    The credential travels in the password slot of HTTP Basic auth; the
    username slot is ignored. The response body is a single DynDNS2
    status line.
    """
    credentials = parse_basic_auth(authorization)
    if credentials is None or not credentials[1]:
        return _respond(UpdateResult(outcome=UpdateOutcome.BADAUTH))

    result = await service.process_update(
        UpdateRequest(
            hostname=hostname,
            claimed_address=myip,
            source_address=get_client_ip(request),
            credential=credentials[1],
            user_agent=user_agent,
        )
    )
    return _respond(result)


@router.get("/ip", response_class=PlainTextResponse, summary="Show source address")
async def show_source_address(request: Request) -> PlainTextResponse:
    """Return the address an update from this client would bind."""
    return PlainTextResponse(get_client_ip(request))
