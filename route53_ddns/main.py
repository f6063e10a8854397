"""FastAPI application entry point."""

import aioboto3
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from route53_ddns.config import settings
from route53_ddns.dns.cache import ZoneCache
from route53_ddns.dns.route53 import Route53Backend
from route53_ddns.exceptions import DDNSAPIError
from route53_ddns.handlers.exception_handler import (
    ddns_api_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from route53_ddns.logging.config import configure_logging
from route53_ddns.middleware.logging import LoggingMiddleware
from route53_ddns.repositories import (
    CounterRepository,
    EventRepository,
    RecordRepository,
    SessionRepository,
)
from route53_ddns.routes import admin, auth, status, update
from route53_ddns.services.auth_service import AuthService
from route53_ddns.services.rate_limiter import AbuseLimiter
from route53_ddns.services.record_service import RecordService
from route53_ddns.services.update_service import UpdateService

configure_logging()

DESCRIPTION = f"""
## Dynamic Route 53 DNS

Keeps Route 53 A/AAAA records pointed at hosts with changing public
addresses, using the DynDNS2 protocol spoken by most routers and
firewalls.

### Update endpoint

```
GET {settings.update_path}?hostname=home.example.com&myip=203.0.113.5
Authorization: Basic base64(anything:<update credential>)
```

Responds with one plain-text line: `good <ip>`, `nochg <ip>`, `nohost`,
`badauth`, `abuse` or `911`. Omit `myip` to bind the request's source
address; a `myip` that differs from the source address is refused.

### Rate limits

- {settings.rate_limit_per_window} update requests per hostname per
  {settings.rate_limit_window_seconds} seconds
- {settings.lockout_threshold} failed credentials from one address lock
  that address out for {settings.lockout_duration_seconds} seconds

### Administration

Log in with `POST /auth/login`; the `/admin` routes use the session
cookie. Update credentials are shown once, at creation or regeneration.
"""


def create_app(session: aioboto3.Session | None = None) -> FastAPI:
    """
    Build the application and its collaborators.

    Args:
        session: aioboto3 session shared by repositories and the DNS backend

    Returns:
        Configured FastAPI application
    """
    session = session or aioboto3.Session()

    records = RecordRepository(session=session)
    events = EventRepository(session=session)
    limiter = AbuseLimiter(CounterRepository(session=session))
    dns = Route53Backend(
        session=session,
        zone_cache=ZoneCache(settings.zone_cache_ttl_seconds),
    )

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.update_service = UpdateService(records, events, limiter, dns)
    app.state.record_service = RecordService(records, events, dns)
    app.state.auth_service = AuthService(SessionRepository(session=session), limiter)

    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(DDNSAPIError, ddns_api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(update.router)
    app.include_router(auth.router)
    app.include_router(admin.router)
    app.include_router(status.router)

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """API information."""
        return {
            "message": f"Welcome to {settings.api_title}",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/status",
            "update": settings.update_path,
        }

    return app


app = create_app()
